class InvalidArgument(ValueError):
    """ Raised when a vector or configuration argument does not match the
    network's topology (e.g., an input vector with the wrong length)
    """
