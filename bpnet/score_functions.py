import numpy


def sum_squared_error(targets, outputs):
    """ Compute the summed squared difference between `targets` and
    `outputs`, i.e., sum((targets - outputs)**2). There is no factor of 1/2.
    """
    diff = numpy.asarray(targets) - numpy.asarray(outputs)
    return float(numpy.dot(diff, diff))


def mean_squared_error(targets, outputs):
    """ Compute the summed squared error divided by the number of values
    """
    n_values = numpy.size(targets)

    if n_values == 0:
        # Nothing to compare, so there's no error to speak of.
        return 0.0
    else:
        return sum_squared_error(targets, outputs) / n_values
