import numpy


class ContextRing:
    """ A fixed-capacity ring of context buffers (past hidden layer
    activations) stored in a single preallocated array.

    Index 0 is the most recently pushed buffer and index `len(ring) - 1`
    the oldest. Pushing a new buffer discards the oldest one.
    """

    def __init__(self, n_contexts, width, fill=0.5, dtype=numpy.float64):
        """ Initialize a context ring

        Parameters
        ----------
        n_contexts: int
            The number of context buffers held by the ring. Zero yields an
            empty ring, for which `push` is a no-op.

        width: int
            The length of every context buffer

        fill: float, default=0.5
            The initial value for every entry of every buffer

        dtype: numpy dtype, default=numpy.float64
            The precision of the buffers

        """
        if not isinstance(n_contexts, (int, numpy.integer)) or n_contexts < 0:
            msg = "Number of contexts ({!r}) must be a non-negative integer"
            raise ValueError(msg.format(n_contexts))

        self.arena = numpy.full((n_contexts, width), fill, dtype=dtype)
        self.head = 0

    @classmethod
    def from_buffers(cls, buffers, width, dtype=numpy.float64):
        """ Create a ring holding copies of `buffers`, where `buffers[0]` is
        taken as the most recent one
        """
        buffers = [numpy.asarray(buffer, dtype=dtype) for buffer in buffers]

        for buffer in buffers:
            if buffer.shape != (width,):
                msg = "Context buffer has shape {} but should be ({},)"
                raise ValueError(msg.format(buffer.shape, width))

        ring = cls(len(buffers), width, dtype=dtype)
        for i, buffer in enumerate(buffers):
            ring.arena[i] = buffer

        return ring

    def __len__(self):
        return self.arena.shape[0]

    def __getitem__(self, index):
        n = len(self)
        if not -n <= index < n:
            raise IndexError("Context index out of range")
        return self.arena[(self.head + index) % n]

    def __iter__(self):
        for index in range(len(self)):
            yield self[index]

    @property
    def width(self):
        return self.arena.shape[1]

    def push(self, buffer):
        """ Copy `buffer` into position 0, shifting the other buffers back by
        one position and discarding the oldest
        """
        n = len(self)
        if n == 0:
            return

        self.head = (self.head - 1) % n
        self.arena[self.head] = buffer

    def total(self, n_entries=None):
        """ Sum of the first `n_entries` entries over all buffers (the
        default of None sums every entry)
        """
        return self.arena[:, :n_entries].sum()

    def to_list(self):
        """ Copies of the buffers, most recent first
        """
        return [buffer.copy() for buffer in self]
