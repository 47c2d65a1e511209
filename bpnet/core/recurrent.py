import logging

import numpy

from .exception import InvalidArgument
from .network import SUPPORTED_DTYPES
from bpnet.util import activation as act
from bpnet.util.linalg import dot


_logger_name = __name__.rsplit('.', 1)[-1]
logger = logging.getLogger(_logger_name)


class RecurrentNetwork:
    """
    A fully recurrent network whose weights come from an external optimizer
    (e.g., an evolutionary search); it is never trained by backpropagation.

    All units live in a single layer of `n_outputs + n_hiddens` units, the
    outputs first. At each step, the input layer is the concatenation of
    the current inputs, the previous step's hidden units, and a bias unit::

        x = [inputs, hidden_prev, 1]
        units = tanh(dot(weights, x))
        outputs = units[:n_outputs]

    In regression mode the output units are the identity of their sums.
    """
    def __init__(self, n_inputs, n_hiddens, n_outputs, regression=False,
                 dtype=numpy.float64):
        for name, size in (('n_inputs', n_inputs), ('n_hiddens', n_hiddens),
                           ('n_outputs', n_outputs)):
            if not isinstance(size, (int, numpy.integer)) or size < 0:
                msg = "`{}` must be a non-negative integer (got {!r})"
                raise InvalidArgument(msg.format(name, size))

        self.n_inputs = n_inputs
        self.n_hiddens = n_hiddens
        self.n_outputs = n_outputs
        self.regression = bool(regression)

        try:
            self.dtype = numpy.dtype(dtype).type
        except TypeError:
            raise InvalidArgument("Unknown dtype {!r}".format(dtype))
        if self.dtype not in SUPPORTED_DTYPES:
            msg = "dtype must be float32 or float64 (got {})"
            raise InvalidArgument(msg.format(numpy.dtype(dtype).name))

        n_units = n_outputs + n_hiddens

        # +1 for bias
        self.input_activations = numpy.ones(
            n_inputs + n_hiddens + 1, dtype=self.dtype)
        self.unit_activations = numpy.zeros(n_units, dtype=self.dtype)

        self.weights = numpy.zeros(
            (n_units, n_inputs + n_hiddens + 1), dtype=self.dtype)

    def __repr__(self):
        msg = "<RecurrentNetwork n_inputs=%d, n_hiddens=%d, n_outputs=%d>"
        return msg % (self.n_inputs, self.n_hiddens, self.n_outputs)

    @property
    def n_weights(self):
        return self.weights.size

    def get_weights(self):
        return self.weights.ravel().copy()

    def set_weights(self, weights):
        """ Load a flat, row-major weight vector of length `n_weights`
        """
        weights = numpy.asarray(weights, dtype=self.dtype)

        if weights.shape != (self.n_weights,):
            msg = "Weight vector has shape {} but should be ({},)"
            raise InvalidArgument(msg.format(weights.shape, self.n_weights))

        self.weights[...] = weights.reshape(self.weights.shape)

    def reset(self):
        """ Forget the recurrent state, e.g., before a new sequence
        """
        self.unit_activations[self.n_outputs:] = 0

    @property
    def hidden_state(self):
        return self.unit_activations[self.n_outputs:].copy()

    def update(self, inputs):
        """
        Advance the network by one step.

        Parameters
        ----------
        inputs: array-like, shape=(n_inputs,)

        Returns
        -------
        outputs: ndarray, shape=(n_outputs,)
        """
        inputs = numpy.asarray(inputs, dtype=self.dtype)

        if inputs.shape != (self.n_inputs,):
            msg = "Wrong number of input values: got shape {}, expected ({},)"
            raise InvalidArgument(msg.format(inputs.shape, self.n_inputs))

        n_in = self.n_inputs
        n_out = self.n_outputs

        self.input_activations[:n_in] = inputs
        self.input_activations[n_in:n_in+self.n_hiddens] = \
            self.unit_activations[n_out:]

        sums = numpy.array(
            [dot(self.input_activations, row) for row in self.weights],
            dtype=self.dtype)

        self.unit_activations[...] = act.tanh(sums)

        if self.regression:
            self.unit_activations[:n_out] = sums[:n_out]

        return self.unit_activations[:n_out].copy()
