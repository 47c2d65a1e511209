"""
A neural network with a single hidden layer trained by online
backpropagation with momentum.

Input (R^n) => Hidden (R^h) => Output (R^m)

Both the input and hidden layers carry an extra bias unit that is fixed
at 1.0. Adding contexts (see :meth:`Network.set_contexts`) turns the
network into an Elman simple recurrent network: the hidden activations
of past forward passes are fed back into the hidden layer.
"""
import contextlib
import logging

import numpy
from sklearn.utils import check_random_state

from .context import ContextRing
from .exception import InvalidArgument
from .trainer import Trainer
from bpnet.score_functions import sum_squared_error
from bpnet.util import activation as act
from bpnet.util.linalg import axpy, dot, scal


_logger_name = __name__.rsplit('.', 1)[-1]
logger = logging.getLogger(_logger_name)

SUPPORTED_DTYPES = (numpy.float32, numpy.float64)

# Initial value of every entry of a freshly allocated context buffer
CONTEXT_FILL = 0.5


class Network:
    """
    Single hidden layer neural network.

    params: input_weights, where input_weights[i, j] = weight from input
                unit j (the last one being the bias) to hidden unit i.
            output_weights, where output_weights[i, j] = weight from hidden
                unit j (the last one being the bias) to output unit i.

    For a single vector input, the computation chain is:
    h = hidden_layer = f(dot(input_weights, [input, 1]) + context_sum)
    output = g(dot(output_weights, [h, 1]))

    where `f` is the hidden activation, `g` is `f` or the identity in
    regression mode, and `context_sum` is the sum over all context buffers.
    """
    def __init__(self, n_inputs, n_hiddens, n_outputs, regression=False,
                 activation=act.LOGISTIC, dropout_rate=0.0,
                 scale_weights=False, dtype=numpy.float64, random_state=None):
        """
        Parameters
        ----------
        n_inputs: int
            Number of input units (not counting the bias unit).

        n_hiddens: int
            Number of hidden units (not counting the bias unit). Zero is
            allowed, which leaves a model whose output only depends on the
            hidden bias unit.

        n_outputs: int
            Number of output units.

        regression: bool, default=False
            If True, the output units compute the identity of their weighted
            sum rather than applying the activation function.

        activation: str, default='logistic'
            The activation used by the hidden layer (and by the output
            layer when `regression` is False). One of 'logistic', 'tanh',
            or 'identity'.

        dropout_rate: float, default=0.0
            Probability in [0, 1) that a hidden unit is dropped for a
            training pattern. Zero disables dropout.

        scale_weights: bool, default=False
            If True, the initial uniform weights are divided by the square
            root of the fan-in of their layer.

        dtype: numpy dtype, default=numpy.float64
            Either numpy.float32 or numpy.float64. All buffers and weights
            are stored with this precision.

        random_state: int, numpy.random.RandomState, or None, default=None
            Source of randomness for weight initialization and, unless
            overridden, for dropout masks.
        """
        self._validate_sizes(n_inputs, n_hiddens, n_outputs)

        try:
            dtype = numpy.dtype(dtype).type
        except TypeError:
            raise InvalidArgument("Unknown dtype {!r}".format(dtype))
        if dtype not in SUPPORTED_DTYPES:
            msg = "dtype must be float32 or float64 (got {})"
            raise InvalidArgument(msg.format(numpy.dtype(dtype).name))

        self.n_inputs = n_inputs
        self.n_hiddens = n_hiddens
        self.n_outputs = n_outputs
        self.dtype = dtype
        self.regression = bool(regression)
        self.scale_weights = scale_weights
        self.random_state = check_random_state(random_state)

        self._activation = self._resolve_activation(activation)

        # (hidden, output) pair set temporarily by `activation_override`
        self._override = (None, None)

        self.set_dropout(dropout_rate)
        self.dropout_mask = None

        # +1 for the bias units. The last entry is never overwritten.
        self.input_activations = numpy.ones(n_inputs + 1, dtype=dtype)
        self.hidden_activations = numpy.ones(n_hiddens + 1, dtype=dtype)
        self.output_activations = numpy.ones(n_outputs, dtype=dtype)

        # This both allocates and randomizes.
        self.randomize_weights()

        # No contexts => plain feed-forward network.
        self.contexts = ContextRing(0, n_hiddens + 1, dtype=dtype)

    def __repr__(self):
        return "<Network n_inputs=%d, n_hiddens=%d, n_outputs=%d>" % (
            self.n_inputs, self.n_hiddens, self.n_outputs)

    @staticmethod
    def _validate_sizes(n_inputs, n_hiddens, n_outputs):
        sizes = (('n_inputs', n_inputs, 1),
                 ('n_hiddens', n_hiddens, 0),
                 ('n_outputs', n_outputs, 1))

        for name, size, minimum in sizes:
            if not isinstance(size, (int, numpy.integer)) or size < minimum:
                msg = "`{}` must be an integer >= {} (got {!r})"
                raise InvalidArgument(msg.format(name, minimum, size))

    @staticmethod
    def _resolve_activation(activation):
        try:
            return act.get_activation(activation)
        except ValueError as e:
            raise InvalidArgument(str(e))

    def randomize_weights(self):
        """
        Draw all weights independently from the uniform distribution on
        [-1, 1] (divided by the square root of the fan-in when
        `scale_weights` is set) and zero the momentum buffers.
        """
        input_shape = (self.n_hiddens, self.n_inputs + 1)
        output_shape = (self.n_outputs, self.n_hiddens + 1)

        rs = self.random_state
        self.input_weights = rs.uniform(-1, 1, size=input_shape).astype(
            self.dtype)
        self.output_weights = rs.uniform(-1, 1, size=output_shape).astype(
            self.dtype)

        if self.scale_weights:
            self.input_weights /= numpy.sqrt(input_shape[1])
            self.output_weights /= numpy.sqrt(output_shape[1])

        self.input_changes = numpy.zeros_like(self.input_weights)
        self.output_changes = numpy.zeros_like(self.output_weights)

    ##########################################################
    # Configuration

    @property
    def activation(self):
        """ The name of the stored hidden activation
        """
        return self._activation.name

    @property
    def hidden_activation(self):
        """ The :class:`ActivationFunction` currently used by the hidden
        layer
        """
        return self._override[0] or self._activation

    @property
    def output_activation(self):
        """ The :class:`ActivationFunction` currently used by the output
        layer
        """
        if self._override[1] is not None:
            return self._override[1]
        elif self.regression:
            return act.ACTIVATIONS[act.IDENTITY]
        else:
            return self._activation

    def set_activation(self, activation):
        """ Replace the activation function and its derivative. Do this
        before training; switching mid-training mixes gradients of
        different functions.
        """
        self._activation = self._resolve_activation(activation)

    def set_tanh_activation(self):
        self.set_activation(act.TANH)

    @contextlib.contextmanager
    def activation_override(self, hidden=None, output=None):
        """ Temporarily use different hidden and/or output activations.
        The stored activation is untouched and the previous state is
        restored on exit. Usage::

            with network.activation_override(output='identity'):
                network.update(inputs)
        """
        previous = self._override

        self._override = (
            None if hidden is None else self._resolve_activation(hidden),
            None if output is None else self._resolve_activation(output),
        )

        try:
            yield self
        finally:
            self._override = previous

    def set_dropout(self, dropout_rate):
        try:
            dropout_rate = float(dropout_rate)
        except (ValueError, TypeError):
            msg = "`dropout_rate` must be numeric (got {!r})"
            raise InvalidArgument(msg.format(dropout_rate))

        if not 0.0 <= dropout_rate < 1.0:
            msg = "`dropout_rate` must be in [0, 1) (got {})"
            raise InvalidArgument(msg.format(dropout_rate))

        self.dropout_rate = dropout_rate

    def draw_dropout_mask(self, random_state=None):
        """
        Draw a new dropout mask for the hidden units, which puts the
        network into training mode until :meth:`clear_dropout_mask` is
        called. Each hidden unit is dropped independently with probability
        `dropout_rate`.

        Parameters
        ----------
        random_state: numpy.random.RandomState, default=None
            The default (None) uses the network's random state.

        Returns
        -------
        mask: ndarray (dtype=bool) or None
            True where a unit is dropped. None when dropout is disabled.
        """
        if self.dropout_rate == 0:
            self.dropout_mask = None
        else:
            rs = (self.random_state if random_state is None
                  else check_random_state(random_state))
            self.dropout_mask = rs.rand(self.n_hiddens) < self.dropout_rate

        return self.dropout_mask

    def clear_dropout_mask(self):
        self.dropout_mask = None

    def set_contexts(self, n_contexts, init_values=None):
        """
        Set the contexts used as recurrent memory.

        Without contexts the network is a simple feed-forward network.
        With contexts it behaves like an Elman simple recurrent network.
        Calling this again discards the current recurrent memory, which is
        how a new, independent sequence is started.

        Parameters
        ----------
        n_contexts: int
            The number of context buffers, each filled with 0.5.
            Ignored when `init_values` is given.

        init_values: list of array-like, default=None
            Custom context buffers, most recent first. Each must have
            length `n_hiddens + 1` (the last entry matches the bias unit).
        """
        width = self.n_hiddens + 1

        try:
            if init_values is None:
                self.contexts = ContextRing(
                    n_contexts, width, fill=CONTEXT_FILL, dtype=self.dtype)
            else:
                self.contexts = ContextRing.from_buffers(
                    init_values, width, dtype=self.dtype)
        except ValueError as e:
            raise InvalidArgument(str(e))

        logger.debug("Configured {:d} context(s)".format(len(self.contexts)))

    ##########################################################
    # Weight serialization

    @property
    def n_weights(self):
        """ The length of the flat weight vector
        """
        return self.input_weights.size + self.output_weights.size

    def get_weights(self):
        """
        Returns
        -------
        weights: ndarray, shape=(n_weights,)
            The input weights followed by the output weights, each in
            row-major (destination unit major) order.
        """
        return numpy.concatenate(
            [self.input_weights.ravel(), self.output_weights.ravel()])

    def set_weights(self, weights):
        """ Load a flat weight vector laid out as by :meth:`get_weights`
        """
        weights = numpy.asarray(weights, dtype=self.dtype)

        if weights.shape != (self.n_weights,):
            msg = "Weight vector has shape {} but should be ({},)"
            raise InvalidArgument(msg.format(weights.shape, self.n_weights))

        split = self.input_weights.size
        self.input_weights[...] = weights[:split].reshape(
            self.input_weights.shape)
        self.output_weights[...] = weights[split:].reshape(
            self.output_weights.shape)

    ##########################################################
    # Forward activation

    def _as_vector(self, values, size, name):
        values = numpy.asarray(values, dtype=self.dtype)

        if values.shape != (size,):
            msg = "Wrong number of {} values: got shape {}, expected ({},)"
            raise InvalidArgument(msg.format(name, values.shape, size))

        return values

    def _activate_hidden(self, noise=None):
        n_hiddens = self.n_hiddens

        sums = numpy.empty(n_hiddens, dtype=self.dtype)
        for i in range(n_hiddens):
            sums[i] = dot(self.input_activations, self.input_weights[i])

        # Every context contributes the same total to every hidden unit.
        sums += self.contexts.total(n_hiddens)

        values = self.hidden_activation.function(sums)

        if noise is not None:
            values = act.normalize(values + noise)

        if self.dropout_mask is not None:
            values[self.dropout_mask] = 0
        elif self.dropout_rate > 0:
            # Inference: scale by the keep probability so that the output
            # layer sees the expected training-time input.
            values *= 1 - self.dropout_rate

        self.hidden_activations[:n_hiddens] = values

        self.contexts.push(self.hidden_activations)

    def _activate_output(self, noise=None):
        sums = numpy.empty(self.n_outputs, dtype=self.dtype)
        for i in range(self.n_outputs):
            sums[i] = dot(self.hidden_activations, self.output_weights[i])

        values = self.output_activation.function(sums)

        if noise is not None:
            values = values + noise
            if not self.regression:
                values = act.normalize(values)

        self.output_activations[:] = values

        return self.output_activations.copy()

    def update(self, inputs):
        """
        Activate the network.

        Parameters
        ----------
        inputs: array-like, shape=(n_inputs,)
            The input values.

        Returns
        -------
        outputs: ndarray, shape=(n_outputs,)
            The output activations. These are in [0, 1] for the logistic
            activation unless `regression` is set.
        """
        inputs = self._as_vector(inputs, self.n_inputs, 'input')

        self.input_activations[:self.n_inputs] = inputs
        self._activate_hidden()

        return self._activate_output()

    def update_with_noise(self, inputs, noise):
        """
        Activate the network while perturbing every layer, for evaluating
        robustness to noise. Inputs, hidden values, and outputs (except in
        regression mode) are clamped to [0, 1] after the noise is added.

        Parameters
        ----------
        inputs: array-like, shape=(n_inputs,)
            The input values.

        noise: sequence of three array-likes
            The additive noise for the input, hidden, and output layers, of
            lengths `n_inputs`, `n_hiddens`, and `n_outputs`.

        Returns
        -------
        outputs: ndarray, shape=(n_outputs,)
        """
        inputs = self._as_vector(inputs, self.n_inputs, 'input')

        if len(noise) != 3:
            msg = "Expected 3 noise vectors (input, hidden, output), got {}"
            raise InvalidArgument(msg.format(len(noise)))

        input_noise = self._as_vector(noise[0], self.n_inputs, 'input noise')
        hidden_noise = self._as_vector(
            noise[1], self.n_hiddens, 'hidden noise')
        output_noise = self._as_vector(
            noise[2], self.n_outputs, 'output noise')

        self.input_activations[:self.n_inputs] = act.normalize(
            inputs + input_noise)
        self._activate_hidden(noise=hidden_noise)

        return self._activate_output(noise=output_noise)

    def update_from_hidden(self, hidden):
        """ Compute only the output layer from externally supplied hidden
        activations of shape (n_hiddens,). The contexts are left alone.
        """
        hidden = self._as_vector(hidden, self.n_hiddens, 'hidden')

        self.hidden_activations[:self.n_hiddens] = hidden

        return self._activate_output()

    ##########################################################
    # Backpropagation

    @staticmethod
    def _update_weights(weights, changes, deltas, sources,
                        learning_rate, momentum, frozen=None):
        # change = learning_rate * delta_i * source + momentum * change
        for i, delta in enumerate(deltas):
            change = changes[i]
            scal(momentum, change)
            axpy(learning_rate * delta, sources, change)

            if frozen is not None and frozen[i]:
                continue

            axpy(1.0, change, weights[i])

    def back_propagate(self, targets, learning_rate, momentum):
        """
        Back propagate the error of the most recent activation and update
        the weights.

        Parameters
        ----------
        targets: array-like, shape=(n_outputs,)
            The desired outputs for the most recent call to `update`.

        learning_rate: float
            Scales the gradient step.

        momentum: float
            The fraction of the previous weight change added to the
            current one.

        Returns
        -------
        error: float
            The summed squared error, sum((targets - outputs)**2), of the
            outputs prior to the weight update.
        """
        targets = self._as_vector(targets, self.n_outputs, 'target')

        n_hiddens = self.n_hiddens
        outputs = self.output_activations

        output_deltas = (self.output_activation.derivative(outputs) *
                         (targets - outputs))

        # Back-project the output deltas onto the (non-bias) hidden units.
        hidden_errors = numpy.zeros(n_hiddens, dtype=self.dtype)
        for j in range(self.n_outputs):
            axpy(output_deltas[j], self.output_weights[j, :n_hiddens],
                 hidden_errors)

        hidden = self.hidden_activations[:n_hiddens]
        hidden_deltas = self.hidden_activation.derivative(hidden) * \
            hidden_errors

        self._update_weights(
            self.output_weights, self.output_changes, output_deltas,
            self.hidden_activations, learning_rate, momentum)

        # Incoming weights of dropped hidden units stay as they are.
        self._update_weights(
            self.input_weights, self.input_changes, hidden_deltas,
            self.input_activations, learning_rate, momentum,
            frozen=self.dropout_mask)

        return sum_squared_error(targets, outputs)

    ##########################################################
    # Training

    def train(self, patterns, iterations, learning_rate, momentum,
              debug=False, **kwargs):
        """
        Train the network on `patterns` for `iterations` passes. See
        :class:`bpnet.core.trainer.Trainer` for the remaining keyword
        arguments.

        Returns
        -------
        errors: ndarray, shape=(iterations,)
            The summed squared error over all patterns of each iteration.
        """
        trainer = Trainer(
            network=self, iterations=iterations,
            learning_rate=learning_rate, momentum=momentum, debug=debug,
            **kwargs)

        return trainer.train(patterns)

    def test(self, patterns):
        """ Activate the network on each pattern's inputs and return a list
        of (inputs, outputs, targets) triples
        """
        return Trainer(network=self).test(patterns)
