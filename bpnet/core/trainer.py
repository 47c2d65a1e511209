import logging

import numpy
from sklearn.utils import check_random_state

from .exception import InvalidArgument
from bpnet.score_functions import mean_squared_error


_logger_name = __name__.rsplit('.', 1)[-1]
logger = logging.getLogger(_logger_name)

DEFAULT_ITERATIONS = 1000
DEFAULT_LEARNING_RATE = 0.6
DEFAULT_MOMENTUM = 0.4
DEFAULT_REPORT_EVERY = 1000


class Trainer:
    """ Manages the training schedule of a network and runs the
    forward/backward passes over a set of patterns
    """
    def __init__(self,
                 network,
                 iterations=DEFAULT_ITERATIONS,
                 learning_rate=DEFAULT_LEARNING_RATE,
                 momentum=DEFAULT_MOMENTUM,
                 debug=False,
                 report_every=DEFAULT_REPORT_EVERY,
                 hidden_activation=None,
                 output_activation=None,
                 random_state=None,
                 on_iterate=None,
                 ):
        """
        Parameters
        ----------
        network: Network
            The network to train. It is updated in place.

        iterations: int, default=1000
            Number of full passes over the patterns.

        learning_rate: float, default=0.6
            The gradient step size.

        momentum: float, default=0.4
            The fraction of the previous weight change carried into the
            current one.

        debug: bool, default=False
            If True, the error is logged every `report_every` iterations.

        report_every: int, default=1000
            The reporting period used when `debug` is True.

        hidden_activation, output_activation: str, default=None
            Activations to use for this run only, instead of those stored
            by the network. None keeps the network's own.

        random_state: int, numpy.random.RandomState, default=None
            Source of the dropout masks. The default (None) uses the
            network's random state.

        on_iterate: callable or list of callables, default=None
            Each is called as `on_iterate(iteration, error)` after every
            iteration. Training stops early when any of them returns True.
            See :mod:`bpnet.util.on_iterate`.
        """
        self.network = network

        # Input validation for the training schedule
        if (not isinstance(iterations, (int, numpy.integer)) or
                iterations < 0):
            msg = "`iterations` must be a non-negative integer (got {!r})"
            raise ValueError(msg.format(iterations))
        self.iterations = int(iterations)

        try:
            self.learning_rate = float(learning_rate)
            self.momentum = float(momentum)
        except (ValueError, TypeError):
            msg = "`learning_rate` and `momentum` must be numeric"
            raise ValueError(msg)

        if (not isinstance(report_every, (int, numpy.integer)) or
                report_every < 1):
            msg = "`report_every` must be a positive integer (got {!r})"
            raise ValueError(msg.format(report_every))
        self.report_every = int(report_every)

        self.debug = debug
        self.hidden_activation = hidden_activation
        self.output_activation = output_activation

        if random_state is None:
            self.random_state = network.random_state
        else:
            self.random_state = check_random_state(random_state)

        if on_iterate is None:
            self.on_iterate = []
        elif callable(on_iterate):
            self.on_iterate = [on_iterate]
        else:
            self.on_iterate = list(on_iterate)

        # Index of the iteration being run
        self.iteration = 0

    def _log_with_iter(self, msg, level='info'):
        """ Write to the logger with the current iteration number prepended
        to the log message
        """
        width = len(str(self.iterations))
        full_message = "(Iteration = {:0{}d}) {:s}".format(
            self.iteration, width, msg)

        if level == 'info':
            logger.info(full_message)
        elif level == 'debug':
            logger.debug(full_message)
        elif level == 'warning':
            logger.warning(full_message)
        else:
            raise ValueError("Unknown log level: {}".format(level))

    def _validate_patterns(self, patterns):
        """ Check every pattern against the network's topology before any
        state is touched
        """
        network = self.network
        validated = []

        for index, pattern in enumerate(patterns):
            inputs, targets = pattern
            inputs = numpy.asarray(inputs, dtype=network.dtype)
            targets = numpy.asarray(targets, dtype=network.dtype)

            if inputs.shape != (network.n_inputs,):
                msg = "Pattern {} has input shape {} but should be ({},)"
                raise InvalidArgument(
                    msg.format(index, inputs.shape, network.n_inputs))

            if targets.shape != (network.n_outputs,):
                msg = "Pattern {} has target shape {} but should be ({},)"
                raise InvalidArgument(
                    msg.format(index, targets.shape, network.n_outputs))

            validated.append((inputs, targets))

        return validated

    def _stop_requested(self, error):
        # Every callback is called, even if an earlier one requested a stop.
        requests = [callback(self.iteration, error)
                    for callback in self.on_iterate]
        return any(requests)

    def train(self, patterns):
        """
        Run the configured number of iterations of online backpropagation.
        Each iteration visits every pattern in order: draw a dropout mask
        (when dropout is enabled), activate, back propagate.

        Parameters
        ----------
        patterns: iterable of (inputs, targets) pairs
            Input vectors of length `n_inputs` and target vectors of
            length `n_outputs`.

        Returns
        -------
        errors: ndarray, shape=(iterations,)
            The summed squared error over all patterns at each iteration
            (not normalized by the number of patterns). Shorter than
            `iterations` if an `on_iterate` callback stopped training.
        """
        network = self.network
        patterns = self._validate_patterns(patterns)
        errors = numpy.zeros(self.iterations, dtype=network.dtype)

        msg = "Training {!r} on {:d} patterns for {:d} iterations"
        logger.debug(msg.format(network, len(patterns), self.iterations))

        override = network.activation_override(
            hidden=self.hidden_activation, output=self.output_activation)

        try:
            with override:
                for iteration in range(self.iterations):
                    self.iteration = iteration
                    error = self._train_iteration(patterns)
                    errors[self.iteration] = error

                    if self.debug and self.iteration % self.report_every == 0:
                        self._log_with_iter("Error = {:.7f}".format(error))

                    if self._stop_requested(error):
                        self._log_with_iter("Early stop requested")
                        errors = errors[:self.iteration+1]
                        break
        finally:
            # Subsequent activations should behave as inference.
            network.clear_dropout_mask()

        logger.debug("Training finished")

        return errors

    def _train_iteration(self, patterns):
        network = self.network
        error = 0.0

        for inputs, targets in patterns:
            if network.dropout_rate > 0:
                network.draw_dropout_mask(self.random_state)

            network.update(inputs)
            error += network.back_propagate(
                targets, self.learning_rate, self.momentum)

        return error

    def test(self, patterns):
        """
        Activate the network on the inputs of each pattern.

        Returns
        -------
        results: list of (inputs, outputs, targets)
            One triple per pattern. Each is also logged.
        """
        results = []

        for inputs, targets in self._validate_patterns(patterns):
            outputs = self.network.update(inputs)
            logger.info("{} -> {} : {}".format(inputs, outputs, targets))
            results.append((inputs, outputs, targets))

        return results

    def evaluate(self, patterns):
        """ Returns the squared error over all patterns divided by the
        total number of target values, for comparing pattern sets of
        different sizes
        """
        targets, outputs = [], []

        for inputs, target in self._validate_patterns(patterns):
            outputs.append(self.network.update(inputs))
            targets.append(target)

        if not targets:
            return 0.0

        return mean_squared_error(
            numpy.concatenate(targets), numpy.concatenate(outputs))
