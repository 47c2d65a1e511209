""" This module provides a few simple `on_iterate` functions that can be
given to :class:`bpnet.core.trainer.Trainer`. Each is called as
`on_iterate(iteration, error)` after every training iteration; returning
True requests that training stop.
"""
import numpy


def collect_errors(error_list):
    """ Collects the errors from the iterations. Errors are appended to
    :code:`error_list` and so an empty list should be provided. Usage::

        errors = []
        network.train(patterns, 1000, 0.6, 0.4,
                      on_iterate=collect_errors(errors))
    """

    def on_iterate(i, error):
        error_list.append(error)

    return on_iterate


def stop_below(threshold):
    """ Stop once the iteration error falls below `threshold`
    """

    def on_iterate(i, error):
        return error < threshold

    return on_iterate


def stop_when_stalled(history_len=100, tol=0.0):
    """ Stop when the linear trend over the `history_len` most recent
    errors is no longer decreasing, i.e., when the slope of the least
    squares line through them is >= `-tol`.
    """
    history = []
    x = numpy.c_[numpy.ones(history_len), numpy.arange(history_len)]

    def on_iterate(i, error):
        history.append(error)

        if len(history) < history_len:
            return False

        y = numpy.array(history[-history_len:])

        # The slope of the best fit line.
        slope = numpy.linalg.lstsq(x, y, rcond=None)[0][1]

        return slope >= -tol

    return on_iterate
