import logging

import numpy as np


logger = logging.getLogger(__name__)


def xor():
    """
    The four exclusive-or patterns.

    Returns
    -------
    patterns: list of (ndarray, ndarray)
        The (inputs, target) pairs [0, 0] -> [0], [0, 1] -> [1],
        [1, 0] -> [1], [1, 1] -> [0].
    """
    return [
        (np.array([0., 0.]), np.array([0.])),
        (np.array([0., 1.]), np.array([1.])),
        (np.array([1., 0.]), np.array([1.])),
        (np.array([1., 1.]), np.array([0.])),
    ]


def delayed_echo(n=100, delay=1, p=0.5, rs=None):
    """
    Make a random binary sequence whose targets are the inputs `delay`
    steps in the past. Solving it requires memory of past inputs, so it
    is a sequence task for recurrent networks.

    Parameters
    ----------
    n: int, default=100
        The length of the sequence.

    delay: int, default=1
        How many steps back the target looks. The first `delay` targets
        are zero.

    p: float, default=0.5
        The probability that an input bit is 1.

    rs: numpy.random.RandomState
        RandomState object for reproducible results.

    Returns
    -------
    patterns: list of (ndarray, ndarray)
        The ordered (inputs, target) pairs, each of length 1.
    """
    if delay < 0:
        raise ValueError("`delay` should be non-negative.")
    if not 0 <= p <= 1:
        raise ValueError("`p` should be a probability.")

    rs = rs if rs is not None else np.random.RandomState()

    bits = (rs.rand(n) < p).astype(np.float64)
    echo = np.zeros(n)
    echo[delay:] = bits[:max(n - delay, 0)]

    logger.debug("Made delayed echo sequence (n={}, delay={})".format(
        n, delay))

    return [(np.array([b]), np.array([e])) for b, e in zip(bits, echo)]
