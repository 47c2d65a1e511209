from collections import namedtuple

import numpy
from scipy.special import expit


LOGISTIC = 'logistic'
TANH = 'tanh'
IDENTITY = 'identity'


# The derivative is expressed in terms of the activation's *output*, i.e.,
# `derivative(function(x))` is the slope of `function` at `x`.
ActivationFunction = namedtuple(
    'ActivationFunction', ['name', 'function', 'derivative'])


def sigmoid(x):
    """ The logistic sigmoid, 1 / (1 + exp(-x))
    """
    return expit(x)


def dsigmoid(y):
    return y * (1 - y)


def tanh(x):
    return numpy.tanh(x)


def dtanh(y):
    return 1 - y**2


def identity(x):
    return x


def didentity(y):
    return numpy.ones_like(y)


def normalize(a):
    """ Clamp the values of `a` into the interval [0, 1]
    """
    return numpy.clip(a, 0, 1)


ACTIVATIONS = {
    LOGISTIC: ActivationFunction(LOGISTIC, sigmoid, dsigmoid),
    TANH: ActivationFunction(TANH, tanh, dtanh),
    IDENTITY: ActivationFunction(IDENTITY, identity, didentity),
}


def get_activation(activation):
    """ Look up an activation pair

    Parameters
    ----------
    activation: str or ActivationFunction
        One of 'logistic', 'tanh', or 'identity', or an already
        resolved :class:`ActivationFunction`, which is returned as is.

    Returns
    -------
    activation: ActivationFunction
        The named tuple holding the function and its derivative

    """
    if isinstance(activation, ActivationFunction):
        return activation

    try:
        return ACTIVATIONS[activation]
    except (KeyError, TypeError):  # TypeError handles unhashable input
        msg = "Unknown activation {!r}; expected one of {}"
        raise ValueError(msg.format(activation, sorted(ACTIVATIONS)))
