""" Thin wrappers around the level 1 BLAS routines used by the network.

The routines are looked up by dtype so that float32 and float64 buffers
are dispatched to the single and double precision variants, respectively.
All operations assume flat, contiguous buffers of matching length.
"""
from scipy.linalg import blas


def dot(x, y):
    """ Returns the inner product of `x` and `y`
    """
    if len(x) == 0:
        return 0.0
    func, = blas.get_blas_funcs(('dot',), (x, y))
    return func(x, y)


def scal(alpha, x):
    """ Scales `x` by `alpha` in place
    """
    if len(x) == 0:
        return
    func, = blas.get_blas_funcs(('scal',), (x,))
    x[...] = func(alpha, x)


def axpy(alpha, x, y):
    """ Computes `y += alpha*x` in place
    """
    if len(y) == 0:
        return
    func, = blas.get_blas_funcs(('axpy',), (x, y))
    y[...] = func(x, y, a=alpha)
