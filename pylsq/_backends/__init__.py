"""
Backend selection.

Provides a unified dense least-squares interface. The CPU backend
(NumPy/SciPy, FP64, column-pivoted QR) is the only one shipped.
"""

from .base import BackendBase, LeastSquaresResult
from .cpu_fp64_backend import CPUBackendFP64

_BACKENDS = {
    'cpu': CPUBackendFP64,
}


def get_backend(backend: str = 'cpu') -> BackendBase:
    """
    Get computational backend.

    Parameters
    ----------
    backend : str
        Backend name. Only 'cpu' is available.

    Returns
    -------
    BackendBase
        Backend instance

    Examples
    --------
    >>> backend = get_backend('cpu')
    >>> backend.solve_least_squares(A, y).coef
    """
    try:
        cls = _BACKENDS[backend]
    except KeyError:
        raise ValueError(
            f"Unknown backend: '{backend}'\n"
            f"Valid options: {', '.join(repr(k) for k in _BACKENDS)}"
        ) from None
    return cls()


__all__ = [
    'get_backend',
    'BackendBase',
    'LeastSquaresResult',
    'CPUBackendFP64',
]
