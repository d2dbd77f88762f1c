"""
Utility functions.
"""

import numpy as np


def check_array(X, name='X', dtype=np.float64):
    """Validate array input."""
    X = np.asarray(X, dtype=dtype)
    if X.ndim != 2:
        raise ValueError(f"{name} must be 2-dimensional")
    if not np.all(np.isfinite(X)):
        raise ValueError(f"{name} contains NaN or Inf")
    return X


def check_vector(y, name='y', dtype=np.float64):
    """Validate vector input."""
    y = np.asarray(y, dtype=dtype)
    if y.ndim == 2 and y.shape[1] == 1:
        y = y.ravel()
    if y.ndim != 1:
        raise ValueError(f"{name} must be 1-dimensional")
    if not np.all(np.isfinite(y)):
        raise ValueError(f"{name} contains NaN or Inf")
    return y


def check_system(A, y):
    """Validate a least-squares system (A, y) and return float64 copies."""
    A = check_array(A, 'A')
    y = check_vector(y, 'y')
    if A.shape[0] != y.shape[0]:
        raise ValueError(
            f"A has {A.shape[0]} rows but y has length {y.shape[0]}"
        )
    return A, y


def relative_rms_error(A, coef, y):
    """Relative residual norm ||A c - y|| / ||y|| (0 when y is zero)."""
    norm_y = np.linalg.norm(y)
    resid = np.linalg.norm(A @ coef - y)
    if norm_y == 0:
        return float(resid)
    return float(resid / norm_y)
