"""
Least squares via QR decomposition with column pivoting.

Backend-agnostic reference used by the CPU backend and by RRQR.
"""

import numpy as np
from scipy.linalg import qr, solve_triangular
from typing import Optional
from dataclasses import dataclass


@dataclass
class QRSolution:
    """Result of a (truncated) pivoted-QR least squares solve."""
    coef: np.ndarray     # Basic solution, zero for dropped columns
    rank: int            # Number of retained columns
    pivot: np.ndarray    # Column pivot order (0-indexed)
    rtol: float          # Relative truncation tolerance used


def default_rtol(A: np.ndarray) -> float:
    """Machine-precision rank tolerance: max(n, p) * eps."""
    return max(A.shape) * np.finfo(np.float64).eps


def qr_least_squares(
    A: np.ndarray,
    y: np.ndarray,
    rtol: Optional[float] = None,
) -> QRSolution:
    """
    Solve min ||A c - y|| with a rank-revealing (pivoted) QR.

    Parameters
    ----------
    A : ndarray, shape (n, p)
        Design matrix
    y : ndarray, shape (n,)
        Target vector
    rtol : float, optional
        Relative truncation tolerance. Columns whose pivot satisfies
        |R_kk| < rtol * |R_00| are dropped. Defaults to max(n, p) * eps.

    Returns
    -------
    QRSolution
        Basic least-squares solution (dropped coefficients are zero)

    Notes
    -----
    A P = Q R with |R_00| >= |R_11| >= ... The leading rank x rank block of R
    is back-solved against Q' y; this is the truncated solution of
    min ||A c - y|| restricted to the retained columns.
    """
    n, p = A.shape
    if rtol is None:
        rtol = default_rtol(A)

    Q, R, piv = qr(A, mode='economic', pivoting=True)

    # Determine rank
    R_diag = np.abs(np.diag(R))
    if R_diag.size == 0 or R_diag[0] == 0:
        rank = 0
    else:
        rank = int(np.sum(R_diag > rtol * R_diag[0]))

    coef = np.zeros(p, dtype=np.float64)

    if rank > 0:
        qty = Q[:, :rank].T @ y
        coef_active = solve_triangular(
            R[:rank, :rank],
            qty,
            lower=False
        )
        coef[piv[:rank]] = coef_active

    return QRSolution(coef=coef, rank=rank, pivot=piv, rtol=float(rtol))
