"""
CPU backend using NumPy + SciPy.

This is the reference implementation.
"""

import numpy as np
from typing import Optional

from .base import CPUBackend, LeastSquaresResult
from .._core.qr import qr_least_squares


class CPUBackendFP64(CPUBackend):
    """
    CPU backend using NumPy + SciPy.

    Column-pivoted QR (LAPACK geqp3), always FP64. Rank-deficient systems
    get the basic solution: aliased coefficients are set to zero.
    """

    def __init__(self):
        self.name = "cpu_fp64"
        self.precision = "fp64"

    def solve_least_squares(
        self,
        A: np.ndarray,
        y: np.ndarray,
        rtol: Optional[float] = None,
    ) -> LeastSquaresResult:
        """Solve via pivoted QR; all computation stays in NumPy."""
        A = np.asarray(A, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)

        sol = qr_least_squares(A, y, rtol=rtol)
        return LeastSquaresResult(coef=sol.coef, rank=sol.rank, rtol=sol.rtol)

    def get_device_info(self) -> dict:
        """Get backend information."""
        import scipy
        return {
            'backend': 'cpu',
            'precision': 'fp64',
            'library': f'NumPy {np.__version__}, SciPy {scipy.__version__}',
        }
