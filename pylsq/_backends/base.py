"""
Abstract base classes for backends.

Defines the interface all backends must implement.
"""

from abc import ABC, abstractmethod
import numpy as np
from typing import Optional
from dataclasses import dataclass


@dataclass
class LeastSquaresResult:
    """Dense least-squares solution from a backend."""
    coef: np.ndarray
    rank: int
    rtol: float


class BackendBase(ABC):
    """Abstract base class for all backends."""

    name: str
    precision: str

    @abstractmethod
    def solve_least_squares(
        self,
        A: np.ndarray,
        y: np.ndarray,
        rtol: Optional[float] = None,
    ) -> LeastSquaresResult:
        """
        Solve min ||A c - y|| by QR factorisation.

        Backends implement ALL computation internally using their
        native types, only converting at entry/exit.

        Parameters
        ----------
        A : ndarray, shape (n, p)
            Design matrix (possibly augmented with regularisation rows)
        y : ndarray, shape (n,)
            Target vector (possibly padded with zeros)
        rtol : float, optional
            Relative tolerance for rank determination

        Returns
        -------
        LeastSquaresResult
            Coefficients (numpy, float64) and detected rank
        """
        pass

    @abstractmethod
    def get_device_info(self) -> dict:
        """Get backend information."""
        pass

    def __repr__(self):
        return f"{type(self).__name__}(name={self.name!r})"


class CPUBackend(BackendBase):
    """CPU backend base class (always FP64)."""
    pass
