"""
Preconditioners / Tychonov operators.

A preconditioner P acts on the parameter vector. Solvers use it either as a
regularisation operator (QR stacks lambda * P beneath the design matrix) or as
a change of variables theta_P = P theta (RRQR solves against A P^-1).
"""

from abc import ABC, abstractmethod
from typing import Optional, Union

import numpy as np
from scipy.linalg import lu_factor, lu_solve


class Preconditioner(ABC):
    """Linear operator on parameter space."""

    @abstractmethod
    def apply(self, x: np.ndarray) -> np.ndarray:
        """Return P @ x."""
        pass

    @abstractmethod
    def solve(self, x: np.ndarray) -> np.ndarray:
        """Return P^-1 @ x."""
        pass

    @abstractmethod
    def right_solve(self, A: np.ndarray) -> np.ndarray:
        """Return A @ P^-1."""
        pass

    @abstractmethod
    def to_dense(self, n: int) -> np.ndarray:
        """Dense (n, n) matrix representation."""
        pass


class IdentityOperator(Preconditioner):
    """P = I. Every operation returns its input unchanged."""

    def apply(self, x):
        return np.asarray(x)

    def solve(self, x):
        return np.asarray(x)

    def right_solve(self, A):
        return np.asarray(A)

    def to_dense(self, n):
        return np.eye(n)

    def __repr__(self):
        return "IdentityOperator()"


class DiagonalOperator(Preconditioner):
    """
    P = diag(d).

    Parameters
    ----------
    diag : array, shape (p,)
        Diagonal entries; all must be non-zero for solve().
    """

    def __init__(self, diag):
        self.diag = np.asarray(diag, dtype=np.float64)
        if self.diag.ndim != 1:
            raise ValueError("diag must be 1-dimensional")

    def _check_size(self, n):
        if n != self.diag.shape[0]:
            raise ValueError(
                f"Operator has size {self.diag.shape[0]}, got {n} parameters"
            )

    def apply(self, x):
        x = np.asarray(x)
        self._check_size(x.shape[0])
        if x.ndim == 1:
            return self.diag * x
        return self.diag[:, np.newaxis] * x

    def solve(self, x):
        x = np.asarray(x)
        self._check_size(x.shape[0])
        if x.ndim == 1:
            return x / self.diag
        return x / self.diag[:, np.newaxis]

    def right_solve(self, A):
        A = np.asarray(A)
        self._check_size(A.shape[1])
        return A / self.diag[np.newaxis, :]

    def to_dense(self, n):
        self._check_size(n)
        return np.diag(self.diag)

    def __repr__(self):
        return f"DiagonalOperator(size={self.diag.shape[0]})"


class MatrixOperator(Preconditioner):
    """
    General square invertible matrix P.

    The LU factorisation is computed lazily on the first solve and cached.
    """

    def __init__(self, matrix):
        self.matrix = np.asarray(matrix, dtype=np.float64)
        if self.matrix.ndim != 2 or self.matrix.shape[0] != self.matrix.shape[1]:
            raise ValueError(
                f"Preconditioner matrix must be square, got shape {self.matrix.shape}"
            )
        self._lu = None

    def _factor(self):
        if self._lu is None:
            self._lu = lu_factor(self.matrix)
        return self._lu

    def apply(self, x):
        return self.matrix @ np.asarray(x)

    def solve(self, x):
        return lu_solve(self._factor(), np.asarray(x))

    def right_solve(self, A):
        # A P^-1 = (P^-T A^T)^T
        return lu_solve(self._factor(), np.asarray(A).T, trans=1).T

    def to_dense(self, n):
        if n != self.matrix.shape[0]:
            raise ValueError(
                f"Operator has size {self.matrix.shape[0]}, got {n} parameters"
            )
        return self.matrix

    def __repr__(self):
        return f"MatrixOperator(shape={self.matrix.shape})"


def as_operator(
    P: Optional[Union[Preconditioner, np.ndarray]]
) -> Preconditioner:
    """
    Coerce user input to a Preconditioner.

    - None: identity
    - 1-D array: diagonal operator
    - 2-D array: matrix operator
    """
    if P is None:
        return IdentityOperator()
    if isinstance(P, Preconditioner):
        return P
    P = np.asarray(P, dtype=np.float64)
    if P.ndim == 1:
        return DiagonalOperator(P)
    if P.ndim == 2:
        return MatrixOperator(P)
    raise ValueError(f"Cannot interpret array of ndim={P.ndim} as an operator")


__all__ = [
    "Preconditioner",
    "IdentityOperator",
    "DiagonalOperator",
    "MatrixOperator",
    "as_operator",
]
