"""
Linear least-squares solvers.

Each solver is an immutable configuration object exposing ``solve(A, y)``,
which returns a :class:`SolverResult`::

    >>> from pylsq import QR
    >>> QR(lambda_=1e-3).solve(A, y)["C"]
"""

import logging
import warnings
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Union

import numpy as np
from scipy.sparse.linalg import lsqr

from ._backends import get_backend
from ._core.bayesian import bayesian_linear_regression
from ._core.qr import qr_least_squares
from ._utils import check_system, relative_rms_error
from .operators import Preconditioner, as_operator

logger = logging.getLogger(__name__)

OperatorLike = Union[Preconditioner, np.ndarray, None]

# scipy.sparse.linalg.lsqr stopping reasons (istop)
LSQR_STOP_REASONS = {
    0: "x = 0 is the exact solution",
    1: "Ax - b is small enough, given atol, btol",
    2: "the least-squares solution is good enough, given atol",
    3: "the estimate of cond(Abar) has exceeded conlim",
    4: "Ax - b is small enough for this machine",
    5: "the least-squares solution is good enough for this machine",
    6: "cond(Abar) seems to be too large for this machine",
    7: "the iteration limit has been reached",
}


@dataclass(frozen=True, eq=False)
class SolverResult(Mapping):
    """
    Result of a least-squares solve.

    Behaves as a read-only mapping: ``"C"`` is always present and
    ``"committee"`` only when the solver produced one.

    Attributes
    ----------
    coef : ndarray, shape (p,)
        Coefficient vector
    committee : ndarray, shape (k, p), or None
        Posterior samples, one coefficient vector per row
    info : dict
        Solver diagnostics (rank, iterations, hyperparameters, ...)
    """
    coef: np.ndarray
    committee: Optional[np.ndarray] = None
    info: dict[str, Any] = field(default_factory=dict)

    def _as_dict(self) -> dict:
        d = {"C": self.coef}
        if self.committee is not None:
            d["committee"] = self.committee
        return d

    def __getitem__(self, key):
        return self._as_dict()[key]

    def __iter__(self):
        return iter(self._as_dict())

    def __len__(self):
        return len(self._as_dict())

    # Mapping.__eq__ would compare arrays elementwise
    __eq__ = object.__eq__
    __hash__ = object.__hash__


class Solver(ABC):
    """Base class for all least-squares solvers."""

    @abstractmethod
    def solve(self, A, y) -> SolverResult:
        """
        Solve the least-squares problem for (A, y).

        Parameters
        ----------
        A : array, shape (n, p)
            Design matrix
        y : array, shape (n,)
            Target vector

        Returns
        -------
        SolverResult
        """
        pass


def _coerce_operator(obj, name="P"):
    object.__setattr__(obj, name, as_operator(getattr(obj, name)))


@dataclass(frozen=True, eq=False)
class QR(Solver):
    """
    Linear least squares by QR factorisation, with Tikhonov regularisation.

    Computes::

        theta = argmin ||A theta - y||^2 + lambda_^2 ||P theta||^2

    by stacking ``lambda_ * P`` beneath A and zeros beneath y.

    Parameters
    ----------
    lambda_ : float
        Regularisation parameter. 0 disables regularisation.
    P : Preconditioner or array, optional
        Tychonov operator (default identity).
    backend : str
        Dense QR backend, see :func:`pylsq.get_backend`.
    """
    lambda_: float = 0.0
    P: OperatorLike = None
    backend: str = 'cpu'

    def __post_init__(self):
        _coerce_operator(self)

    def solve(self, A, y) -> SolverResult:
        A, y = check_system(A, y)
        p = A.shape[1]

        if self.lambda_ == 0:
            AP, yP = A, y
        else:
            AP = np.vstack([A, self.lambda_ * self.P.to_dense(p)])
            yP = np.concatenate([y, np.zeros(p, dtype=y.dtype)])

        backend = get_backend(self.backend)
        sol = backend.solve_least_squares(AP, yP)
        return SolverResult(
            coef=sol.coef,
            info={'rank': sol.rank, 'backend': backend.name},
        )


@dataclass(frozen=True, eq=False)
class RRQR(Solver):
    """
    Linear least squares by rank-revealing QR factorisation.

    Transforms the parameters theta_P = P theta, solves::

        theta_P = argmin ||A P^-1 theta_P - y||^2

    truncating directions with |R_kk| < rtol * |R_00|, then reverses the
    transformation. Can be more robust than regularised QR on nearly
    rank-deficient systems.

    The truncation is not guaranteed to be deterministic across platforms
    or LAPACK builds; compare results with a tolerance.

    Parameters
    ----------
    rtol : float
        Relative truncation tolerance.
    P : Preconditioner or array, optional
        Right preconditioner (default identity). Must be invertible.
    """
    rtol: float = 1e-15
    P: OperatorLike = None

    def __post_init__(self):
        _coerce_operator(self)

    def solve(self, A, y) -> SolverResult:
        A, y = check_system(A, y)

        AP = self.P.right_solve(A)
        sol = qr_least_squares(AP, y, rtol=self.rtol)
        return SolverResult(
            coef=self.P.solve(sol.coef),
            info={'rank': sol.rank},
        )


@dataclass(frozen=True, eq=False)
class LSQR(Solver):
    """
    Iterative least squares (LSQR, Paige & Saunders).

    Minimises ||A theta - y||^2 + damp^2 ||theta||^2 with
    :func:`scipy.sparse.linalg.lsqr`. Does not raise on non-convergence;
    the last iterate is returned and ``info['converged']`` is False.

    The preconditioner ``P`` is accepted but not applied.

    Parameters
    ----------
    damp : float
        Damping (Tikhonov) factor.
    atol : float
        Stopping tolerance on the normal-equation residual.
    conlim : float
        Stop once the estimated condition number exceeds this.
    maxiter : int
        Iteration limit.
    verbose : bool
        Print scipy's iteration log.
    P : optional
        Unused preconditioner.
    btol : float
        Stopping tolerance on the residual relative to ||y||.
    """
    damp: float = 5e-3
    atol: float = 1e-6
    conlim: float = 1e8
    maxiter: int = 100000
    verbose: bool = False
    P: OperatorLike = None
    btol: float = float(np.sqrt(np.finfo(np.float64).eps))

    def solve(self, A, y) -> SolverResult:
        warnings.warn(
            "LSQR does not apply the preconditioner P; "
            "solving the unpreconditioned problem.",
            UserWarning
        )
        A, y = check_system(A, y)

        logger.info("LSQR damp=%g atol=%g conlim=%g maxiter=%d",
                    self.damp, self.atol, self.conlim, self.maxiter)

        out = lsqr(
            A, y,
            damp=self.damp,
            atol=self.atol,
            btol=self.btol,
            conlim=self.conlim,
            iter_lim=self.maxiter,
            show=self.verbose,
        )
        coef, istop, itn = out[0], out[1], out[2]
        rel = relative_rms_error(A, coef, y)

        logger.info("LSQR stopped after %d iterations: %s",
                    itn, LSQR_STOP_REASONS.get(istop, f"istop={istop}"))
        logger.info("relative RMS error %.6e", rel)

        return SolverResult(
            coef=coef,
            info={
                'istop': istop,
                'iterations': itn,
                'converged': istop in (0, 1, 2, 4, 5),
                'relative_rms': rel,
            },
        )


@dataclass(frozen=True, eq=False)
class BL(Solver):
    """Bayesian linear regression (evidence maximisation)."""

    def solve(self, A, y) -> SolverResult:
        A, y = check_system(A, y)
        blr = bayesian_linear_regression(A, y, verbose=False)
        return SolverResult(coef=blr['c'])


@dataclass(frozen=True, eq=False)
class BARD(Solver):
    """
    Bayesian linear regression with automatic relevance determination.

    Features whose prior variance drops below ``ARD_THRESHOLD`` are pruned.
    """

    ARD_THRESHOLD = 0.1

    def solve(self, A, y) -> SolverResult:
        A, y = check_system(A, y)
        blr = bayesian_linear_regression(
            A, y, ard_threshold=self.ARD_THRESHOLD, verbose=False
        )
        return SolverResult(coef=blr['c'])


@dataclass(frozen=True, eq=False)
class BayesianLinearRegressionSVD(Solver):
    """
    Bayesian linear regression via SVD of the design matrix.

    Parameters
    ----------
    verbose : bool
        Log the fitted hyperparameters at INFO level.
    committee_size : int
        Number of posterior samples returned under ``"committee"``.
        0 returns no committee.
    seed : int, optional
        Seed for committee sampling.
    """
    verbose: bool = False
    committee_size: int = 0
    seed: Optional[int] = None

    def solve(self, A, y) -> SolverResult:
        A, y = check_system(A, y)
        blr = bayesian_linear_regression(
            A, y,
            verbose=self.verbose,
            committee_size=self.committee_size,
            factorization='svd',
            rng=self.seed,
        )
        return SolverResult(
            coef=blr['c'],
            committee=blr.get('committee'),
            info={'var_c': blr['var_c'], 'var_e': blr['var_e']},
        )


__all__ = [
    "SolverResult",
    "Solver",
    "QR",
    "RRQR",
    "LSQR",
    "BL",
    "BARD",
    "BayesianLinearRegressionSVD",
]
