"""
pylsq: linear least-squares solvers for fitting linear models.

Licensed under GPL-3.0
"""

__version__ = "1.0.0"

# Import main user-facing API
from .solvers import (
    SolverResult,
    Solver,
    QR,
    RRQR,
    LSQR,
    BL,
    BARD,
    BayesianLinearRegressionSVD,
)
from .operators import (
    Preconditioner,
    IdentityOperator,
    DiagonalOperator,
    MatrixOperator,
    as_operator,
)
from .fit import linear_fit, LinearFit

# Import backend utilities (for advanced users)
from ._backends import get_backend

__all__ = [
    'SolverResult',
    'Solver',
    'QR',
    'RRQR',
    'LSQR',
    'BL',
    'BARD',
    'BayesianLinearRegressionSVD',
    'Preconditioner',
    'IdentityOperator',
    'DiagonalOperator',
    'MatrixOperator',
    'as_operator',
    'linear_fit',
    'LinearFit',
    'get_backend',
]
