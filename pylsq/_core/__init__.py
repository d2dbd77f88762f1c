"""
Core algorithms (backend-agnostic).
"""

from .qr import qr_least_squares, QRSolution
from .bayesian import bayesian_linear_regression

__all__ = [
    "qr_least_squares",
    "QRSolution",
    "bayesian_linear_regression",
]
