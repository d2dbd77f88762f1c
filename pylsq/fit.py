"""
Linear fitting front end.

Wraps a solver with input handling (arrays or pandas columns) and fit
diagnostics, in the style of R's lm() summary.
"""

import numpy as np
import pandas as pd
from typing import Optional, Union, List

from ._utils import check_system, relative_rms_error
from .solvers import QR, Solver, SolverResult


class LinearFit:
    """
    Fit the coefficients of a linear model with a chosen solver.

    Examples
    --------
    >>> import pandas as pd
    >>> from pylsq import linear_fit, RRQR
    >>>
    >>> data = pd.read_csv('training_set.csv')
    >>> fit = linear_fit(y='energy',
    ...                  A=['b1', 'b2', 'b3'],
    ...                  data=data,
    ...                  solver=RRQR(rtol=1e-12))
    >>>
    >>> fit.summary()
    >>> fit.coef            # Named coefficients
    >>> fit.rmse            # Training error
    >>> fit.predict(new_data)
    """

    def __init__(
        self,
        A: Union[List[str], np.ndarray],
        y: Union[str, np.ndarray],
        solver: Optional[Solver] = None,
        data: Optional[pd.DataFrame] = None,
    ):
        """
        Fit linear model coefficients.

        Parameters
        ----------
        A : list of str or array
            Design matrix
            - If list of strings: column names in data
            - If array/DataFrame: numeric matrix (n × p)
        y : str or array
            Target values
            - If string: column name in data
            - If array: numeric values
        solver : Solver, optional
            Least-squares solver (default: unregularised QR)
        data : DataFrame, optional
            Dataset containing A and y columns
        """
        if isinstance(y, str):
            if data is None:
                raise ValueError("Must provide data when y is a string")
            y_values = data[y].values
            self.y_name = y
        else:
            y_values = np.asarray(y)
            self.y_name = getattr(y, 'name', None) or 'y'

        if isinstance(A, list) and all(isinstance(a, str) for a in A):
            if data is None:
                raise ValueError("Must provide data when A is list of strings")
            A_values = data[A].values
            self.names = list(A)
        elif isinstance(A, pd.DataFrame):
            A_values = A.values
            self.names = [str(c) for c in A.columns]
        else:
            A_values = np.asarray(A)
            self.names = None

        self.A, self.y = check_system(A_values, y_values)
        if self.names is None:
            self.names = [f'c{i}' for i in range(self.A.shape[1])]

        self.n_obs, self.n_coef = self.A.shape
        self.solver = solver if solver is not None else QR()

        self.result: SolverResult = self.solver.solve(self.A, self.y)
        self._compute_statistics()

    def _compute_statistics(self):
        """Compute fitted values and error measures."""
        self.coefficients = self.result.coef
        self.committee = self.result.committee
        self.fitted_values = self.A @ self.coefficients
        self.residuals = self.y - self.fitted_values

        rss = float(np.sum(self.residuals ** 2))
        self.rmse = np.sqrt(rss / self.n_obs)
        self.mae = float(np.mean(np.abs(self.residuals)))
        self.relative_rms_error = relative_rms_error(self.A, self.coefficients, self.y)

    @property
    def coef(self) -> pd.Series:
        """Named coefficients (pandas Series)."""
        return pd.Series(self.coefficients, index=self.names)

    @property
    def committee_frame(self) -> Optional[pd.DataFrame]:
        """Committee members as rows of a DataFrame, or None."""
        if self.committee is None:
            return None
        return pd.DataFrame(self.committee, columns=self.names)

    def committee_std(self) -> Optional[pd.Series]:
        """Standard deviation of each coefficient across the committee."""
        if self.committee is None:
            return None
        return self.committee_frame.std(axis=0, ddof=1)

    def summary(self):
        """Print summary of the fit."""
        print()
        print("=" * 80)
        print("LINEAR LEAST-SQUARES FIT")
        print("=" * 80)
        print()

        print(f"Target: {self.y_name}")
        print(f"Solver: {self.solver!r}")
        print(f"Number of observations: {self.n_obs}")
        print(f"Number of coefficients: {self.n_coef}")
        print()

        print("Residuals:")
        residual_summary = pd.Series(self.residuals).describe()
        print(f"  Min:    {residual_summary['min']:>12.4e}")
        print(f"  1Q:     {residual_summary['25%']:>12.4e}")
        print(f"  Median: {residual_summary['50%']:>12.4e}")
        print(f"  3Q:     {residual_summary['75%']:>12.4e}")
        print(f"  Max:    {residual_summary['max']:>12.4e}")
        print()

        spread = self.committee_std()
        print("Coefficients:")
        print("-" * 80)
        header = f"{'Name':<20} {'Estimate':>14}"
        if spread is not None:
            header += f" {'Committee std':>14}"
        print(header)
        print("-" * 80)
        for i, name in enumerate(self.names):
            line = f"{name:<20} {self.coefficients[i]:>14.6e}"
            if spread is not None:
                line += f" {spread.iloc[i]:>14.6e}"
            print(line)
        print("-" * 80)
        print()

        print(f"RMSE:               {self.rmse:.6e}")
        print(f"MAE:                {self.mae:.6e}")
        print(f"Relative RMS error: {self.relative_rms_error:.6e}")
        for key, value in self.result.info.items():
            print(f"{key + ':':<20}{value}")
        print("=" * 80)
        print()

    def predict(self, newdata: Union[pd.DataFrame, np.ndarray]) -> np.ndarray:
        """
        Predict targets for new design rows.

        Parameters
        ----------
        newdata : DataFrame or array
            - If DataFrame: must have columns matching self.names
            - If array: must have the same number of columns as A

        Returns
        -------
        array
            Predicted values
        """
        if isinstance(newdata, pd.DataFrame):
            A_new = newdata[self.names].values
        else:
            A_new = np.asarray(newdata)

        if A_new.ndim != 2 or A_new.shape[1] != self.n_coef:
            raise ValueError(
                f"newdata must have {self.n_coef} columns, got shape {A_new.shape}"
            )
        return A_new @ self.coefficients

    def __repr__(self):
        return (f"LinearFit(n={self.n_obs}, p={self.n_coef}, "
                f"rmse={self.rmse:.3e})")


def linear_fit(A, y, solver=None, data=None):
    """
    Fit linear model coefficients (convenience function).

    Parameters
    ----------
    A : list of str or array
        Design matrix or column names in data
    y : str or array
        Target values or column name in data
    solver : Solver, optional
        Least-squares solver (default: QR())
    data : DataFrame, optional
        Dataset

    Returns
    -------
    LinearFit
        Fitted model object

    Examples
    --------
    >>> fit = linear_fit(A, y, solver=BayesianLinearRegressionSVD(committee_size=8))
    >>> fit.coefficients
    >>> fit.committee_std()
    """
    return LinearFit(A=A, y=y, solver=solver, data=data)
