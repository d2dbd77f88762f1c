"""
Test the linear_fit front end.
"""

import pytest
import numpy as np
import pandas as pd

from pylsq import linear_fit, LinearFit, QR, RRQR, LSQR, BayesianLinearRegressionSVD


@pytest.fixture
def training_data():
    rng = np.random.default_rng(42)
    n = 80
    df = pd.DataFrame({
        'b1': rng.standard_normal(n),
        'b2': rng.standard_normal(n),
        'b3': rng.standard_normal(n),
    })
    df['energy'] = 1.5 * df['b1'] - 0.5 * df['b2'] + 2.0 * df['b3'] \
        + 0.01 * rng.standard_normal(n)
    return df


class TestLinearFit:

    def test_dataframe_columns(self, training_data):
        fit = linear_fit(A=['b1', 'b2', 'b3'], y='energy', data=training_data)

        assert isinstance(fit, LinearFit)
        assert list(fit.coef.index) == ['b1', 'b2', 'b3']
        np.testing.assert_allclose(fit.coef.values, [1.5, -0.5, 2.0], atol=0.01)
        assert fit.y_name == 'energy'

    def test_default_solver_is_qr(self, training_data):
        fit = linear_fit(training_data[['b1', 'b2', 'b3']], training_data['energy'])

        assert isinstance(fit.solver, QR)
        assert list(fit.coef.index) == ['b1', 'b2', 'b3']

    def test_arrays(self):
        A = np.array([[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
        y = np.array([1.0, 1.0, 2.0])

        fit = linear_fit(A, y)

        np.testing.assert_allclose(fit.coefficients, [1.0, 1.0], atol=1e-12)
        assert list(fit.coef.index) == ['c0', 'c1']
        assert fit.rmse == pytest.approx(0.0, abs=1e-12)
        assert fit.relative_rms_error == pytest.approx(0.0, abs=1e-12)

    def test_error_measures(self, training_data):
        fit = linear_fit(['b1', 'b2', 'b3'], 'energy', data=training_data,
                         solver=RRQR())

        resid = training_data['energy'].values - fit.fitted_values
        np.testing.assert_allclose(fit.residuals, resid)
        assert fit.rmse == pytest.approx(np.sqrt(np.mean(resid ** 2)))
        assert fit.mae == pytest.approx(np.mean(np.abs(resid)))
        assert fit.rmse < 0.02

    def test_relative_error_matches_lsqr(self, training_data):
        A = training_data[['b1', 'b2', 'b3']].values
        y = training_data['energy'].values
        with pytest.warns(UserWarning, match="preconditioner"):
            fit = linear_fit(A, y, solver=LSQR())

        assert fit.relative_rms_error == pytest.approx(
            fit.result.info['relative_rms'], rel=1e-12
        )

    def test_relative_error_zero_target(self):
        fit = linear_fit(np.eye(3), np.zeros(3))

        assert fit.relative_rms_error == 0.0

    def test_predict(self, training_data):
        fit = linear_fit(['b1', 'b2', 'b3'], 'energy', data=training_data)
        new = pd.DataFrame({'b3': [1.0], 'b1': [0.0], 'b2': [0.0]})

        np.testing.assert_allclose(fit.predict(new), fit.coef['b3'])
        np.testing.assert_allclose(
            fit.predict(np.eye(3)), fit.coefficients
        )

    def test_predict_wrong_width(self, training_data):
        fit = linear_fit(['b1', 'b2', 'b3'], 'energy', data=training_data)
        with pytest.raises(ValueError, match="3 columns"):
            fit.predict(np.ones((2, 2)))

    def test_committee(self, training_data):
        solver = BayesianLinearRegressionSVD(committee_size=10, seed=0)
        fit = linear_fit(['b1', 'b2', 'b3'], 'energy', data=training_data,
                         solver=solver)

        assert fit.committee.shape == (10, 3)
        assert list(fit.committee_frame.columns) == ['b1', 'b2', 'b3']
        assert fit.committee_std().shape == (3,)

    def test_no_committee(self, training_data):
        fit = linear_fit(['b1', 'b2', 'b3'], 'energy', data=training_data)

        assert fit.committee is None
        assert fit.committee_frame is None
        assert fit.committee_std() is None

    def test_summary(self, training_data, capsys):
        fit = linear_fit(['b1', 'b2', 'b3'], 'energy', data=training_data,
                         solver=BayesianLinearRegressionSVD(committee_size=4, seed=0))
        fit.summary()

        out = capsys.readouterr().out
        assert 'LINEAR LEAST-SQUARES FIT' in out
        assert 'b2' in out
        assert 'Committee std' in out
        assert 'RMSE' in out

    def test_string_target_requires_data(self):
        with pytest.raises(ValueError, match="Must provide data"):
            linear_fit(np.eye(3), 'energy')

    def test_mismatched_lengths(self):
        with pytest.raises(ValueError, match="rows"):
            linear_fit(np.eye(3), np.ones(4))
