"""
Test Bayesian solvers (BL, BARD, BayesianLinearRegressionSVD) and the
underlying bayesian_linear_regression routine.
"""

import logging

import pytest
import numpy as np

from pylsq import BL, BARD, BayesianLinearRegressionSVD
from pylsq._core.bayesian import bayesian_linear_regression


def make_problem(n=200, beta=(1.0, 2.0, -1.5, 0.5, 3.0), noise=0.1, seed=42):
    rng = np.random.default_rng(seed)
    beta = np.asarray(beta)
    A = rng.standard_normal((n, beta.size))
    y = A @ beta + noise * rng.standard_normal(n)
    return A, y, beta


class TestBL:
    """Test Bayesian linear regression solver."""

    def test_recovers_coefficients(self):
        A, y, beta = make_problem()

        result = BL().solve(A, y)

        assert set(result.keys()) == {"C"}
        np.testing.assert_allclose(result["C"], beta, atol=0.05)

    def test_close_to_least_squares_for_low_noise(self):
        A, y, _ = make_problem(noise=1e-3)

        C = BL().solve(A, y)["C"]
        C_ls = np.linalg.lstsq(A, y, rcond=None)[0]

        np.testing.assert_allclose(C, C_ls, atol=1e-3)


class TestBARD:
    """Test Bayesian ARD solver."""

    def test_prunes_irrelevant_features(self):
        A, y, beta = make_problem(beta=(2.0, -3.0, 0.0, 0.0, 1.5, 0.0), noise=0.05)

        C = BARD().solve(A, y)["C"]

        relevant = beta != 0
        np.testing.assert_allclose(C[relevant], beta[relevant], atol=0.05)
        assert np.all(np.abs(C[~relevant]) < 0.02)

    def test_threshold(self):
        assert BARD.ARD_THRESHOLD == 0.1


class TestBayesianLinearRegressionSVD:
    """Test SVD-based Bayesian linear regression with committees."""

    def test_no_committee_by_default(self):
        A, y, beta = make_problem()

        result = BayesianLinearRegressionSVD().solve(A, y)

        assert "committee" not in result
        assert result.committee is None
        np.testing.assert_allclose(result["C"], beta, atol=0.05)

    def test_committee_size(self):
        A, y, _ = make_problem()

        result = BayesianLinearRegressionSVD(committee_size=8, seed=0).solve(A, y)

        assert result["committee"].shape == (8, 5)

    def test_committee_centred_on_mean(self):
        A, y, _ = make_problem()

        result = BayesianLinearRegressionSVD(committee_size=2000, seed=1).solve(A, y)

        np.testing.assert_allclose(
            result["committee"].mean(axis=0), result["C"], atol=0.01
        )
        # Posterior spread ~ noise / sqrt(n)
        spread = result["committee"].std(axis=0)
        assert np.all(spread > 0)
        assert np.all(spread < 0.05)

    def test_committee_reproducible_with_seed(self):
        A, y, _ = make_problem()
        solver = BayesianLinearRegressionSVD(committee_size=4, seed=123)

        np.testing.assert_array_equal(
            solver.solve(A, y)["committee"], solver.solve(A, y)["committee"]
        )

    def test_noise_variance_estimate(self):
        A, y, _ = make_problem(n=500, noise=0.1)

        result = BayesianLinearRegressionSVD().solve(A, y)

        assert 0.005 < result.info['var_e'] < 0.02

    def test_agrees_with_bl(self):
        A, y, _ = make_problem()

        C_svd = BayesianLinearRegressionSVD().solve(A, y)["C"]
        C_bl = BL().solve(A, y)["C"]

        np.testing.assert_allclose(C_svd, C_bl, atol=1e-2)

    def test_underdetermined_system(self):
        """Wide systems sample the null space of A with the prior variance."""
        rng = np.random.default_rng(5)
        A = rng.standard_normal((10, 30))
        y = A @ rng.standard_normal(30)

        result = BayesianLinearRegressionSVD(committee_size=6, seed=2).solve(A, y)

        assert result["C"].shape == (30,)
        assert result["committee"].shape == (6, 30)
        assert np.all(np.isfinite(result["committee"]))

    def test_verbose_logs_hyperparameters(self, caplog):
        A, y, _ = make_problem()

        with caplog.at_level(logging.INFO, logger="pylsq._core.bayesian"):
            BayesianLinearRegressionSVD(verbose=True).solve(A, y)

        assert "var_c=" in caplog.text
        assert "var_e=" in caplog.text

    def test_quiet_by_default(self, caplog):
        A, y, _ = make_problem()

        with caplog.at_level(logging.INFO, logger="pylsq._core.bayesian"):
            BayesianLinearRegressionSVD().solve(A, y)

        assert caplog.text == ""


class TestBayesianLinearRegression:
    """Test the routine behind the Bayesian solvers."""

    def test_returns_auxiliary_outputs(self):
        A, y, _ = make_problem()

        blr = bayesian_linear_regression(A, y)

        assert {'c', 'var_c', 'var_e', 'covariance'} <= set(blr)
        assert blr['covariance'].shape == (5, 5)

    def test_committee_in_ridge_mode(self):
        A, y, _ = make_problem()

        blr = bayesian_linear_regression(A, y, committee_size=3, rng=0)

        assert blr['committee'].shape == (3, 5)

    def test_committee_in_ard_mode_respects_pruning(self):
        A, y, _ = make_problem(beta=(2.0, 0.0, -1.0), noise=0.05)

        blr = bayesian_linear_regression(
            A, y, ard_threshold=0.1, committee_size=5, rng=0
        )

        pruned = blr['c'] == 0
        assert blr['committee'].shape == (5, 3)
        assert np.all(blr['committee'][:, pruned] == 0)

    def test_unknown_factorization(self):
        A, y, _ = make_problem()
        with pytest.raises(ValueError, match="Unknown factorization"):
            bayesian_linear_regression(A, y, factorization='qr')

    def test_ard_with_svd_rejected(self):
        A, y, _ = make_problem()
        with pytest.raises(ValueError, match="ARD"):
            bayesian_linear_regression(A, y, ard_threshold=0.1, factorization='svd')

    def test_negative_committee_size(self):
        A, y, _ = make_problem()
        with pytest.raises(ValueError, match="committee_size"):
            bayesian_linear_regression(A, y, committee_size=-1)
