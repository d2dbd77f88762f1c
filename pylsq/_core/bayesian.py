"""
Bayesian linear regression.

Three modes share one entry point:

- plain evidence maximisation (scikit-learn ``BayesianRidge``)
- automatic relevance determination (scikit-learn ``ARDRegression``)
- SVD factorisation: the marginal likelihood of (prior variance, noise
  variance) is written in terms of the singular values of A and maximised
  with ``scipy.optimize.minimize``.

All modes use a zero-mean Gaussian prior on the coefficients and no intercept.
"""

import logging
from typing import Optional, Union

import numpy as np
from scipy.linalg import svd
from scipy.optimize import minimize
from sklearn.linear_model import ARDRegression, BayesianRidge

logger = logging.getLogger(__name__)

FACTORIZATIONS = ('cholesky', 'svd')

# Bounds on log-variances during evidence maximisation
_LOG_VAR_BOUNDS = (-50.0, 50.0)


def bayesian_linear_regression(
    A: np.ndarray,
    y: np.ndarray,
    *,
    ard_threshold: float = 0.0,
    factorization: str = 'cholesky',
    committee_size: int = 0,
    verbose: bool = False,
    rng: Optional[Union[int, np.random.Generator]] = None,
) -> dict:
    """
    Fit a Bayesian linear model y = A c + noise.

    Parameters
    ----------
    A : ndarray, shape (n, p)
        Design matrix
    y : ndarray, shape (n,)
        Target vector
    ard_threshold : float
        If > 0, use ARD. Features whose prior variance falls below this
        value are pruned (coefficient set to zero).
    factorization : {'cholesky', 'svd'}
        'cholesky' delegates to scikit-learn; 'svd' maximises the evidence
        over a thin SVD of A.
    committee_size : int
        Number of posterior samples to draw. 0 disables the committee.
    verbose : bool
        Log hyperparameter estimates at INFO level.
    rng : int or Generator, optional
        Seed or generator for committee sampling.

    Returns
    -------
    dict
        'c'          : posterior mean coefficients, shape (p,)
        'var_c'      : prior variance (array of shape (p,) for ARD)
        'var_e'      : noise variance
        'committee'  : posterior samples, shape (committee_size, p)
                       (present only if committee_size > 0)
        'covariance' : posterior covariance (scikit-learn modes only)
    """
    if factorization not in FACTORIZATIONS:
        raise ValueError(
            f"Unknown factorization: '{factorization}'\n"
            f"Valid options: {', '.join(repr(f) for f in FACTORIZATIONS)}"
        )
    if committee_size < 0:
        raise ValueError(f"committee_size must be >= 0, got {committee_size}")

    if ard_threshold > 0:
        if factorization == 'svd':
            raise ValueError("ARD is not supported with factorization='svd'")
        return _ard_regression(A, y, ard_threshold, committee_size, verbose, rng)

    if factorization == 'svd':
        return _svd_regression(A, y, committee_size, verbose, rng)

    return _ridge_regression(A, y, committee_size, verbose, rng)


def _report(verbose: bool, msg: str, *args) -> None:
    level = logging.INFO if verbose else logging.DEBUG
    logger.log(level, msg, *args)


def _ridge_regression(A, y, committee_size, verbose, rng):
    model = BayesianRidge(fit_intercept=False, verbose=verbose)
    model.fit(A, y)

    result = {
        'c': np.asarray(model.coef_, dtype=np.float64),
        'var_c': 1.0 / model.lambda_,
        'var_e': 1.0 / model.alpha_,
        'covariance': model.sigma_,
    }
    _report(verbose, "BayesianRidge: var_c=%.4e var_e=%.4e",
            result['var_c'], result['var_e'])

    if committee_size > 0:
        result['committee'] = _sample_gaussian(
            rng, result['c'], model.sigma_, committee_size
        )
    return result


def _ard_regression(A, y, ard_threshold, committee_size, verbose, rng):
    # sklearn prunes on precision; prior variance below the threshold
    # is precision above its reciprocal.
    model = ARDRegression(
        fit_intercept=False,
        threshold_lambda=1.0 / ard_threshold,
        verbose=verbose,
    )
    model.fit(A, y)

    keep = model.lambda_ < model.threshold_lambda
    result = {
        'c': np.asarray(model.coef_, dtype=np.float64),
        'var_c': 1.0 / model.lambda_,
        'var_e': 1.0 / model.alpha_,
        'covariance': model.sigma_,
    }
    _report(verbose, "ARDRegression: kept %d of %d features, var_e=%.4e",
            int(np.sum(keep)), keep.size, result['var_e'])

    if committee_size > 0:
        committee = np.zeros((committee_size, A.shape[1]))
        if np.any(keep):
            committee[:, keep] = _sample_gaussian(
                rng, result['c'][keep], model.sigma_, committee_size
            )
        result['committee'] = committee
    return result


def _sample_gaussian(rng, mean, cov, size):
    rng = np.random.default_rng(rng)
    return rng.multivariate_normal(mean, cov, size=size, method='eigh')


def _negative_log_evidence(log_var, s2, b2, yy_perp, n):
    """
    Negative log marginal likelihood and its gradient w.r.t. log-variances.

    y ~ N(0, var_c A A' + var_e I); in the singular basis of A the covariance
    is diagonal with entries var_c s_i^2 + var_e on range(A) and var_e on
    its orthogonal complement.
    """
    var_c, var_e = np.exp(log_var)
    r = s2.size
    d = var_c * s2 + var_e

    logdet = np.sum(np.log(d)) + (n - r) * np.log(var_e)
    quad = np.sum(b2 / d) + yy_perp / var_e
    value = 0.5 * (logdet + quad + n * np.log(2 * np.pi))

    d2 = d * d
    grad_c = 0.5 * var_c * (np.sum(s2 / d) - np.sum(b2 * s2 / d2))
    grad_e = 0.5 * var_e * (
        np.sum(1.0 / d) + (n - r) / var_e
        - np.sum(b2 / d2) - yy_perp / var_e ** 2
    )
    return value, np.array([grad_c, grad_e])


def _svd_regression(A, y, committee_size, verbose, rng):
    n, p = A.shape
    U, S, Vt = svd(A, full_matrices=False)

    # Drop numerically zero singular values
    if S.size and S[0] > 0:
        r = int(np.sum(S > max(n, p) * np.finfo(np.float64).eps * S[0]))
    else:
        r = 0
    U, S, Vt = U[:, :r], S[:r], Vt[:r]

    b = U.T @ y
    s2 = S ** 2
    b2 = b ** 2
    yy = float(y @ y)
    yy_perp = max(yy - float(np.sum(b2)), 0.0)

    tiny = 1e-10
    var_c0 = max(yy / np.sum(s2), tiny) if r > 0 else 1.0
    var_e0 = max(0.1 * yy / n, tiny)

    opt = minimize(
        _negative_log_evidence,
        x0=np.log([var_c0, var_e0]),
        args=(s2, b2, yy_perp, n),
        jac=True,
        method='L-BFGS-B',
        bounds=[_LOG_VAR_BOUNDS, _LOG_VAR_BOUNDS],
    )
    var_c, var_e = np.exp(opt.x)
    _report(verbose,
            "Evidence maximisation (%s): var_c=%.4e var_e=%.4e "
            "-log evidence=%.6e, %d iterations",
            opt.message, var_c, var_e, opt.fun, opt.nit)

    # Posterior covariance on range(A'): V diag(post) V'
    post = 1.0 / (s2 / var_e + 1.0 / var_c)
    coef = Vt.T @ (post * S * b / var_e)

    result = {'c': coef, 'var_c': float(var_c), 'var_e': float(var_e)}

    if committee_size > 0:
        rng = np.random.default_rng(rng)
        z_range = rng.standard_normal((committee_size, r))
        z_null = rng.standard_normal((committee_size, p))
        # Null-space directions of A keep the prior variance
        null_part = z_null - (z_null @ Vt.T) @ Vt
        result['committee'] = (
            coef
            + (z_range * np.sqrt(post)) @ Vt
            + np.sqrt(var_c) * null_part
        )

    return result
