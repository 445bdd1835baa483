"""One-sample, two-sample and paired z-tests"""

import math
from typing import Sequence

import numpy as np
from scipy.stats import norm

from bootstats.errors import InvalidInputError, NumericDegeneracyError
from bootstats.resample.resampler import as_sample
from bootstats.schemas import Alternative, HypothesisTestResult

ALTERNATIVES = ("two_sided", "greater", "less")


def normal_p_value(z: float, alternative: Alternative = "two_sided") -> float:
    """P-value of a standard normal statistic."""
    if alternative == "two_sided":
        return float(min(1.0, 2.0 * norm.sf(abs(z))))
    if alternative == "greater":
        return float(norm.sf(z))
    if alternative == "less":
        return float(norm.cdf(z))
    raise InvalidInputError(f"Unknown alternative: {alternative} (choose from {ALTERNATIVES})")


def normal_interval(
    estimate: float,
    se: float,
    confidence_level: float = 0.95,
    alternative: Alternative = "two_sided",
) -> tuple[float, float]:
    """Normal-theory interval; one-sided alternatives leave one end unbounded."""
    if not 0.0 < confidence_level < 1.0:
        raise InvalidInputError(f"confidence_level must lie in (0, 1), got {confidence_level}")
    alpha = 1.0 - confidence_level
    if alternative == "two_sided":
        q = float(norm.ppf(1 - alpha / 2))
        return estimate - q * se, estimate + q * se
    q = float(norm.ppf(1 - alpha))
    if alternative == "greater":
        return estimate - q * se, math.inf
    if alternative == "less":
        return -math.inf, estimate + q * se
    raise InvalidInputError(f"Unknown alternative: {alternative} (choose from {ALTERNATIVES})")


def z_test(
    mean: float,
    variance: float,
    n: int,
    mu0: float = 0.0,
    *,
    alternative: Alternative = "two_sided",
    confidence_level: float = 0.95,
    method: str = "One-sample z-test",
) -> HypothesisTestResult:
    """z-test from summary statistics.

    Args:
        mean: Sample mean
        variance: Population variance (known) or plug-in sample variance
        n: Sample size
        mu0: Hypothesized mean
    """
    if n < 1:
        raise InvalidInputError(f"Sample size must be >= 1, got {n}")
    if variance < 0 or not math.isfinite(variance):
        raise InvalidInputError(f"Variance must be finite and non-negative, got {variance}")
    se = math.sqrt(variance / n)
    return _z_result(mean, se, mu0, alternative, confidence_level, method, n)


def _z_result(
    estimate: float,
    se: float,
    null_value: float,
    alternative: Alternative,
    confidence_level: float,
    method: str,
    n: int,
) -> HypothesisTestResult:
    if se == 0.0:
        raise NumericDegeneracyError("Standard error is zero; the z statistic is undefined")
    z = (estimate - null_value) / se
    ci_lower, ci_upper = normal_interval(estimate, se, confidence_level, alternative)
    return HypothesisTestResult(
        statistic=z,
        p_value=normal_p_value(z, alternative),
        ci_lower=ci_lower,
        ci_upper=ci_upper,
        alternative=alternative,
        estimate=estimate,
        standard_error=se,
        confidence_level=confidence_level,
        method=method,
        n=n,
    )


def _variance(x: np.ndarray, sigma: float | None, name: str) -> float:
    """Known variance sigma**2, or the plug-in sample variance."""
    if sigma is not None:
        if sigma < 0:
            raise InvalidInputError(f"sigma must be non-negative, got {sigma}")
        return float(sigma) ** 2
    if len(x) < 2:
        raise InvalidInputError(f"{name} needs at least 2 observations to estimate its variance")
    return float(np.var(x, ddof=1))


def z_test_one_sample(
    x: Sequence[float] | np.ndarray,
    mu0: float = 0.0,
    *,
    sigma: float | None = None,
    alternative: Alternative = "two_sided",
    confidence_level: float = 0.95,
) -> HypothesisTestResult:
    """One-sample z-test on raw data; sigma=None uses the sample variance."""
    arr = as_sample(x, "x")
    return z_test(
        float(np.mean(arr)),
        _variance(arr, sigma, "x"),
        len(arr),
        mu0,
        alternative=alternative,
        confidence_level=confidence_level,
    )


def z_test_two_sample(
    x: Sequence[float] | np.ndarray,
    y: Sequence[float] | np.ndarray,
    delta0: float = 0.0,
    *,
    sigma_x: float | None = None,
    sigma_y: float | None = None,
    alternative: Alternative = "two_sided",
    confidence_level: float = 0.95,
) -> HypothesisTestResult:
    """Two-sample z-test for mean(x) - mean(y) against delta0."""
    a = as_sample(x, "x")
    b = as_sample(y, "y")
    se = math.sqrt(_variance(a, sigma_x, "x") / len(a) + _variance(b, sigma_y, "y") / len(b))
    estimate = float(np.mean(a) - np.mean(b))
    return _z_result(
        estimate, se, delta0, alternative, confidence_level, "Two-sample z-test", len(a) + len(b)
    )


def z_test_paired(
    x: Sequence[float] | np.ndarray,
    y: Sequence[float] | np.ndarray,
    mu0: float = 0.0,
    *,
    sigma: float | None = None,
    alternative: Alternative = "two_sided",
    confidence_level: float = 0.95,
) -> HypothesisTestResult:
    """Paired z-test: a one-sample test on the differences d = y - x."""
    a = as_sample(x, "x")
    b = as_sample(y, "y")
    if len(a) != len(b):
        raise InvalidInputError(f"Paired samples differ in length: {len(a)} != {len(b)}")
    d = b - a
    return z_test(
        float(np.mean(d)),
        _variance(d, sigma, "d"),
        len(d),
        mu0,
        alternative=alternative,
        confidence_level=confidence_level,
        method="Paired z-test",
    )
