"""Percentile intervals, standard errors and Wald tests for bootstrap distributions"""

import math
from typing import Sequence

import numpy as np
from scipy.stats import norm

from bootstats.errors import (
    ComputationError,
    InsufficientReplicatesError,
    InvalidInputError,
    NumericDegeneracyError,
)
from bootstats.schemas import BootstrapDistribution, BootstrapResult, NanPolicy, QuantileInterpolation

# Hyndman & Fan type 7: h = (n - 1) * p, linear between the neighbouring order statistics
_NUMPY_QUANTILE_METHODS: dict[str, str] = {"linear": "linear"}


def _check_level(confidence_level: float) -> float:
    if not 0.0 < confidence_level < 1.0:
        raise InvalidInputError(f"confidence_level must lie in (0, 1), got {confidence_level}")
    return 1.0 - confidence_level


def _finite(values: Sequence[float] | np.ndarray) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    finite = arr[np.isfinite(arr)]
    if finite.size < 2:
        raise InsufficientReplicatesError(
            f"Need at least 2 finite replicate values, got {finite.size}; "
            "the standard deviation is undefined"
        )
    return finite


def percentile_interval(
    values: Sequence[float] | np.ndarray,
    confidence_level: float = 0.95,
    interpolation: QuantileInterpolation = "linear",
) -> tuple[float, float]:
    """Return the (alpha/2, 1 - alpha/2) empirical quantiles of the values.

    Quantiles interpolate linearly between order statistics, so with sorted
    values v[0..m-1] the p-quantile is v[k] + (h - k) * (v[k+1] - v[k]) with
    h = (m - 1) * p and k = floor(h). Non-finite values are ignored.
    """
    alpha = _check_level(confidence_level)
    if interpolation not in _NUMPY_QUANTILE_METHODS:
        raise InvalidInputError(f"Unsupported quantile interpolation: {interpolation}")
    finite = _finite(values)
    lower, upper = np.quantile(
        finite,
        [alpha / 2, 1 - alpha / 2],
        method=_NUMPY_QUANTILE_METHODS[interpolation],
    )
    return float(lower), float(upper)


def standard_error(values: Sequence[float] | np.ndarray) -> float:
    """Sample standard deviation (denominator m - 1) of the finite values."""
    return float(np.std(_finite(values), ddof=1))


def wald_test(estimate: float, se: float, null_value: float = 0.0) -> tuple[float, float]:
    """Two-sided Wald test.

    Returns:
        (z, p_value) with z = (estimate - null_value) / se and
        p = 2 * (1 - Phi(|z|))
    """
    if not se > 0.0 or not math.isfinite(se):
        raise NumericDegeneracyError(f"Wald statistic undefined for standard error {se}")
    z = (estimate - null_value) / se
    # norm.sf(x) == 1 - norm.cdf(x) without cancellation in the tail
    p_value = float(min(1.0, 2.0 * norm.sf(abs(z))))
    return float(z), p_value


def summarize(
    distribution: BootstrapDistribution,
    confidence_level: float = 0.95,
    *,
    null_value: float = 0.0,
    interpolation: QuantileInterpolation = "linear",
    nan_policy: NanPolicy = "omit",
) -> BootstrapResult:
    """Turn a bootstrap distribution into SE, percentile CI and a Wald test.

    Raises:
        InvalidInputError: If the confidence level lies outside (0, 1)
        InsufficientReplicatesError: If fewer than 2 replicate values are finite
        NumericDegeneracyError: If all finite replicates are identical
        ComputationError: If a replicate failed and ``nan_policy`` is ``raise``
    """
    _check_level(confidence_level)
    n_excluded = distribution.replicate_count - distribution.finite_values().size
    if n_excluded and nan_policy == "raise":
        raise ComputationError(f"{n_excluded} replicate(s) failed and nan_policy is 'raise'")

    se = standard_error(distribution.values)
    ci_lower, ci_upper = percentile_interval(distribution.values, confidence_level, interpolation)
    z, p_value = wald_test(distribution.observed, se, null_value)

    return BootstrapResult(
        observed_statistic=distribution.observed,
        standard_error=se,
        ci_lower=ci_lower,
        ci_upper=ci_upper,
        z=z,
        p_value=p_value,
        replicate_count=distribution.replicate_count,
        n_excluded=n_excluded,
        confidence_level=confidence_level,
        null_value=null_value,
        interpolation=interpolation,
        nan_policy=nan_policy,
    )
