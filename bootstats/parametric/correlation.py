"""Pearson correlation test on named columns"""

import math

import numpy as np
import pandas as pd
from scipy.stats import norm, t as student_t

from bootstats.errors import InvalidInputError, NumericDegeneracyError
from bootstats.parametric.regression import resolve_columns
from bootstats.schemas import Alternative, HypothesisTestResult


def correlation_test(
    data: pd.DataFrame,
    x: str,
    y: str,
    *,
    alternative: Alternative = "two_sided",
    confidence_level: float = 0.95,
    method: str = "pearson",
) -> HypothesisTestResult:
    """Test whether the Pearson correlation of two columns differs from zero.

    The statistic is t = r * sqrt((n - 2) / (1 - r^2)) on n - 2 degrees of
    freedom. The interval comes from the Fisher transform atanh(r) with
    standard error 1 / sqrt(n - 3), so it needs at least 4 complete rows.
    Only ``method="pearson"`` is supported.
    """
    if method != "pearson":
        raise InvalidInputError(f"Unsupported correlation method: {method!r} (only 'pearson')")
    if not 0.0 < confidence_level < 1.0:
        raise InvalidInputError(f"confidence_level must lie in (0, 1), got {confidence_level}")
    frame = resolve_columns(data, [x, y]).dropna()
    n = len(frame)
    if n < 4:
        raise InvalidInputError(f"Correlation test needs at least 4 complete rows, got {n}")

    xs = frame[x].to_numpy(dtype=float)
    ys = frame[y].to_numpy(dtype=float)
    if np.std(xs) == 0 or np.std(ys) == 0:
        raise NumericDegeneracyError("Correlation undefined: a column is constant")

    r = float(np.corrcoef(xs, ys)[0, 1])
    r = max(-1.0, min(1.0, r))
    df = n - 2
    if abs(r) == 1.0:
        statistic = math.copysign(math.inf, r)
    else:
        statistic = r * math.sqrt(df / (1.0 - r**2))

    if alternative == "two_sided":
        p_value = 2.0 * float(student_t.sf(abs(statistic), df))
    elif alternative == "greater":
        p_value = float(student_t.sf(statistic, df))
    elif alternative == "less":
        p_value = float(student_t.cdf(statistic, df))
    else:
        raise InvalidInputError(f"Unknown alternative: {alternative}")

    z = math.atanh(r) if abs(r) < 1.0 else math.copysign(math.inf, r)
    se = 1.0 / math.sqrt(n - 3)
    alpha = 1.0 - confidence_level
    if alternative == "two_sided":
        q = float(norm.ppf(1 - alpha / 2))
        ci = (math.tanh(z - q * se), math.tanh(z + q * se))
    elif alternative == "greater":
        ci = (math.tanh(z - float(norm.ppf(1 - alpha)) * se), 1.0)
    else:
        ci = (-1.0, math.tanh(z + float(norm.ppf(1 - alpha)) * se))

    return HypothesisTestResult(
        statistic=statistic,
        p_value=min(1.0, p_value),
        ci_lower=ci[0],
        ci_upper=ci[1],
        alternative=alternative,
        estimate=r,
        confidence_level=confidence_level,
        method="Pearson's product-moment correlation",
        n=n,
    )
