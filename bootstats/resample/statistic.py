"""Statistic evaluation on samples and replicates"""

import math
from typing import Callable

import numpy as np

from bootstats.errors import InvalidInputError

OneSampleStatistic = Callable[[np.ndarray], float]
TwoSampleStatistic = Callable[[np.ndarray, np.ndarray], float]


def apply_statistic(statistic: Callable[..., float], *samples: np.ndarray) -> float:
    """Evaluate a statistic, mapping degenerate evaluations to NaN.

    Arithmetic and value errors raised by the statistic, as well as
    non-finite results, become NaN. Anything else is a bug in the statistic
    and propagates.
    """
    try:
        with np.errstate(all="ignore"):
            value = float(statistic(*samples))
    except (ArithmeticError, ValueError, FloatingPointError):
        return math.nan

    if not math.isfinite(value):
        return math.nan
    return value


# Built-in statistics
def mean(x: np.ndarray) -> float:
    return float(np.mean(x))


def median(x: np.ndarray) -> float:
    return float(np.median(x))


def std(x: np.ndarray) -> float:
    """Sample standard deviation (ddof=1)."""
    return float(np.std(x, ddof=1))


def mean_difference(a: np.ndarray, b: np.ndarray) -> float:
    """mean(a) - mean(b)"""
    return float(np.mean(a) - np.mean(b))


def median_difference(a: np.ndarray, b: np.ndarray) -> float:
    """median(a) - median(b)"""
    return float(np.median(a) - np.median(b))


def correlation(a: np.ndarray, b: np.ndarray) -> float:
    """Pearson correlation; undefined (ZeroDivisionError) when either side is constant."""
    a_c = a - np.mean(a)
    b_c = b - np.mean(b)
    denom = math.sqrt(float(np.sum(a_c**2)) * float(np.sum(b_c**2)))
    if denom == 0.0:
        raise ZeroDivisionError("Correlation undefined for a constant sample")
    return float(np.sum(a_c * b_c)) / denom


ONE_SAMPLE_STATISTICS: dict[str, OneSampleStatistic] = {
    "mean": mean,
    "median": median,
    "std": std,
}

TWO_SAMPLE_STATISTICS: dict[str, TwoSampleStatistic] = {
    "mean_difference": mean_difference,
    "median_difference": median_difference,
    "correlation": correlation,
}

BUILTIN_STATISTICS: dict[str, Callable[..., float]] = {**ONE_SAMPLE_STATISTICS, **TWO_SAMPLE_STATISTICS}


def get_statistic(name: str, two_sample: bool = False) -> Callable[..., float]:
    """Look up a built-in statistic by name.

    Args:
        name: One of ``BUILTIN_STATISTICS``
        two_sample: Whether the design passes two samples to the statistic
    """
    table = TWO_SAMPLE_STATISTICS if two_sample else ONE_SAMPLE_STATISTICS
    if name not in table:
        kind = "two-sample" if two_sample else "one-sample"
        raise InvalidInputError(f"Unknown {kind} statistic: {name} (choose from {sorted(table)})")
    return table[name]
