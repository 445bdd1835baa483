"""Chi-square goodness-of-fit and independence tests"""

import logging
from typing import Sequence

import numpy as np
from scipy.stats import chi2

from bootstats.errors import InvalidInputError, NumericDegeneracyError
from bootstats.schemas import ChiSquareResult

logger = logging.getLogger(__name__)

MIN_EXPECTED_COUNT = 5.0


def _counts(observed: Sequence | np.ndarray, ndim: int) -> np.ndarray:
    try:
        arr = np.array(observed, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Counts must be numeric: {e}") from e
    if arr.ndim != ndim:
        raise InvalidInputError(f"Expected a {ndim}-D array of counts, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)) or np.any(arr < 0):
        raise InvalidInputError("Counts must be finite and non-negative")
    return arr


def _warn_small_expected(expected: np.ndarray) -> None:
    if np.any(expected < MIN_EXPECTED_COUNT):
        logger.warning(
            "Expected counts below %.0f (min %.3g); the chi-square approximation may be inaccurate",
            MIN_EXPECTED_COUNT,
            float(expected.min()),
        )


def chisq_goodness_of_fit(
    observed: Sequence[float] | np.ndarray,
    probabilities: Sequence[float] | np.ndarray | None = None,
    *,
    rescale: bool = False,
) -> ChiSquareResult:
    """Pearson goodness-of-fit test of counts against category probabilities.

    Args:
        observed: Counts per category
        probabilities: Hypothesized category probabilities (uniform if None)
        rescale: Normalize probabilities to sum to 1 instead of rejecting them
    """
    counts = _counts(observed, 1)
    k = counts.size
    if k < 2:
        raise InvalidInputError("Goodness-of-fit needs at least 2 categories")
    total = counts.sum()
    if total <= 0:
        raise InvalidInputError("Counts sum to zero")

    if probabilities is None:
        p = np.full(k, 1.0 / k)
    else:
        p = _counts(probabilities, 1)
        if p.size != k:
            raise InvalidInputError(f"Got {p.size} probabilities for {k} categories")
        if rescale:
            if p.sum() <= 0:
                raise InvalidInputError("Probabilities sum to zero")
            p = p / p.sum()
        elif not np.isclose(p.sum(), 1.0):
            raise InvalidInputError(f"Probabilities must sum to 1, got {p.sum()}")

    expected = total * p
    if np.any(expected == 0):
        raise NumericDegeneracyError("A category has zero expected count")
    _warn_small_expected(expected)

    statistic = float(np.sum((counts - expected) ** 2 / expected))
    df = k - 1
    return ChiSquareResult(
        statistic=statistic,
        p_value=float(chi2.sf(statistic, df)),
        df=df,
        expected=expected.tolist(),
        method="Chi-squared test for given probabilities",
        n=int(round(total)),
    )


def chisq_independence(
    table: Sequence[Sequence[float]] | np.ndarray,
    *,
    correct: bool = True,
) -> ChiSquareResult:
    """Pearson chi-square test of independence on an r x c contingency table.

    With ``correct`` set, 2x2 tables get Yates' continuity correction: each
    |O - E| is reduced by min(0.5, |O - E|). Larger tables are never corrected.
    """
    counts = _counts(table, 2)
    n_rows, n_cols = counts.shape
    if n_rows < 2 or n_cols < 2:
        raise InvalidInputError(f"Contingency table must be at least 2x2, got {n_rows}x{n_cols}")

    total = counts.sum()
    row_sums = counts.sum(axis=1)
    col_sums = counts.sum(axis=0)
    if total <= 0 or np.any(row_sums == 0) or np.any(col_sums == 0):
        raise NumericDegeneracyError("Contingency table has an empty row or column")

    expected = np.outer(row_sums, col_sums) / total
    _warn_small_expected(expected)

    deviation = np.abs(counts - expected)
    correction_applied = correct and counts.shape == (2, 2)
    if correction_applied:
        deviation = deviation - np.minimum(0.5, deviation)

    statistic = float(np.sum(deviation**2 / expected))
    df = (n_rows - 1) * (n_cols - 1)
    method = "Pearson's Chi-squared test"
    if correction_applied:
        method += " with Yates' continuity correction"

    return ChiSquareResult(
        statistic=statistic,
        p_value=float(chi2.sf(statistic, df)),
        df=df,
        expected=expected.tolist(),
        correction_applied=correction_applied,
        method=method,
        n=int(round(total)),
    )
