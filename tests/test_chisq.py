"""Tests for chi-square tests"""

import math

import numpy as np
import pytest
from scipy.stats import chi2_contingency

from bootstats.errors import InvalidInputError, NumericDegeneracyError
from bootstats.parametric.chisq import chisq_goodness_of_fit, chisq_independence

SMALL_TABLE = [[3, 7], [8, 2]]


def test_yates_correction_changes_p_value():
    """Test that the continuity correction is applied on a small 2x2 table."""
    corrected = chisq_independence(SMALL_TABLE, correct=True)
    uncorrected = chisq_independence(SMALL_TABLE, correct=False)

    assert corrected.correction_applied
    assert not uncorrected.correction_applied
    assert corrected.p_value != uncorrected.p_value
    assert corrected.statistic < uncorrected.statistic
    assert uncorrected.statistic == pytest.approx(5.0505051, abs=1e-6)
    assert corrected.statistic == pytest.approx(3.2323232, abs=1e-6)


@pytest.mark.parametrize("correct", [True, False])
def test_independence_matches_reference(correct):
    """Test against scipy's contingency table test."""
    ref_stat, ref_p, ref_df, ref_expected = chi2_contingency(np.array(SMALL_TABLE), correction=correct)
    result = chisq_independence(SMALL_TABLE, correct=correct)
    assert result.statistic == pytest.approx(ref_stat)
    assert result.p_value == pytest.approx(ref_p)
    assert result.df == ref_df == 1
    assert np.allclose(result.expected, ref_expected)
    assert result.alternative == "greater"
    assert result.n == 20


def test_larger_table_not_corrected():
    """Test that only 2x2 tables get the correction."""
    table = [[10, 20, 30], [20, 25, 15]]
    result = chisq_independence(table, correct=True)
    ref_stat, ref_p, ref_df, _ = chi2_contingency(np.array(table), correction=False)
    assert not result.correction_applied
    assert result.df == ref_df == 2
    assert result.statistic == pytest.approx(ref_stat)
    assert result.p_value == pytest.approx(ref_p)


def test_small_deviation_correction_capped():
    """Test that the correction never flips the sign of a deviation."""
    # |O - E| = 0.25 everywhere, so the corrected statistic is zero
    table = [[5.25, 4.75], [4.75, 5.25]]
    result = chisq_independence(table)
    assert result.statistic == 0.0
    assert result.p_value == 1.0


def test_goodness_of_fit_uniform():
    """Test goodness of fit against equal probabilities."""
    result = chisq_goodness_of_fit([20, 30, 50])
    assert result.statistic == pytest.approx(14.0)
    assert result.df == 2
    # chi-square with 2 df has survival function exp(-x / 2)
    assert result.p_value == pytest.approx(math.exp(-7.0))


def test_goodness_of_fit_probabilities():
    """Test goodness of fit against given probabilities."""
    result = chisq_goodness_of_fit([25, 25, 50], [0.25, 0.25, 0.5])
    assert result.statistic == pytest.approx(0.0)
    assert result.p_value == pytest.approx(1.0)

    rescaled = chisq_goodness_of_fit([25, 25, 50], [1, 1, 2], rescale=True)
    assert rescaled.statistic == pytest.approx(0.0)

    with pytest.raises(InvalidInputError):
        chisq_goodness_of_fit([25, 25, 50], [1, 1, 2])


def test_invalid_tables():
    """Test input validation."""
    with pytest.raises(InvalidInputError):
        chisq_independence([1, 2, 3])
    with pytest.raises(InvalidInputError):
        chisq_independence([[1, -2], [3, 4]])
    with pytest.raises(InvalidInputError):
        chisq_independence([[1, 2, 3]])
    with pytest.raises(NumericDegeneracyError):
        chisq_independence([[0, 0], [3, 4]])
    with pytest.raises(InvalidInputError):
        chisq_goodness_of_fit([10])
