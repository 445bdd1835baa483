"""Tests for coverage simulation"""

import numpy as np
import pytest

from bootstats.config import BootstrapConfig
from bootstats.errors import InvalidInputError
from bootstats.resample.statistic import mean, median_difference
from bootstats.simulation import coverage_simulation


def _equal_median_samples(rng):
    return rng.normal(size=1000), rng.normal(size=1000)


def test_median_difference_coverage():
    """Test that the 95% interval for a zero median difference covers 0 in >= 90% of trials."""
    config = BootstrapConfig(replicate_count=1000, confidence_level=0.95, seed=20240611)
    result = coverage_simulation(
        _equal_median_samples,
        median_difference,
        true_value=0.0,
        n_trials=100,
        config=config,
    )
    assert result.n_trials == 100
    assert result.coverage >= 0.90
    assert result.mean_width > 0


def test_simulation_reproducible():
    """Test that the master seed fixes every trial."""
    def sampler(rng):
        return rng.exponential(size=30)

    a = coverage_simulation(sampler, mean, true_value=1.0, n_trials=5, replicate_count=200, seed=4)
    b = coverage_simulation(sampler, mean, true_value=1.0, n_trials=5, replicate_count=200, seed=4)
    assert a == b


def test_invalid_trial_count():
    """Test that at least one trial is required."""
    with pytest.raises(InvalidInputError):
        coverage_simulation(lambda rng: np.ones(3), mean, true_value=1.0, n_trials=0)
