"""Repeated-sampling coverage check for bootstrap percentile intervals"""

import logging
from typing import Any, Callable

import numpy as np
from tqdm import tqdm

from bootstats.config import BootstrapConfig, make_bootstrap_config
from bootstats.errors import InvalidInputError
from bootstats.resample.bootstrap import compute_bootstrap_ci, compute_bootstrap_ci_two_sample
from bootstats.resample.resampler import make_rng
from bootstats.schemas import CoverageResult

logger = logging.getLogger(__name__)

# (rng) -> one sample, or a pair of samples for two-sample statistics
Sampler = Callable[[np.random.Generator], np.ndarray | tuple[np.ndarray, np.ndarray]]


def coverage_simulation(
    sampler: Sampler,
    statistic: Callable[..., float],
    *,
    true_value: float,
    n_trials: int = 100,
    config: BootstrapConfig | None = None,
    paired: bool = False,
    **overrides: Any,
) -> CoverageResult:
    """Estimate how often the percentile interval contains the true value.

    Every trial draws fresh data with ``sampler`` and runs a full bootstrap.
    Trial ``i`` uses its own generator spawned from the master seed
    (``config.seed``), so the whole simulation is reproducible.
    """
    if n_trials < 1:
        raise InvalidInputError(f"n_trials must be >= 1, got {n_trials}")
    config = make_bootstrap_config(config, **overrides)
    trial_rngs = make_rng(config.seed).spawn(n_trials)

    n_covered = 0
    widths = []
    for trial_rng in tqdm(trial_rngs, desc="Trials", disable=not config.show_progress):
        data = sampler(trial_rng)
        trial_config = config.model_copy(
            update={"seed": int(trial_rng.integers(0, 2**63 - 1)), "show_progress": False}
        )
        if isinstance(data, tuple):
            result = compute_bootstrap_ci_two_sample(*data, statistic, trial_config, paired=paired)
        else:
            result = compute_bootstrap_ci(data, statistic, trial_config)

        if result.ci_lower <= true_value <= result.ci_upper:
            n_covered += 1
        widths.append(result.ci_upper - result.ci_lower)

    coverage = CoverageResult(
        n_trials=n_trials,
        n_covered=n_covered,
        true_value=true_value,
        confidence_level=config.confidence_level,
        mean_width=float(np.mean(widths)),
    )
    logger.info(
        "Coverage %.3f over %d trials at nominal level %.3f",
        coverage.coverage,
        n_trials,
        config.confidence_level,
    )
    return coverage
