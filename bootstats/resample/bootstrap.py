"""Bootstrap orchestration: resample, re-evaluate, collect"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Sequence

import numpy as np
from tqdm import tqdm

from bootstats.config import BootstrapConfig, make_bootstrap_config
from bootstats.errors import ComputationError, InvalidInputError
from bootstats.resample.estimator import summarize
from bootstats.resample.resampler import as_sample, draw_indices, replicate_streams
from bootstats.resample.statistic import OneSampleStatistic, TwoSampleStatistic, apply_statistic
from bootstats.schemas import BootstrapDistribution, BootstrapResult

logger = logging.getLogger(__name__)

NAN_POLICY_DESCRIPTIONS = {
    "omit": "failed replicates are excluded from SE and quantiles and counted",
    "raise": "the first failed replicate aborts the run",
}

ReplicateDraw = Callable[[np.random.Generator], tuple[np.ndarray, ...]]


def _observed_statistic(statistic: Callable[..., float], *samples: np.ndarray) -> float:
    observed = apply_statistic(statistic, *samples)
    if math.isnan(observed):
        raise ComputationError("Statistic is undefined on the observed sample")
    return observed


def _evaluate_replicates(
    draw: ReplicateDraw,
    statistic: Callable[..., float],
    config: BootstrapConfig,
    rng: np.random.Generator | None,
) -> np.ndarray:
    """Evaluate the statistic on B replicates, one value slot per replicate index."""
    streams = replicate_streams(config.replicate_count, config.seed, rng)
    values = np.full(config.replicate_count, np.nan)

    def evaluate(idx: int) -> tuple[int, float]:
        return idx, apply_statistic(statistic, *draw(streams[idx]))

    def record(idx: int, value: float) -> None:
        if math.isnan(value) and config.nan_policy == "raise":
            raise ComputationError(f"Statistic failed on replicate {idx}", replicate_index=idx)
        values[idx] = value

    with tqdm(total=config.replicate_count, desc="Replicates", disable=not config.show_progress) as pbar:
        if config.n_workers == 1:
            for idx in range(config.replicate_count):
                record(*evaluate(idx))
                pbar.update(1)
        else:
            # Each replicate owns its stream and slot, so completion order is irrelevant
            collected = np.full(config.replicate_count, np.nan)
            with ThreadPoolExecutor(max_workers=config.n_workers) as executor:
                futures = [executor.submit(evaluate, idx) for idx in range(config.replicate_count)]
                for future in as_completed(futures):
                    idx, value = future.result()
                    collected[idx] = value
                    pbar.update(1)
            # Record in index order so the reported failure matches a sequential run
            for idx, value in enumerate(collected.tolist()):
                record(idx, value)

    return values


def _run(
    draw: ReplicateDraw,
    statistic: Callable[..., float],
    observed: float,
    config: BootstrapConfig,
    rng: np.random.Generator | None,
    design: str,
) -> BootstrapDistribution:
    logger.info(
        "Bootstrap (%s): B=%d, workers=%d, nan_policy=%s (%s)",
        design,
        config.replicate_count,
        config.n_workers,
        config.nan_policy,
        NAN_POLICY_DESCRIPTIONS[config.nan_policy],
    )
    values = _evaluate_replicates(draw, statistic, config, rng)
    n_failed = int(np.isnan(values).sum())
    if n_failed:
        logger.warning(
            "Statistic failed on %d of %d replicates; they are excluded from the summary",
            n_failed,
            config.replicate_count,
        )

    return BootstrapDistribution(
        observed=observed,
        values=tuple(values.tolist()),
        n_failed=n_failed,
        # A caller-owned generator, not config.seed, drove the run
        seed=config.seed if rng is None else None,
    )


def run_bootstrap(
    sample: Sequence[float] | np.ndarray,
    statistic: OneSampleStatistic,
    config: BootstrapConfig | None = None,
    *,
    rng: np.random.Generator | None = None,
    **overrides: Any,
) -> BootstrapDistribution:
    """Bootstrap a one-sample statistic.

    Args:
        sample: Observations
        statistic: Function from a sample to a real number
        config: Engine configuration (defaults to ``BootstrapConfig()``)
        rng: Optional caller-owned generator; per-replicate streams are
            spawned from it instead of from ``config.seed``
        **overrides: Individual ``BootstrapConfig`` fields

    Returns:
        BootstrapDistribution with t0 and the B replicate values
    """
    config = make_bootstrap_config(config, **overrides)
    x = as_sample(sample)
    observed = _observed_statistic(statistic, x)
    n = len(x)

    def draw(stream: np.random.Generator) -> tuple[np.ndarray, ...]:
        return (x[draw_indices(n, stream)],)

    return _run(draw, statistic, observed, config, rng, "one_sample")


def run_bootstrap_two_sample(
    sample_a: Sequence[float] | np.ndarray,
    sample_b: Sequence[float] | np.ndarray,
    statistic: TwoSampleStatistic,
    config: BootstrapConfig | None = None,
    *,
    paired: bool = False,
    rng: np.random.Generator | None = None,
    **overrides: Any,
) -> BootstrapDistribution:
    """Bootstrap a statistic of two samples.

    Paired designs resample row indices jointly so each (a[i], b[i]) pair
    stays together. Independent designs resample each sample separately,
    drawing a's indices before b's from the replicate's stream.
    """
    config = make_bootstrap_config(config, **overrides)
    a = as_sample(sample_a, "sample_a")
    b = as_sample(sample_b, "sample_b")
    if paired and len(a) != len(b):
        raise InvalidInputError(f"Paired samples differ in length: {len(a)} != {len(b)}")
    observed = _observed_statistic(statistic, a, b)
    n_a, n_b = len(a), len(b)

    if paired:
        def draw(stream: np.random.Generator) -> tuple[np.ndarray, ...]:
            idx = draw_indices(n_a, stream)
            return a[idx], b[idx]
    else:
        def draw(stream: np.random.Generator) -> tuple[np.ndarray, ...]:
            return a[draw_indices(n_a, stream)], b[draw_indices(n_b, stream)]

    return _run(draw, statistic, observed, config, rng, "paired" if paired else "independent")


def compute_bootstrap_ci(
    values: Sequence[float] | np.ndarray,
    statistic: OneSampleStatistic,
    config: BootstrapConfig | None = None,
    *,
    rng: np.random.Generator | None = None,
    **overrides: Any,
) -> BootstrapResult:
    """Bootstrap a one-sample statistic and summarize it in one call."""
    config = make_bootstrap_config(config, **overrides)
    distribution = run_bootstrap(values, statistic, config, rng=rng)
    return _summarize(distribution, config)


def compute_bootstrap_ci_two_sample(
    sample_a: Sequence[float] | np.ndarray,
    sample_b: Sequence[float] | np.ndarray,
    statistic: TwoSampleStatistic,
    config: BootstrapConfig | None = None,
    *,
    paired: bool = False,
    rng: np.random.Generator | None = None,
    **overrides: Any,
) -> BootstrapResult:
    """Two-sample counterpart of ``compute_bootstrap_ci``."""
    config = make_bootstrap_config(config, **overrides)
    distribution = run_bootstrap_two_sample(sample_a, sample_b, statistic, config, paired=paired, rng=rng)
    return _summarize(distribution, config)


def _summarize(distribution: BootstrapDistribution, config: BootstrapConfig) -> BootstrapResult:
    return summarize(
        distribution,
        config.confidence_level,
        null_value=config.null_value,
        interpolation=config.quantile_interpolation,
        nan_policy=config.nan_policy,
    )
