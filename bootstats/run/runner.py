"""Config-driven analysis runner"""

import logging
from datetime import datetime
from pathlib import Path

import pandas as pd

from bootstats.config import AnalysisConfig, load_config
from bootstats.errors import InvalidInputError
from bootstats.parametric.ztest import z_test_one_sample, z_test_paired, z_test_two_sample
from bootstats.resample.bootstrap import run_bootstrap, run_bootstrap_two_sample
from bootstats.resample.estimator import summarize
from bootstats.resample.statistic import get_statistic
from bootstats.schemas import BootstrapDistribution, HypothesisTestResult
from bootstats.utils.hashing import hash_dict
from bootstats.utils.io import read_table, write_json
from bootstats.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def make_run_id(analysis_name: str) -> str:
    """Generate run ID."""
    timestamp = datetime.now().strftime("%Y-%m-%d_%H%M%S")
    return f"{timestamp}_{analysis_name}"


def load_columns(config: AnalysisConfig) -> list[pd.Series]:
    """Read the configured columns, one series per sample."""
    df = read_table(config.data.path, config.data.columns)
    expected = 1 if config.design == "one_sample" else 2
    if len(config.data.columns) != expected:
        raise InvalidInputError(
            f"Design {config.design} needs {expected} column(s), got {config.data.columns}"
        )

    if config.design == "paired" and config.data.dropna:
        # Drop incomplete pairs together so rows stay aligned
        df = df.dropna(subset=config.data.columns)
    columns = [df[name].astype(float) for name in config.data.columns]
    if config.data.dropna:
        columns = [col.dropna() for col in columns]
    return columns


def run_z_test(config: AnalysisConfig, columns: list[pd.Series]) -> HypothesisTestResult:
    """Run the parametric z-test matching the configured design."""
    level = config.bootstrap.confidence_level
    null = config.bootstrap.null_value
    if config.design == "one_sample":
        return z_test_one_sample(columns[0], null, confidence_level=level)
    if config.design == "paired":
        # d = first column - second column, the sign of mean_difference
        return z_test_paired(columns[1], columns[0], null, confidence_level=level)
    return z_test_two_sample(columns[0], columns[1], null, confidence_level=level)


def bootstrap_from_config(config: AnalysisConfig, columns: list[pd.Series]) -> BootstrapDistribution:
    """Run the configured bootstrap on the loaded columns."""
    two_sample = config.design != "one_sample"
    statistic = get_statistic(config.statistic, two_sample=two_sample)
    if not two_sample:
        return run_bootstrap(columns[0].to_numpy(), statistic, config.bootstrap)
    return run_bootstrap_two_sample(
        columns[0].to_numpy(),
        columns[1].to_numpy(),
        statistic,
        config.bootstrap,
        paired=config.design == "paired",
    )


def run_analysis(config_path: str | Path) -> Path:
    """Run a complete analysis.

    Returns:
        Path to run directory
    """
    config = load_config(config_path)

    run_id = make_run_id(config.analysis_name)
    run_dir = Path(config.output.runs_dir) / run_id
    run_dir.mkdir(parents=True, exist_ok=True)
    setup_logging(run_dir / "run.log")
    logger.info("Starting run %s", run_id)

    columns = load_columns(config)
    distribution = bootstrap_from_config(config, columns)
    result = summarize(
        distribution,
        config.bootstrap.confidence_level,
        null_value=config.bootstrap.null_value,
        interpolation=config.bootstrap.quantile_interpolation,
        nan_policy=config.bootstrap.nan_policy,
    )

    results = {
        "statistic": config.statistic,
        "design": config.design,
        "bootstrap": result.to_dict(),
    }
    if config.z_test:
        results["z_test"] = run_z_test(config, columns).to_dict()
    write_json(run_dir / "results.json", results)

    if config.output.save_replicates:
        pd.DataFrame({
            "replicate": range(distribution.replicate_count),
            "value": distribution.values,
        }).to_csv(run_dir / "replicates.csv", index=False)

    meta = {
        "run_id": run_id,
        "config": config.model_dump(),
        "config_hash": hash_dict(config.model_dump()),
        "package_versions": _get_package_versions(),
        "sample_sizes": [int(len(col)) for col in columns],
        "n_failed_replicates": distribution.n_failed,
    }
    write_json(run_dir / "meta.json", meta)
    logger.info("Results written to %s", run_dir)

    return run_dir


def _get_package_versions() -> dict[str, str]:
    """Get versions of key packages."""
    versions = {}
    packages = ["numpy", "scipy", "pandas", "pydantic"]
    for pkg in packages:
        try:
            mod = __import__(pkg)
            versions[pkg] = getattr(mod, "__version__", "unknown")
        except ImportError:
            versions[pkg] = "not_installed"
    return versions
