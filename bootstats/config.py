"""Configuration system with YAML parsing and Pydantic validation"""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from bootstats.errors import InvalidInputError
from bootstats.schemas import NanPolicy, QuantileInterpolation


class BootstrapConfig(BaseModel):
    """Bootstrap engine configuration."""
    replicate_count: int = Field(default=1000, ge=1, description="Number of bootstrap replicates (B)")
    confidence_level: float = Field(default=0.95, gt=0.0, lt=1.0)
    seed: int | None = Field(default=None, description="Master seed; None draws fresh OS entropy")
    quantile_interpolation: QuantileInterpolation = "linear"
    nan_policy: NanPolicy = "omit"
    n_workers: int = Field(default=1, ge=1)
    null_value: float = Field(default=0.0, description="Statistic value under the null for the Wald test")
    show_progress: bool = False


class DataConfig(BaseModel):
    """Input table configuration."""
    path: str
    columns: list[str] = Field(..., min_length=1, max_length=2)
    dropna: bool = True


class OutputConfig(BaseModel):
    """Output configuration."""
    runs_dir: str = "runs"
    save_replicates: bool = True


class AnalysisConfig(BaseModel):
    """Complete analysis configuration."""
    analysis_name: str
    design: Literal["one_sample", "paired", "independent"] = "one_sample"
    statistic: str = "mean"
    data: DataConfig
    bootstrap: BootstrapConfig = Field(default_factory=BootstrapConfig)
    z_test: bool = Field(default=False, description="Also run the matching parametric z-test")
    output: OutputConfig = Field(default_factory=OutputConfig)


def make_bootstrap_config(config: BootstrapConfig | None = None, **overrides: Any) -> BootstrapConfig:
    """Build a validated bootstrap config from an optional base plus keyword overrides."""
    data = config.model_dump() if config is not None else {}
    data.update(overrides)
    try:
        return BootstrapConfig(**data)
    except ValidationError as e:
        raise InvalidInputError(f"Invalid bootstrap configuration: {e}") from e


def load_config(config_path: str | Path) -> AnalysisConfig:
    """Load and validate YAML config file."""
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    try:
        return AnalysisConfig(**data)
    except ValidationError as e:
        raise InvalidInputError(f"Invalid config {config_path}: {e}") from e
