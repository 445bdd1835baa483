"""Pydantic schemas for all result artifacts"""

from typing import Literal

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator


Alternative = Literal["two_sided", "greater", "less"]
NanPolicy = Literal["omit", "raise"]
QuantileInterpolation = Literal["linear"]


# Bootstrap schemas
class BootstrapDistribution(BaseModel):
    """Replicate statistic values of one bootstrap run.

    Failed replicates are kept as NaN so that ``values[i]`` always belongs to
    replicate ``i``.
    """
    model_config = ConfigDict(frozen=True)

    observed: float = Field(..., description="Statistic on the unperturbed sample (t0)")
    values: tuple[float, ...] = Field(..., description="One value per replicate, NaN if evaluation failed")
    n_failed: int = Field(default=0, ge=0)
    seed: int | None = None

    @property
    def replicate_count(self) -> int:
        return len(self.values)

    def finite_values(self) -> np.ndarray:
        """Replicate values with failed (NaN) entries removed."""
        arr = np.asarray(self.values, dtype=float)
        return arr[np.isfinite(arr)]


class BootstrapResult(BaseModel):
    """Summary of a bootstrap distribution."""
    observed_statistic: float
    standard_error: float = Field(..., ge=0.0)
    ci_lower: float
    ci_upper: float
    z: float
    p_value: float = Field(..., ge=0.0, le=1.0)
    replicate_count: int = Field(..., ge=1)
    n_excluded: int = Field(default=0, ge=0, description="Replicates dropped because the statistic failed")
    confidence_level: float = Field(..., gt=0.0, lt=1.0)
    null_value: float = 0.0
    interpolation: QuantileInterpolation = "linear"
    nan_policy: NanPolicy = "omit"

    def to_dict(self) -> dict:
        """Convert to dict for JSON storage."""
        return self.model_dump()


# Parametric test schemas
class HypothesisTestResult(BaseModel):
    """Statistic, p-value and confidence interval of a parametric test."""
    statistic: float
    p_value: float = Field(..., ge=0.0, le=1.0)
    ci_lower: float | None = None
    ci_upper: float | None = None
    alternative: Alternative = "two_sided"
    estimate: float | None = None
    standard_error: float | None = None
    confidence_level: float | None = Field(default=None, gt=0.0, lt=1.0)
    method: str
    n: int | None = Field(default=None, ge=1)

    def to_dict(self) -> dict:
        return self.model_dump()


class ChiSquareResult(HypothesisTestResult):
    """Chi-square test result."""
    alternative: Alternative = "greater"
    df: int = Field(..., ge=1)
    expected: list[list[float]] | list[float]
    correction_applied: bool = False


class CoefficientSummary(BaseModel):
    """One row of a regression coefficient table."""
    name: str
    estimate: float
    standard_error: float
    t_value: float
    p_value: float = Field(..., ge=0.0, le=1.0)
    ci_lower: float
    ci_upper: float


class RegressionResult(BaseModel):
    """Ordinary least squares fit."""
    outcome_variable: str
    coefficients: list[CoefficientSummary]
    r_squared: float
    adj_r_squared: float
    sigma: float = Field(..., ge=0.0, description="Residual standard error")
    df_residual: int = Field(..., ge=1)
    n: int = Field(..., ge=1)
    confidence_level: float = Field(..., gt=0.0, lt=1.0)

    def coefficient(self, name: str) -> CoefficientSummary:
        """Look up a coefficient by predictor name (``(Intercept)`` for the intercept)."""
        for coef in self.coefficients:
            if coef.name == name:
                return coef
        raise KeyError(f"No coefficient named {name!r}")

    def to_dict(self) -> dict:
        return self.model_dump()


class CoverageResult(BaseModel):
    """Outcome of a repeated-sampling coverage check."""
    n_trials: int = Field(..., ge=1)
    n_covered: int = Field(..., ge=0)
    true_value: float
    confidence_level: float = Field(..., gt=0.0, lt=1.0)
    mean_width: float

    @property
    def coverage(self) -> float:
        return self.n_covered / self.n_trials


# Model specification
class ModelSpec(BaseModel):
    """Outcome and ordered predictors of a linear model, resolved by column name."""
    outcome_variable: str
    predictor_variables: list[str] = Field(..., min_length=1)
    intercept: bool = True

    @field_validator("predictor_variables")
    @classmethod
    def _unique_predictors(cls, v: list[str]) -> list[str]:
        if len(set(v)) != len(v):
            raise ValueError(f"Duplicate predictor variables: {v}")
        return v
