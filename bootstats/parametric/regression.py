"""Ordinary least squares with an explicit outcome/predictor specification.

Columns are looked up by name on a pandas DataFrame; no formula strings are
parsed or evaluated.
"""

import logging

import numpy as np
import pandas as pd
from pydantic import ValidationError
from scipy.stats import t as student_t

from bootstats.errors import InvalidInputError, NumericDegeneracyError
from bootstats.schemas import CoefficientSummary, ModelSpec, RegressionResult

logger = logging.getLogger(__name__)

INTERCEPT_NAME = "(Intercept)"


def make_model_spec(**fields) -> ModelSpec:
    """Build a validated model spec from field values."""
    try:
        return ModelSpec(**fields)
    except ValidationError as e:
        raise InvalidInputError(f"Invalid model specification: {e}") from e


def resolve_columns(data: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    """Select named columns as floats, failing on any name the table does not have."""
    missing = [c for c in columns if c not in data.columns]
    if missing:
        raise InvalidInputError(f"Columns {missing} not found (available: {list(data.columns)})")
    try:
        return data.loc[:, columns].astype(float)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Columns {columns} must be numeric: {e}") from e


def resolve_design(data: pd.DataFrame, spec: ModelSpec) -> tuple[np.ndarray, np.ndarray, list[str]]:
    """Build the design matrix and outcome vector for a model spec.

    Rows with a missing value in any referenced column are dropped.

    Returns:
        (X, y, coefficient_names)
    """
    frame = resolve_columns(data, [spec.outcome_variable, *spec.predictor_variables])
    n_before = len(frame)
    frame = frame.dropna()
    if len(frame) < n_before:
        logger.info("Dropped %d rows with missing values", n_before - len(frame))

    X = frame[spec.predictor_variables].to_numpy(dtype=float)
    names = list(spec.predictor_variables)
    if spec.intercept:
        X = np.column_stack([np.ones(len(frame)), X])
        names = [INTERCEPT_NAME, *names]
    y = frame[spec.outcome_variable].to_numpy(dtype=float)
    return X, y, names


def fit_ols(data: pd.DataFrame, spec: ModelSpec, confidence_level: float = 0.95) -> RegressionResult:
    """Fit y = X b + e by least squares.

    Args:
        data: Table holding the outcome and predictor columns
        spec: Outcome and ordered predictors
        confidence_level: Level of the per-coefficient t intervals

    Raises:
        InvalidInputError: Missing columns, bad level, or no residual degrees of freedom
        NumericDegeneracyError: Rank-deficient design or constant outcome
    """
    if not 0.0 < confidence_level < 1.0:
        raise InvalidInputError(f"confidence_level must lie in (0, 1), got {confidence_level}")
    X, y, names = resolve_design(data, spec)
    n, p = X.shape
    df_resid = n - p
    if df_resid < 1:
        raise InvalidInputError(f"{n} complete rows cannot fit {p} coefficients with residual df >= 1")
    if np.linalg.matrix_rank(X) < p:
        raise NumericDegeneracyError("Design matrix is singular (collinear or constant predictors)")

    beta, _, _, _ = np.linalg.lstsq(X, y, rcond=None)
    resid = y - X @ beta
    sse = float(resid @ resid)
    if spec.intercept:
        sst = float(np.sum((y - y.mean()) ** 2))
    else:
        sst = float(y @ y)
    if sst <= 0:
        raise NumericDegeneracyError("Outcome has no variation")

    sigma2 = sse / df_resid
    cov = sigma2 * np.linalg.inv(X.T @ X)
    se = np.sqrt(np.diag(cov))
    t_crit = float(student_t.ppf(1 - (1 - confidence_level) / 2, df_resid))

    coefficients = []
    for name, b, s in zip(names, beta, se):
        t_value = float(b / s) if s > 0 else float(np.copysign(np.inf, b))
        coefficients.append(CoefficientSummary(
            name=name,
            estimate=float(b),
            standard_error=float(s),
            t_value=t_value,
            p_value=float(min(1.0, 2 * student_t.sf(abs(t_value), df_resid))),
            ci_lower=float(b - t_crit * s),
            ci_upper=float(b + t_crit * s),
        ))

    r2 = 1.0 - sse / sst
    df_model = p - 1 if spec.intercept else p
    df_total = n - 1 if spec.intercept else n
    adj_r2 = 1.0 - (1.0 - r2) * df_total / df_resid if df_model > 0 else r2

    return RegressionResult(
        outcome_variable=spec.outcome_variable,
        coefficients=coefficients,
        r_squared=r2,
        adj_r_squared=adj_r2,
        sigma=float(np.sqrt(sigma2)),
        df_residual=df_resid,
        n=n,
        confidence_level=confidence_level,
    )
