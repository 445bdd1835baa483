"""I/O utilities"""

import json
import math
from pathlib import Path
from typing import Any

import pandas as pd

from bootstats.errors import InvalidInputError


def json_safe(obj: Any) -> Any:
    """Replace non-finite floats, which JSON cannot represent, with None."""
    if isinstance(obj, float) and not math.isfinite(obj):
        return None
    if isinstance(obj, dict):
        return {k: json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [json_safe(v) for v in obj]
    return obj


def read_json(path: str | Path) -> dict[str, Any]:
    """Read JSON file."""
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def write_json(path: str | Path, obj: dict[str, Any]) -> None:
    """Write JSON file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(json_safe(obj), f, indent=2, ensure_ascii=False)


def read_table(path: str | Path, columns: list[str] | None = None) -> pd.DataFrame:
    """Read a CSV table, optionally checking that the named columns exist."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    df = pd.read_csv(path)
    if columns:
        missing = [c for c in columns if c not in df.columns]
        if missing:
            raise InvalidInputError(f"Columns {missing} not found in {path} (available: {list(df.columns)})")
    return df
