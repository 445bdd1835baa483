"""Index resampling with replacement"""

from typing import Sequence

import numpy as np

from bootstats.errors import InvalidInputError


def as_sample(values: Sequence[float] | np.ndarray, name: str = "sample") -> np.ndarray:
    """Convert observations to a read-only 1-D float array.

    Raises:
        InvalidInputError: If the input is empty, not numeric, or not 1-D.
    """
    try:
        arr = np.array(values, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"{name} must contain numeric values: {e}") from e

    if arr.ndim != 1:
        raise InvalidInputError(f"{name} must be one-dimensional, got shape {arr.shape}")
    if arr.size == 0:
        raise InvalidInputError(f"{name} is empty")

    arr.setflags(write=False)
    return arr


def make_rng(seed: int | None = None) -> np.random.Generator:
    """Create a PCG64 generator from an integer seed (fresh entropy when None)."""
    return np.random.default_rng(seed)


def draw_indices(n: int, rng: np.random.Generator) -> np.ndarray:
    """Draw n indices uniformly from {0, ..., n-1} with replacement."""
    if n <= 0:
        raise InvalidInputError(f"Cannot resample a sample of size {n}")
    return rng.integers(0, n, size=n)


def replicate_streams(
    replicate_count: int,
    seed: int | None = None,
    rng: np.random.Generator | None = None,
) -> list[np.random.Generator]:
    """Spawn one independent generator per replicate index.

    Stream ``i`` depends only on the master seed (or the state of ``rng``)
    and on ``i``, so replicates can be evaluated in any order or on any
    number of workers and still reproduce the same values.
    """
    if replicate_count < 1:
        raise InvalidInputError(f"replicate_count must be >= 1, got {replicate_count}")
    master = rng if rng is not None else make_rng(seed)
    return master.spawn(replicate_count)
