"""Error taxonomy"""


class BootstatsError(Exception):
    """Base class for all package errors."""


class InvalidInputError(BootstatsError, ValueError):
    """Bad input or configuration (empty sample, B < 1, level outside (0, 1), ...)."""


class NumericDegeneracyError(BootstatsError, ArithmeticError):
    """A quantity is mathematically undefined for the given data (zero variance, singular design)."""


class ComputationError(BootstatsError, RuntimeError):
    """A statistic could not be evaluated."""

    def __init__(self, message: str, replicate_index: int | None = None):
        super().__init__(message)
        self.replicate_index = replicate_index


class InsufficientReplicatesError(InvalidInputError, NumericDegeneracyError):
    """Fewer than two finite replicate values, so the standard deviation is undefined."""
