"""
Custom exceptions for the convergence quality analysis package.

These exceptions carry actionable error information so callers can tell a
bad threshold file apart from a broken experiment directory.
"""


class QualityAnalysisError(Exception):
    """Base exception for quality analysis errors."""
    pass


class ThresholdConfigError(QualityAnalysisError, KeyError):
    """A required threshold category or key is missing or has the wrong type."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ""


class ThresholdParseError(QualityAnalysisError, ValueError):
    """Threshold configuration text could not be parsed."""
    pass


class ThresholdFileNotFoundError(QualityAnalysisError, FileNotFoundError):
    """Threshold configuration file does not exist."""
    pass


class DimensionMismatchError(QualityAnalysisError, ValueError):
    """Parameter vectors of different lengths were compared."""
    pass


class InsufficientDataError(QualityAnalysisError, ValueError):
    """A statistic was requested over an empty collection."""
    pass


class ExperimentDataError(QualityAnalysisError):
    """An experiment artifact is missing or malformed."""
    pass


class MissingColumnError(ExperimentDataError, ValueError):
    """A critical point table is missing a required column."""
    pass
