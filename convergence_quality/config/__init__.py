"""Configuration: paths, logging, analysis parameters and quality thresholds."""

from .parameters import AnalysisParameters, get_default_parameters
from .thresholds import (
    ThresholdStore,
    ThresholdValue,
    load_quality_thresholds,
    parse_thresholds,
    parse_value,
)

__all__ = [
    "AnalysisParameters",
    "get_default_parameters",
    "ThresholdStore",
    "ThresholdValue",
    "load_quality_thresholds",
    "parse_thresholds",
    "parse_value",
]
