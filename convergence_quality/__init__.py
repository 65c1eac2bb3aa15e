"""Quality and convergence diagnostics for polynomial-degree optimization experiments.

Modules:
1. math_core    - parameter-space distance
2. config       - threshold store, paths, logging, analysis parameters
3. diagnostics  - parameter recovery, L2 quality, stagnation, outliers
4. ingestion    - experiment config / summary / critical point loading
5. pipeline     - per-experiment quality reports
"""

from .config.thresholds import ThresholdStore, load_quality_thresholds, parse_thresholds
from .diagnostics import (
    DistributionQuality,
    L2Quality,
    ObjectiveDistributionResult,
    RecoveryStats,
    StagnationResult,
    check_l2_quality,
    check_objective_distribution_quality,
    compute_parameter_recovery_stats,
    compute_recovery_stats,
    detect_stagnation,
)
from .exceptions import (
    DimensionMismatchError,
    ExperimentDataError,
    InsufficientDataError,
    MissingColumnError,
    QualityAnalysisError,
    ThresholdConfigError,
    ThresholdFileNotFoundError,
    ThresholdParseError,
)
from .math_core.distance import param_distance

__version__ = "0.1.0"

__all__ = [
    "ThresholdStore",
    "load_quality_thresholds",
    "parse_thresholds",
    "DistributionQuality",
    "L2Quality",
    "ObjectiveDistributionResult",
    "RecoveryStats",
    "StagnationResult",
    "check_l2_quality",
    "check_objective_distribution_quality",
    "compute_parameter_recovery_stats",
    "compute_recovery_stats",
    "detect_stagnation",
    "DimensionMismatchError",
    "ExperimentDataError",
    "InsufficientDataError",
    "MissingColumnError",
    "QualityAnalysisError",
    "ThresholdConfigError",
    "ThresholdFileNotFoundError",
    "ThresholdParseError",
    "param_distance",
]
