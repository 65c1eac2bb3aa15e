"""Quality diagnostics for optimization experiments.

- Parameter recovery against a known p_true
- Dimension-aware L2 quality bands
- Convergence stagnation across degrees
- Objective value outlier burden
"""

from .l2_quality import L2Quality, check_l2_quality, l2_threshold_for
from .objective_distribution import (
    DistributionQuality,
    ObjectiveDistributionResult,
    check_objective_distribution_quality,
)
from .parameter_recovery import (
    RecoveryStats,
    compute_parameter_recovery_stats,
    compute_recovery_stats,
    coordinate_columns,
)
from .stagnation import StagnationResult, detect_stagnation

__all__ = [
    "L2Quality",
    "check_l2_quality",
    "l2_threshold_for",
    "DistributionQuality",
    "ObjectiveDistributionResult",
    "check_objective_distribution_quality",
    "RecoveryStats",
    "compute_parameter_recovery_stats",
    "compute_recovery_stats",
    "coordinate_columns",
    "StagnationResult",
    "detect_stagnation",
]
