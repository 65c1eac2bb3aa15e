"""IQR-based outlier check for objective value distributions.

Outliers are values strictly outside ``[Q1 - k*IQR, Q3 + k*IQR]``. Quartiles
use linear interpolation between order statistics (numpy's ``linear``
method), so small samples give the same quartiles as most statistics
packages.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Sequence

import numpy as np

from ..config.thresholds import OBJECTIVE_DISTRIBUTION, ThresholdStore

logger = logging.getLogger(__name__)


class DistributionQuality(str, Enum):
    """Quality of an objective value distribution."""
    GOOD = "good"                              # outlier fraction within limit
    POOR = "poor"                              # too many outliers
    INSUFFICIENT_DATA = "insufficient_data"    # too few points to judge


@dataclass(frozen=True)
class ObjectiveDistributionResult:
    """Result of objective value distribution quality check."""

    has_outliers: bool
    num_outliers: int
    outlier_fraction: float
    quality: DistributionQuality
    q1: float
    q3: float
    iqr: float

    @classmethod
    def insufficient(cls) -> "ObjectiveDistributionResult":
        return cls(
            has_outliers=False,
            num_outliers=0,
            outlier_fraction=0.0,
            quality=DistributionQuality.INSUFFICIENT_DATA,
            q1=0.0,
            q3=0.0,
            iqr=0.0,
        )

    def to_dict(self) -> Dict:
        return {
            "has_outliers": self.has_outliers,
            "num_outliers": self.num_outliers,
            "outlier_fraction": self.outlier_fraction,
            "quality": self.quality.value,
            "q1": self.q1,
            "q3": self.q3,
            "iqr": self.iqr,
        }


def check_objective_distribution_quality(
    objectives: Sequence[float],
    thresholds: ThresholdStore,
) -> ObjectiveDistributionResult:
    """Check an objective value sample for an excessive outlier burden.

    Args:
        objectives: Objective values (e.g. best value per run)
        thresholds: Store holding the [objective_distribution] category

    Returns:
        ObjectiveDistributionResult; INSUFFICIENT_DATA when fewer than
        ``min_points_for_distribution_check`` values are given
    """
    min_points = thresholds.integer(OBJECTIVE_DISTRIBUTION, "min_points_for_distribution_check")
    max_outlier_fraction = thresholds.number(OBJECTIVE_DISTRIBUTION, "max_outlier_fraction")
    iqr_multiplier = thresholds.number(OBJECTIVE_DISTRIBUTION, "outlier_iqr_multiplier")

    values = np.asarray(objectives, dtype=np.float64).reshape(-1)
    n = values.size

    if n < min_points:
        logger.debug("Only %d objective values (< %d); skipping outlier check", n, min_points)
        return ObjectiveDistributionResult.insufficient()

    sorted_values = np.sort(values)
    q1 = float(np.quantile(sorted_values, 0.25, method="linear"))
    q3 = float(np.quantile(sorted_values, 0.75, method="linear"))
    iqr = q3 - q1

    lower_bound = q1 - iqr_multiplier * iqr
    upper_bound = q3 + iqr_multiplier * iqr

    num_outliers = int(np.count_nonzero((values < lower_bound) | (values > upper_bound)))
    outlier_fraction = num_outliers / n

    quality = (
        DistributionQuality.GOOD
        if outlier_fraction <= max_outlier_fraction
        else DistributionQuality.POOR
    )

    return ObjectiveDistributionResult(
        has_outliers=num_outliers > 0,
        num_outliers=num_outliers,
        outlier_fraction=outlier_fraction,
        quality=quality,
        q1=q1,
        q3=q3,
        iqr=iqr,
    )
