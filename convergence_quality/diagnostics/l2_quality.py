"""Dimension-aware L2 approximation quality bands."""

from __future__ import annotations

import logging
from enum import Enum

from ..config.thresholds import L2_NORM_THRESHOLDS, ThresholdStore

logger = logging.getLogger(__name__)


class L2Quality(str, Enum):
    """Graded L2 quality, best first."""
    EXCELLENT = "excellent"   # < 0.5 x threshold
    GOOD = "good"             # < 1.0 x threshold
    FAIR = "fair"             # < 2.0 x threshold
    POOR = "poor"

    @property
    def rank(self) -> int:
        return _RANKS[self]


_RANKS = {
    L2Quality.EXCELLENT: 0,
    L2Quality.GOOD: 1,
    L2Quality.FAIR: 2,
    L2Quality.POOR: 3,
}

# (multiplier, label) checked in order, first match wins
_BANDS = (
    (0.5, L2Quality.EXCELLENT),
    (1.0, L2Quality.GOOD),
    (2.0, L2Quality.FAIR),
)


def l2_threshold_for(dimension: int, thresholds: ThresholdStore) -> float:
    """Threshold for a dimension, falling back to the ``default`` entry."""
    l2_thresholds = thresholds.category(L2_NORM_THRESHOLDS)
    key = f"dim_{dimension}"
    if key in l2_thresholds:
        return thresholds.number(L2_NORM_THRESHOLDS, key)
    return thresholds.number(L2_NORM_THRESHOLDS, "default")


def check_l2_quality(l2_norm: float, dimension: int, thresholds: ThresholdStore) -> L2Quality:
    """Classify an L2 approximation error against its dimension's threshold."""
    threshold = l2_threshold_for(dimension, thresholds)

    for multiplier, label in _BANDS:
        if l2_norm < multiplier * threshold:
            return label
    return L2Quality.POOR
