"""Convergence stagnation across polynomial degrees.

Walks the degree -> error series in ascending degree order and tracks the
current run of steps whose error ratio ``curr / prev`` stayed at or above
``min_improvement_factor``. Errors already below
``absolute_improvement_threshold`` are treated as converged: they close any
open run instead of extending it.

Only the run still open at the highest degree is reported; a stagnant run
that was later broken by real improvement does not count.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple

from ..config.thresholds import CONVERGENCE, ThresholdStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StagnationResult:
    """Result of convergence stagnation detection."""

    is_stagnant: bool = False
    stagnation_start_degree: Optional[int] = None
    stagnant_count: int = 0
    improvement_factors: Tuple[float, ...] = ()

    @property
    def mean_improvement_factor(self) -> Optional[float]:
        if not self.improvement_factors:
            return None
        return sum(self.improvement_factors) / len(self.improvement_factors)

    def to_dict(self) -> Dict:
        return {
            "is_stagnant": self.is_stagnant,
            "stagnation_start_degree": self.stagnation_start_degree,
            "stagnant_count": self.stagnant_count,
            "improvement_factors": list(self.improvement_factors),
        }


def _improvement_factor(prev_error: float, curr_error: float) -> float:
    if prev_error == 0.0:
        # error grew from an exact zero
        return math.inf
    return curr_error / prev_error


def detect_stagnation(
    errors_by_degree: Mapping[int, float],
    thresholds: ThresholdStore,
) -> StagnationResult:
    """Detect convergence stagnation across polynomial degrees.

    Args:
        errors_by_degree: Mapping degree -> error (e.g. L2 norm)
        thresholds: Store holding the [convergence] category

    Returns:
        StagnationResult describing the run open at the highest degree

    Raises:
        ThresholdConfigError: a convergence threshold is missing
        ValueError: an error value is negative or not finite
    """
    min_improvement_factor = thresholds.number(CONVERGENCE, "min_improvement_factor")
    stagnation_tolerance = thresholds.integer(CONVERGENCE, "stagnation_tolerance")
    absolute_threshold = thresholds.number(CONVERGENCE, "absolute_improvement_threshold")

    for degree, error in errors_by_degree.items():
        if not math.isfinite(error) or error < 0:
            raise ValueError(f"Error for degree {degree} must be finite and non-negative, got {error}")

    # Storage order is irrelevant; the walk is always by ascending degree
    degrees = sorted(errors_by_degree)

    if len(degrees) < 2:
        return StagnationResult()

    improvement_factors = []
    stagnant_count = 0
    stagnation_start: Optional[int] = None

    for prev_degree, curr_degree in zip(degrees, degrees[1:]):
        prev_error = float(errors_by_degree[prev_degree])
        curr_error = float(errors_by_degree[curr_degree])

        if curr_error < absolute_threshold:
            improvement_factors.append(0.0)
            stagnant_count = 0
            stagnation_start = None
            continue

        factor = _improvement_factor(prev_error, curr_error)
        improvement_factors.append(factor)

        if factor >= min_improvement_factor:
            stagnant_count += 1
            if stagnation_start is None:
                stagnation_start = curr_degree
        else:
            stagnant_count = 0
            stagnation_start = None

    is_stagnant = stagnant_count >= stagnation_tolerance

    logger.debug(
        "Stagnation over degrees %s: factors=%s, count=%d, stagnant=%s",
        degrees,
        ["%.3g" % f for f in improvement_factors],
        stagnant_count,
        is_stagnant,
    )

    return StagnationResult(
        is_stagnant=is_stagnant,
        stagnation_start_degree=stagnation_start,
        stagnant_count=stagnant_count,
        improvement_factors=tuple(improvement_factors),
    )
