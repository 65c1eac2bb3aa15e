"""Parameter recovery statistics.

Measures how close the critical points found by the optimizer come to the
true parameter vector (p_true) of a synthetic experiment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

import numpy as np
import pandas as pd

from ..exceptions import InsufficientDataError, MissingColumnError
from ..math_core.distance import VectorLike, as_vector, param_distance

logger = logging.getLogger(__name__)

# Raw optimizer output uses p1..pN, older exports use x1..xN
COORDINATE_PREFIXES = ("p", "x")


@dataclass(frozen=True)
class RecoveryStats:
    """Distances from each found point to p_true, aggregated."""

    min_distance: float
    mean_distance: float
    num_recoveries: int
    all_distances: Tuple[float, ...]

    @property
    def num_points(self) -> int:
        return len(self.all_distances)

    def to_dict(self) -> Dict:
        return {
            "min_distance": self.min_distance,
            "mean_distance": self.mean_distance,
            "num_recoveries": self.num_recoveries,
            "all_distances": list(self.all_distances),
        }


def compute_recovery_stats(
    points: Iterable[VectorLike],
    p_true: VectorLike,
    recovery_threshold: float,
) -> RecoveryStats:
    """Aggregate distances from found parameter vectors to p_true.

    Args:
        points: Found parameter vectors, one per critical point
        p_true: True parameter vector
        recovery_threshold: Distances strictly below this count as recovered

    Returns:
        RecoveryStats with min/mean distance, recovery count and every
        distance in input order

    Raises:
        DimensionMismatchError: a point's length differs from p_true
        InsufficientDataError: no points were given
    """
    truth = as_vector(p_true)
    distances = [param_distance(point, truth) for point in points]

    if not distances:
        raise InsufficientDataError("Cannot compute recovery statistics without critical points")

    values = np.asarray(distances)
    num_recoveries = int(np.count_nonzero(values < recovery_threshold))

    logger.debug(
        "Recovery over %d points: min=%.3g, %d within %.3g",
        len(distances),
        values.min(),
        num_recoveries,
        recovery_threshold,
    )

    return RecoveryStats(
        min_distance=float(values.min()),
        mean_distance=float(values.mean()),
        num_recoveries=num_recoveries,
        all_distances=tuple(distances),
    )


def coordinate_columns(df: pd.DataFrame, dimension: int) -> List[str]:
    """Return the parameter columns (p1..pN or x1..xN) of a critical point table."""
    for prefix in COORDINATE_PREFIXES:
        columns = [f"{prefix}{i}" for i in range(1, dimension + 1)]
        if all(c in df.columns for c in columns):
            return columns

    missing = [f"x{i}" for i in range(1, dimension + 1) if f"x{i}" not in df.columns]
    raise MissingColumnError(
        f"Critical point table missing columns {missing} "
        f"(expected p1..p{dimension} or x1..x{dimension})"
    )


def compute_parameter_recovery_stats(
    df: pd.DataFrame,
    p_true: Sequence[float],
    recovery_threshold: float,
) -> RecoveryStats:
    """Recovery statistics for every row of a critical point table."""
    truth = as_vector(p_true)
    columns = coordinate_columns(df, truth.size)
    points = df[columns].to_numpy(dtype=np.float64)
    return compute_recovery_stats(points, truth, recovery_threshold)
