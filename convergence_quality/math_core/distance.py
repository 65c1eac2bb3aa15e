"""Parameter-space distance."""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np

from ..exceptions import DimensionMismatchError

VectorLike = Union[Sequence[float], np.ndarray]


def as_vector(values: VectorLike) -> np.ndarray:
    """Return values as a 1-D float64 array."""
    return np.asarray(values, dtype=np.float64).reshape(-1)


def param_distance(p_found: VectorLike, p_true: VectorLike) -> float:
    """Euclidean distance ||p_found - p_true||.

    Raises:
        DimensionMismatchError: vectors have different lengths
    """
    found = as_vector(p_found)
    truth = as_vector(p_true)
    if found.shape != truth.shape:
        raise DimensionMismatchError(
            f"p_found and p_true must have same dimension "
            f"({found.size} != {truth.size})"
        )
    return float(np.linalg.norm(found - truth))
