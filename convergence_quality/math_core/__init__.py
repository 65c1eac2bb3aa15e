"""Numeric building blocks shared by the diagnostics."""

from .distance import as_vector, param_distance

__all__ = ["as_vector", "param_distance"]
