"""Shared helpers."""

from .validation_utils import assert_non_empty, require_columns

__all__ = ["assert_non_empty", "require_columns"]
