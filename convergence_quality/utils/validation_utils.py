"""Validation helpers to prevent silent failures."""
from typing import Iterable

import pandas as pd

from ..exceptions import ExperimentDataError, MissingColumnError


def require_columns(df: pd.DataFrame, columns: Iterable[str], context: str = "") -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise MissingColumnError(f"Missing required columns {missing} in {context or 'dataframe'}")


def assert_non_empty(df: pd.DataFrame, context: str = "") -> None:
    if df is None or df.empty:
        raise ExperimentDataError(f"{context or 'dataframe'} is empty; cannot proceed")
