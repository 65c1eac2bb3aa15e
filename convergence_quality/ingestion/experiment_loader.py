"""Experiment artifact loading.

An experiment directory holds:

    experiment_config.json          dimension, basis, optional p_true
    results_summary.json            per-degree L2_norm / best_value records
    critical_points_raw_deg_<d>.csv p1..pN, objective   (preferred)
    critical_points_deg_<d>.csv     x1..xN, z           (older exports)
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np
import pandas as pd

from ..config.paths import EXPERIMENT_CONFIG_FILENAME, RESULTS_SUMMARY_FILENAME
from ..exceptions import ExperimentDataError
from ..utils.validation_utils import assert_non_empty, require_columns

logger = logging.getLogger(__name__)

PathLike = Union[Path, str]

RAW_CSV_TEMPLATE = "critical_points_raw_deg_{degree}.csv"
LEGACY_CSV_TEMPLATE = "critical_points_deg_{degree}.csv"
DEGREE_PATTERN = re.compile(r"^critical_points_(?:raw_)?deg_(\d+)\.csv$")

SUMMARY_COLUMNS = ["degree", "L2_norm", "best_value"]


def _read_json(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as exc:
        raise ExperimentDataError(f"Invalid JSON in {path}: {exc}") from exc


def load_experiment_config(experiment_path: PathLike) -> Dict[str, Any]:
    """Load experiment_config.json from an experiment directory."""
    config_file = Path(experiment_path) / EXPERIMENT_CONFIG_FILENAME
    if not config_file.is_file():
        raise ExperimentDataError(f"Config file not found: {config_file}")

    config = _read_json(config_file)
    if not isinstance(config, dict):
        raise ExperimentDataError(f"{config_file} must contain a JSON object")
    return config


def extract_dimension(config: Dict[str, Any]) -> int:
    """Return the problem dimension from a loaded config.

    Raises:
        ExperimentDataError: dimension is missing or not a positive integer
    """
    dimension = config.get("dimension")
    if isinstance(dimension, float) and dimension.is_integer():
        dimension = int(dimension)
    if isinstance(dimension, bool) or not isinstance(dimension, int) or dimension < 1:
        raise ExperimentDataError(
            f"Config 'dimension' must be a positive integer, got {dimension!r}"
        )
    return dimension


def extract_true_parameters(config: Dict[str, Any]) -> Optional[np.ndarray]:
    """Return p_true from a loaded config, top level or one section down."""
    candidates = [config.get("p_true")]
    candidates.extend(
        section.get("p_true") for section in config.values() if isinstance(section, dict)
    )
    for p_true in candidates:
        if p_true is not None:
            return np.asarray(p_true, dtype=np.float64)
    return None


def has_ground_truth(experiment_path: PathLike) -> bool:
    """True when the experiment config exists and carries p_true.

    Any failure while loading counts as "no ground truth".
    """
    try:
        config = load_experiment_config(experiment_path)
        return extract_true_parameters(config) is not None
    except Exception as exc:
        logger.debug("No ground truth for %s: %s", experiment_path, exc)
        return False


def load_critical_points_for_degree(experiment_path: PathLike, degree: int) -> pd.DataFrame:
    """Load the critical point table for one polynomial degree.

    Tries the raw format (p1..pN, objective) first, then the older
    (x1..xN, z) export.
    """
    root = Path(experiment_path)
    raw_file = root / RAW_CSV_TEMPLATE.format(degree=degree)
    legacy_file = root / LEGACY_CSV_TEMPLATE.format(degree=degree)

    for csv_file in (raw_file, legacy_file):
        if csv_file.is_file():
            df = pd.read_csv(csv_file)
            logger.debug("Loaded %d critical points from %s", len(df), csv_file)
            return df

    raise ExperimentDataError(
        f"Critical points file not found for degree {degree}. Tried:\n"
        f"  {raw_file}\n"
        f"  {legacy_file}"
    )


def available_degrees(experiment_path: PathLike) -> List[int]:
    """Degrees that have a critical point CSV, ascending."""
    root = Path(experiment_path)
    if not root.is_dir():
        return []
    degrees = set()
    for path in root.iterdir():
        match = DEGREE_PATTERN.match(path.name)
        if match:
            degrees.add(int(match.group(1)))
    return sorted(degrees)


def _summary_records(data: Any, source: Path) -> List[Dict[str, Any]]:
    if isinstance(data, list):
        records = data
    elif isinstance(data, dict) and isinstance(data.get("results"), list):
        records = data["results"]
    elif isinstance(data, dict):
        records = [v for v in data.values() if isinstance(v, dict)]
    else:
        raise ExperimentDataError(f"Unrecognized results summary layout in {source}")
    return [r for r in records if isinstance(r, dict)]


def load_results_summary(experiment_path: PathLike) -> pd.DataFrame:
    """Per-degree results as a DataFrame with degree, L2_norm, best_value.

    Records without a degree or L2_norm are dropped; best_value may be NaN.
    """
    summary_file = Path(experiment_path) / RESULTS_SUMMARY_FILENAME
    if not summary_file.is_file():
        raise ExperimentDataError(f"Results summary not found: {summary_file}")

    records = _summary_records(_read_json(summary_file), summary_file)
    df = pd.DataFrame.from_records(records)
    assert_non_empty(df, context=str(summary_file))
    require_columns(df, ["degree", "L2_norm"], context=str(summary_file))

    if "best_value" not in df.columns:
        df["best_value"] = np.nan

    df = df[SUMMARY_COLUMNS].copy()
    df["degree"] = pd.to_numeric(df["degree"], errors="coerce")
    df["L2_norm"] = pd.to_numeric(df["L2_norm"], errors="coerce")
    df["best_value"] = pd.to_numeric(df["best_value"], errors="coerce")

    dropped = df["degree"].isna() | df["L2_norm"].isna()
    if dropped.any():
        logger.warning("Dropping %d incomplete records from %s", int(dropped.sum()), summary_file)
    df = df[~dropped].copy()
    assert_non_empty(df, context=str(summary_file))

    df["degree"] = df["degree"].astype(int)
    return df.sort_values("degree", kind="stable").reset_index(drop=True)


def discover_experiments(results_root: PathLike) -> List[Path]:
    """Experiment directories under a root (the root itself included)."""
    root = Path(results_root)
    if not root.is_dir():
        raise ExperimentDataError(f"Not a directory: {root}")

    markers = (RESULTS_SUMMARY_FILENAME, EXPERIMENT_CONFIG_FILENAME)
    found = [
        path
        for path in [root, *sorted(p for p in root.rglob("*") if p.is_dir())]
        if any((path / marker).is_file() for marker in markers)
    ]
    logger.info("Discovered %d experiments under %s", len(found), root)
    return found
