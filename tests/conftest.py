"""
Pytest fixtures and configuration.

Fixtures provide small, hand-checkable threshold files and experiment
directories laid out the way the optimizer writes them.
"""
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
import pytest

from convergence_quality.config.thresholds import ThresholdStore, parse_thresholds


THRESHOLDS_TEXT = """
# test thresholds
[l2_norm_thresholds]
dim_2 = 1.0e-3
dim_4 = 1.0e-1
default = 10.0

[parameter_recovery]
param_distance_threshold = 0.01

[convergence]
min_improvement_factor = 0.95
stagnation_tolerance = 3
absolute_improvement_threshold = 1.0e-5

[objective_distribution]
min_points_for_distribution_check = 5
max_outlier_fraction = 0.1
outlier_iqr_multiplier = 1.5
"""

P_TRUE = [0.2, 0.3, 0.5, 0.6]


@pytest.fixture
def thresholds_text() -> str:
    return THRESHOLDS_TEXT


@pytest.fixture
def thresholds() -> ThresholdStore:
    return parse_thresholds(THRESHOLDS_TEXT, source="conftest")


def make_thresholds(**convergence: Any) -> ThresholdStore:
    """Thresholds with the [convergence] section overridden."""
    values = {
        "min_improvement_factor": 0.95,
        "stagnation_tolerance": 3,
        "absolute_improvement_threshold": 1.0e-5,
    }
    values.update(convergence)
    lines = ["[convergence]"] + [f"{k} = {v}" for k, v in values.items()]
    return parse_thresholds("\n".join(lines))


def write_experiment(
    root: Path,
    config: Optional[Dict[str, Any]] = None,
    summary: Optional[Any] = None,
    critical_points: Optional[Dict[int, pd.DataFrame]] = None,
    legacy: bool = False,
) -> Path:
    """Write an experiment directory and return its path."""
    root.mkdir(parents=True, exist_ok=True)
    if config is not None:
        (root / "experiment_config.json").write_text(json.dumps(config))
    if summary is not None:
        (root / "results_summary.json").write_text(json.dumps(summary))
    for degree, df in (critical_points or {}).items():
        name = f"critical_points_deg_{degree}.csv" if legacy else f"critical_points_raw_deg_{degree}.csv"
        df.to_csv(root / name, index=False)
    return root


def summary_records(l2_by_degree: Dict[int, float], best_values: Optional[List[float]] = None) -> List[Dict]:
    records = []
    for i, (degree, l2) in enumerate(l2_by_degree.items()):
        record = {"degree": degree, "L2_norm": l2}
        if best_values is not None:
            record["best_value"] = best_values[i]
        records.append(record)
    return records


def points_near_truth(offsets: List[float]) -> pd.DataFrame:
    """Critical points at p_true shifted by each offset in every coordinate."""
    rows = [[p + off for p in P_TRUE] + [off ** 2] for off in offsets]
    return pd.DataFrame(rows, columns=["p1", "p2", "p3", "p4", "objective"])


@pytest.fixture
def good_experiment(tmp_path: Path) -> Path:
    """Dimension 4 experiment that converges cleanly and recovers p_true."""
    return write_experiment(
        tmp_path / "good_exp",
        config={"dimension": 4, "basis": "chebyshev", "p_true": P_TRUE},
        summary=summary_records(
            {4: 1.0, 6: 0.4, 8: 0.16, 10: 0.064, 12: 0.03},
            best_values=[1.0, 1.1, 1.2, 1.3, 1.4],
        ),
        critical_points={
            4: points_near_truth([0.001, 0.2, 0.4]),
            6: points_near_truth([0.0005, 0.001, 0.3, 0.5]),
        },
    )


@pytest.fixture
def stagnant_experiment(tmp_path: Path) -> Path:
    """Dimension 4 experiment whose L2 norm stalls from degree 10 on."""
    return write_experiment(
        tmp_path / "stagnant_exp",
        config={"dimension": 4},
        summary=summary_records({4: 1.0, 6: 0.7, 8: 0.5, 10: 0.501, 12: 0.502, 14: 0.503}),
    )
