"""
Tests for experiment artifact loading.
"""
import json
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from conftest import P_TRUE, points_near_truth, summary_records, write_experiment
from convergence_quality.exceptions import ExperimentDataError, MissingColumnError
from convergence_quality.ingestion.experiment_loader import (
    available_degrees,
    discover_experiments,
    extract_dimension,
    extract_true_parameters,
    has_ground_truth,
    load_critical_points_for_degree,
    load_experiment_config,
    load_results_summary,
)


def test_load_experiment_config(good_experiment: Path):
    config = load_experiment_config(good_experiment)

    assert config["p_true"] == P_TRUE
    assert config["dimension"] == 4
    assert config["basis"] == "chebyshev"


def test_missing_config_raises(tmp_path: Path):
    with pytest.raises(ExperimentDataError, match="Config file not found"):
        load_experiment_config(tmp_path)


def test_invalid_json_raises(tmp_path: Path):
    (tmp_path / "experiment_config.json").write_text("{not json")
    with pytest.raises(ExperimentDataError, match="Invalid JSON"):
        load_experiment_config(tmp_path)


def test_extract_dimension():
    assert extract_dimension({"dimension": 4}) == 4
    assert extract_dimension({"dimension": 2.0}) == 2


@pytest.mark.parametrize(
    "config",
    [{}, {"dimension": None}, {"dimension": "4"}, {"dimension": 2.5}, {"dimension": 0}, {"dimension": True}],
)
def test_invalid_dimension_raises(config):
    with pytest.raises(ExperimentDataError, match="dimension"):
        extract_dimension(config)


def test_extract_true_parameters_top_level():
    p = extract_true_parameters({"p_true": P_TRUE, "dimension": 4})
    np.testing.assert_allclose(p, P_TRUE)


def test_extract_true_parameters_nested():
    config = {"experiment": {"p_true": P_TRUE, "basis": "chebyshev"}, "dimension": 4}
    np.testing.assert_allclose(extract_true_parameters(config), P_TRUE)


def test_extract_true_parameters_absent():
    assert extract_true_parameters({"dimension": 4}) is None
    assert extract_true_parameters({"p_true": None}) is None


def test_has_ground_truth(good_experiment: Path, stagnant_experiment: Path):
    assert has_ground_truth(good_experiment) is True
    assert has_ground_truth(stagnant_experiment) is False


def test_has_ground_truth_nested(tmp_path: Path):
    exp = write_experiment(tmp_path / "nested", config={"params": {"p_true": P_TRUE}})
    assert has_ground_truth(exp) is True


def test_has_ground_truth_never_raises(tmp_path: Path):
    assert has_ground_truth("/nonexistent/path") is False

    broken = tmp_path / "broken"
    broken.mkdir()
    (broken / "experiment_config.json").write_text("[1, 2")
    assert has_ground_truth(broken) is False


def test_load_raw_critical_points(good_experiment: Path):
    df = load_critical_points_for_degree(good_experiment, 4)

    assert len(df) == 3
    assert {"p1", "p2", "p3", "p4", "objective"} <= set(df.columns)


def test_load_legacy_critical_points(tmp_path: Path):
    legacy = pd.DataFrame([[0.1, 0.2, 1.5]], columns=["x1", "x2", "z"])
    exp = write_experiment(tmp_path / "legacy", critical_points={6: legacy}, legacy=True)

    df = load_critical_points_for_degree(exp, 6)

    assert list(df.columns) == ["x1", "x2", "z"]


def test_raw_format_preferred_over_legacy(tmp_path: Path):
    exp = write_experiment(tmp_path / "both", critical_points={4: points_near_truth([0.1])})
    pd.DataFrame([[0.0, 0.0, 0.0, 0.0, 0.0]], columns=["x1", "x2", "x3", "x4", "z"]).to_csv(
        exp / "critical_points_deg_4.csv", index=False
    )

    df = load_critical_points_for_degree(exp, 4)

    assert "p1" in df.columns


def test_missing_critical_points_names_both_files(tmp_path: Path):
    with pytest.raises(ExperimentDataError) as excinfo:
        load_critical_points_for_degree(tmp_path, 8)

    message = str(excinfo.value)
    assert "critical_points_raw_deg_8.csv" in message
    assert "critical_points_deg_8.csv" in message


def test_available_degrees(tmp_path: Path):
    exp = write_experiment(
        tmp_path / "degrees",
        critical_points={10: points_near_truth([0.1]), 4: points_near_truth([0.1])},
    )
    points_near_truth([0.1]).to_csv(exp / "critical_points_deg_6.csv", index=False)
    (exp / "notes_deg_8.csv").write_text("a\n1\n")

    assert available_degrees(exp) == [4, 6, 10]
    assert available_degrees(tmp_path / "missing") == []


def test_load_results_summary_list(tmp_path: Path):
    exp = write_experiment(
        tmp_path / "summary",
        summary=summary_records({8: 0.2, 4: 1.0, 6: 0.5}, best_values=[3.0, 1.0, 2.0]),
    )

    df = load_results_summary(exp)

    assert list(df.columns) == ["degree", "L2_norm", "best_value"]
    assert df["degree"].tolist() == [4, 6, 8]
    assert df["L2_norm"].tolist() == [1.0, 0.5, 0.2]
    assert df["best_value"].tolist() == [1.0, 2.0, 3.0]


def test_load_results_summary_nested_layouts(tmp_path: Path):
    records = summary_records({4: 1.0, 6: 0.5})

    wrapped = write_experiment(tmp_path / "wrapped", summary={"results": records})
    keyed = write_experiment(tmp_path / "keyed", summary={"degree_4": records[0], "degree_6": records[1]})

    assert load_results_summary(wrapped)["degree"].tolist() == [4, 6]
    assert load_results_summary(keyed)["degree"].tolist() == [4, 6]


def test_summary_without_best_value_has_nan(tmp_path: Path):
    exp = write_experiment(tmp_path / "nobest", summary=summary_records({4: 1.0, 6: 0.5}))

    df = load_results_summary(exp)

    assert df["best_value"].isna().all()


def test_incomplete_summary_records_dropped(tmp_path: Path):
    summary = [{"degree": 4, "L2_norm": 1.0}, {"degree": 6}, {"L2_norm": 0.3}]
    exp = write_experiment(tmp_path / "partial", summary=summary)

    assert load_results_summary(exp)["degree"].tolist() == [4]


def test_summary_without_l2_column_raises(tmp_path: Path):
    exp = write_experiment(tmp_path / "nol2", summary=[{"degree": 4, "best_value": 1.0}])
    with pytest.raises(MissingColumnError):
        load_results_summary(exp)


def test_empty_summary_raises(tmp_path: Path):
    exp = write_experiment(tmp_path / "empty", summary=[])
    with pytest.raises(ExperimentDataError):
        load_results_summary(exp)


def test_missing_summary_raises(tmp_path: Path):
    with pytest.raises(ExperimentDataError, match="Results summary not found"):
        load_results_summary(tmp_path)


def test_discover_experiments(tmp_path: Path):
    write_experiment(tmp_path / "campaign" / "exp_a", config={"dimension": 2})
    write_experiment(tmp_path / "campaign" / "exp_b", summary=summary_records({4: 1.0}))
    (tmp_path / "campaign" / "not_an_experiment").mkdir()

    found = discover_experiments(tmp_path / "campaign")

    assert [p.name for p in found] == ["exp_a", "exp_b"]


def test_discover_includes_root_experiment(good_experiment: Path):
    assert discover_experiments(good_experiment) == [good_experiment]


def test_discover_missing_root_raises(tmp_path: Path):
    with pytest.raises(ExperimentDataError):
        discover_experiments(tmp_path / "nope")
