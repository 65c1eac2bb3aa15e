"""Loading of experiment artifacts (configs, summaries, critical points)."""

from .experiment_loader import (
    available_degrees,
    discover_experiments,
    extract_dimension,
    extract_true_parameters,
    has_ground_truth,
    load_critical_points_for_degree,
    load_experiment_config,
    load_results_summary,
)

__all__ = [
    "available_degrees",
    "discover_experiments",
    "extract_dimension",
    "extract_true_parameters",
    "has_ground_truth",
    "load_critical_points_for_degree",
    "load_experiment_config",
    "load_results_summary",
]
