"""Default analysis parameters.

Quality threshold *values* live in quality_thresholds.toml; these are the
knobs that decide when a diagnostic is worth running at all.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .paths import DEFAULT_THRESHOLDS_PATH


@dataclass
class AnalysisParameters:
    thresholds_path: Path = field(default_factory=lambda: DEFAULT_THRESHOLDS_PATH)
    default_dimension: int = 4  # used when experiment_config.json has no dimension
    min_degrees_for_stagnation: int = 3  # shorter series are not reported
    min_objective_samples: int = 3  # fewer best_values skip the distribution check
    recovery_threshold: Optional[float] = None  # overrides parameter_recovery section


def get_default_parameters(overrides: Optional[Dict[str, Any]] = None) -> AnalysisParameters:
    """Return an AnalysisParameters instance with optional overrides applied."""
    params = AnalysisParameters()
    if not overrides:
        return params

    for name, value in overrides.items():
        if value is None:
            continue
        if not hasattr(params, name):
            raise ValueError(f"Unknown analysis parameter: {name}")
        if name == "thresholds_path":
            value = Path(value)
        setattr(params, name, value)
    return params
