"""Per-experiment quality report.

EXECUTION ORDER:
    experiment_config.json -> dimension, p_true
    results_summary.json   -> L2 quality of the final degree
                           -> stagnation across degrees
                           -> outlier check on best values
    critical point CSVs    -> parameter recovery table (when p_true exists)

Each diagnostic that flags a problem adds a warning; the report status is
OK, DEGRADED (warnings) or FAILED (the experiment could not be analyzed).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd
from tqdm import tqdm

from ..config.parameters import AnalysisParameters, get_default_parameters
from ..config.paths import EXPERIMENT_CONFIG_FILENAME, RESULTS_SUMMARY_FILENAME
from ..config.thresholds import PARAMETER_RECOVERY, ThresholdStore, load_quality_thresholds
from ..diagnostics.l2_quality import L2Quality, check_l2_quality, l2_threshold_for
from ..diagnostics.objective_distribution import (
    DistributionQuality,
    ObjectiveDistributionResult,
    check_objective_distribution_quality,
)
from ..diagnostics.parameter_recovery import compute_parameter_recovery_stats
from ..diagnostics.stagnation import StagnationResult, detect_stagnation
from ..exceptions import ExperimentDataError, QualityAnalysisError
from ..ingestion.experiment_loader import (
    PathLike,
    available_degrees,
    extract_dimension,
    extract_true_parameters,
    load_critical_points_for_degree,
    load_experiment_config,
    load_results_summary,
)

logger = logging.getLogger(__name__)

RECOVERY_TABLE_COLUMNS = [
    "degree",
    "num_critical_points",
    "min_distance",
    "mean_distance",
    "num_recoveries",
]


class ReportStatus(str, Enum):
    """Overall status of an experiment report."""
    OK = "ok"               # every diagnostic passed
    DEGRADED = "degraded"   # analyzed, with quality warnings
    FAILED = "failed"       # could not be analyzed


@dataclass
class ExperimentQualityReport:
    """Quality diagnostics for one experiment directory."""

    experiment_path: str
    dimension: Optional[int] = None
    final_degree: Optional[int] = None
    final_l2_norm: Optional[float] = None
    l2_threshold: Optional[float] = None
    l2_quality: Optional[L2Quality] = None
    stagnation: Optional[StagnationResult] = None
    convergence: Optional[Dict[str, float]] = None
    objective_distribution: Optional[ObjectiveDistributionResult] = None
    recovery_table: Optional[pd.DataFrame] = None
    warnings: List[str] = field(default_factory=list)
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.utcnow)

    @property
    def status(self) -> ReportStatus:
        if self.error is not None:
            return ReportStatus.FAILED
        if self.warnings:
            return ReportStatus.DEGRADED
        return ReportStatus.OK

    def warn(self, message: str) -> None:
        logger.warning("%s: %s", self.experiment_path, message)
        self.warnings.append(message)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe dict; NaN and infinite values become None."""
        return _json_safe({
            "experiment_path": self.experiment_path,
            "status": self.status.value,
            "dimension": self.dimension,
            "final_degree": self.final_degree,
            "final_l2_norm": self.final_l2_norm,
            "l2_threshold": self.l2_threshold,
            "l2_quality": self.l2_quality.value if self.l2_quality else None,
            "stagnation": self.stagnation.to_dict() if self.stagnation else None,
            "convergence": self.convergence,
            "objective_distribution": (
                self.objective_distribution.to_dict() if self.objective_distribution else None
            ),
            "parameter_recovery": (
                _records(self.recovery_table) if self.recovery_table is not None else None
            ),
            "warnings": list(self.warnings),
            "error": self.error,
            "timestamp": self.timestamp.isoformat(),
        })


def _json_safe(value: Any) -> Any:
    # NaN and +/-inf have no strict JSON encoding
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    return df.astype(object).to_dict(orient="records")


def generate_parameter_recovery_table(
    experiment_path: PathLike,
    p_true: Sequence[float],
    degrees: Iterable[int],
    recovery_threshold: float,
) -> pd.DataFrame:
    """Parameter recovery statistics per degree.

    Degrees whose critical point table is empty get NaN distances and
    zero recoveries.
    """
    rows = []
    for degree in degrees:
        df = load_critical_points_for_degree(experiment_path, degree)

        if df.empty:
            logger.warning("No critical points for degree %d in %s", degree, experiment_path)
            rows.append((degree, 0, np.nan, np.nan, 0))
            continue

        stats = compute_parameter_recovery_stats(df, p_true, recovery_threshold)
        rows.append(
            (degree, len(df), stats.min_distance, stats.mean_distance, stats.num_recoveries)
        )

    table = pd.DataFrame.from_records(rows, columns=RECOVERY_TABLE_COLUMNS)
    return table.astype({"degree": int, "num_critical_points": int, "num_recoveries": int})


def convergence_summary(errors_by_degree: Mapping[int, float]) -> Optional[Dict[str, float]]:
    """Overall improvement from the lowest to the highest degree."""
    degrees = sorted(errors_by_degree)
    if len(degrees) < 2:
        return None

    first = float(errors_by_degree[degrees[0]])
    last = float(errors_by_degree[degrees[-1]])
    factor = first / last if last != 0 else math.inf
    reduction_pct = (first - last) / first * 100 if first != 0 else 0.0

    return {
        "first_degree": degrees[0],
        "last_degree": degrees[-1],
        "first_error": first,
        "last_error": last,
        "overall_improvement_factor": factor,
        "overall_reduction_pct": reduction_pct,
    }


class ExperimentQualityAnalyzer:
    """
    Builds an ExperimentQualityReport for experiment directories.

    Usage:
        analyzer = ExperimentQualityAnalyzer(load_quality_thresholds())
        report = analyzer.analyze("results/lv4d_deg4-12")
    """

    def __init__(
        self,
        thresholds: Optional[ThresholdStore] = None,
        params: Optional[AnalysisParameters] = None,
    ) -> None:
        self.params = params if params is not None else get_default_parameters()
        self.thresholds = (
            thresholds if thresholds is not None else load_quality_thresholds(self.params.thresholds_path)
        )

    @property
    def recovery_threshold(self) -> float:
        if self.params.recovery_threshold is not None:
            return float(self.params.recovery_threshold)
        return self.thresholds.number(PARAMETER_RECOVERY, "param_distance_threshold")

    def analyze(self, experiment_path: PathLike) -> ExperimentQualityReport:
        """Run every applicable diagnostic on one experiment directory.

        Raises:
            ExperimentDataError: neither a config nor a results summary exists,
                or the config has no valid dimension
        """
        root = Path(experiment_path)
        report = ExperimentQualityReport(experiment_path=str(root))

        has_config = (root / EXPERIMENT_CONFIG_FILENAME).is_file()
        has_summary = (root / RESULTS_SUMMARY_FILENAME).is_file()
        if not has_config and not has_summary:
            raise ExperimentDataError(
                f"{root} has neither {EXPERIMENT_CONFIG_FILENAME} nor {RESULTS_SUMMARY_FILENAME}"
            )

        config: Dict[str, Any] = {}
        if has_config:
            config = load_experiment_config(root)
            report.dimension = extract_dimension(config)
        else:
            report.warn(f"No {EXPERIMENT_CONFIG_FILENAME}; assuming dimension {self.params.default_dimension}")
            report.dimension = self.params.default_dimension

        logger.info("Analyzing %s (dimension %d)", root, report.dimension)

        if has_summary:
            self._summary_diagnostics(root, report)
        else:
            report.warn(f"No {RESULTS_SUMMARY_FILENAME} found")

        p_true = extract_true_parameters(config)
        if p_true is not None:
            self._recovery_diagnostics(root, p_true, report)

        logger.info("%s: %s (%d warnings)", root, report.status.value, len(report.warnings))
        return report

    def _summary_diagnostics(self, root: Path, report: ExperimentQualityReport) -> None:
        summary = load_results_summary(root)
        final = summary.iloc[-1]

        report.final_degree = int(final["degree"])
        report.final_l2_norm = float(final["L2_norm"])
        report.l2_threshold = l2_threshold_for(report.dimension, self.thresholds)
        report.l2_quality = check_l2_quality(report.final_l2_norm, report.dimension, self.thresholds)
        if report.l2_quality == L2Quality.POOR:
            report.warn(
                f"Final L2 norm {report.final_l2_norm:.6g} at degree {report.final_degree} "
                f"is poor for {report.dimension}D (threshold {report.l2_threshold:.6g})"
            )

        # one error per degree; later records win
        errors_by_degree = dict(zip(summary["degree"].tolist(), summary["L2_norm"].tolist()))
        report.convergence = convergence_summary(errors_by_degree)

        if len(errors_by_degree) >= self.params.min_degrees_for_stagnation:
            report.stagnation = detect_stagnation(errors_by_degree, self.thresholds)
            if report.stagnation.is_stagnant:
                report.warn(
                    f"Convergence stagnation from degree {report.stagnation.stagnation_start_degree} "
                    f"({report.stagnation.stagnant_count} consecutive stagnant degrees)"
                )

        best_values = summary["best_value"].dropna().to_numpy()
        if best_values.size >= self.params.min_objective_samples:
            result = check_objective_distribution_quality(best_values, self.thresholds)
            report.objective_distribution = result
            if result.quality == DistributionQuality.POOR:
                report.warn(
                    f"High outlier fraction in best values "
                    f"({result.num_outliers}/{best_values.size}, {result.outlier_fraction:.1%})"
                )

    def _recovery_diagnostics(self, root: Path, p_true: np.ndarray, report: ExperimentQualityReport) -> None:
        degrees = available_degrees(root)
        if not degrees:
            report.warn("Ground truth present but no critical point files found")
            return

        report.recovery_table = generate_parameter_recovery_table(
            root, p_true, degrees, self.recovery_threshold
        )
        if int(report.recovery_table["num_recoveries"].sum()) == 0:
            report.warn(f"p_true not recovered within {self.recovery_threshold:.3g} at any degree")


def analyze_experiments(
    experiment_paths: Iterable[PathLike],
    analyzer: Optional[ExperimentQualityAnalyzer] = None,
    show_progress: bool = True,
) -> List[ExperimentQualityReport]:
    """Analyze many experiments; one failure does not stop the batch."""
    analyzer = analyzer or ExperimentQualityAnalyzer()
    paths = [Path(p) for p in experiment_paths]
    reports = []

    for path in tqdm(paths, desc="Analyzing experiments", disable=not show_progress):
        try:
            reports.append(analyzer.analyze(path))
        except (QualityAnalysisError, OSError, ValueError) as exc:
            logger.error("Failed to analyze %s: %s", path, exc)
            reports.append(ExperimentQualityReport(experiment_path=str(path), error=str(exc)))

    return reports
