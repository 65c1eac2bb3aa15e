"""Report building on top of the diagnostics."""

from .quality_report import (
    ExperimentQualityAnalyzer,
    ExperimentQualityReport,
    ReportStatus,
    analyze_experiments,
    convergence_summary,
    generate_parameter_recovery_table,
)

__all__ = [
    "ExperimentQualityAnalyzer",
    "ExperimentQualityReport",
    "ReportStatus",
    "analyze_experiments",
    "convergence_summary",
    "generate_parameter_recovery_table",
]
