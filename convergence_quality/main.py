"""Command-line quality analysis for optimization experiments.

Analyzes one or more experiment directories:
  convergence-quality results/lv4d_exp1 results/lv4d_exp2
  convergence-quality --batch results/ --output quality.json

Exit codes:
  0 = every experiment passed its diagnostics
  1 = degraded (quality warnings or per-experiment failures)
  2 = aborted (invalid arguments or unusable threshold file)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import textwrap
from pathlib import Path
from typing import List, Optional, Sequence

from .config.logging_config import setup_logging
from .config.parameters import get_default_parameters
from .config.thresholds import load_quality_thresholds
from .exceptions import QualityAnalysisError
from .ingestion.experiment_loader import discover_experiments
from .pipeline.quality_report import (
    ExperimentQualityAnalyzer,
    ExperimentQualityReport,
    ReportStatus,
    analyze_experiments,
)

logger = logging.getLogger(__name__)


# =============================================================================
# EXIT CODES
# =============================================================================
EXIT_SUCCESS = 0        # All experiments OK
EXIT_DEGRADED = 1       # Completed with quality warnings or failures
EXIT_ABORTED = 2        # Invalid arguments or configuration


def _validate_arguments(args: argparse.Namespace) -> List[str]:
    errors = []
    for path in args.experiments:
        if not Path(path).is_dir():
            errors.append(f"Not a directory: {path}")
    if args.thresholds is not None and not Path(args.thresholds).is_file():
        errors.append(f"Thresholds file not found: {args.thresholds}")
    if args.recovery_threshold is not None and args.recovery_threshold <= 0:
        errors.append("--recovery-threshold must be positive")
    return errors


def format_report(report: ExperimentQualityReport) -> str:
    """Human-readable summary of one experiment report."""
    lines = [
        "=" * 70,
        f"Experiment: {report.experiment_path}",
        f"Status:     {report.status.value.upper()}",
    ]

    if report.error is not None:
        lines.append(f"  Error: {report.error}")
        return "\n".join(lines)

    if report.l2_quality is not None:
        lines.append(f"  L2 norm quality: {report.l2_quality.value.upper()}")
        lines.append(f"    Final L2 norm (degree {report.final_degree}): {report.final_l2_norm:.6g}")
        lines.append(f"    Threshold for {report.dimension}D: {report.l2_threshold:.6g}")

    if report.convergence is not None:
        lines.append(
            "  Overall: {:.2f}x improvement ({:.1f}% reduction) from degree {} to {}".format(
                report.convergence["overall_improvement_factor"],
                report.convergence["overall_reduction_pct"],
                report.convergence["first_degree"],
                report.convergence["last_degree"],
            )
        )

    if report.stagnation is not None:
        if report.stagnation.is_stagnant:
            lines.append(
                f"  Convergence: stagnation from degree {report.stagnation.stagnation_start_degree} "
                f"({report.stagnation.stagnant_count} consecutive)"
            )
        else:
            lines.append("  Convergence: improving")
            mean_factor = report.stagnation.mean_improvement_factor
            if mean_factor is not None:
                lines.append(f"    Average improvement: {(1 - mean_factor) * 100:.1f}%")

    if report.objective_distribution is not None:
        dist = report.objective_distribution
        lines.append(
            f"  Objective distribution: {dist.quality.value} "
            f"({dist.num_outliers} outliers, {dist.outlier_fraction:.1%})"
        )

    if report.recovery_table is not None:
        lines.append("  Parameter recovery:")
        table = report.recovery_table.to_string(index=False, float_format=lambda v: f"{v:.4g}")
        lines.extend("    " + row for row in table.splitlines())

    for warning in report.warnings:
        lines.append(f"  WARNING: {warning}")

    return "\n".join(lines)


def _exit_code(reports: Sequence[ExperimentQualityReport]) -> int:
    if all(r.status == ReportStatus.OK for r in reports):
        return EXIT_SUCCESS
    return EXIT_DEGRADED


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="convergence-quality",
        description="Quality diagnostics for polynomial-degree optimization experiments",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""
            Examples:
              convergence-quality results/lv4d_exp1
              convergence-quality --batch results/ --output quality.json
              convergence-quality results/exp1 --thresholds my_thresholds.toml

            Exit Codes:
              0 = All experiments OK
              1 = Degraded (warnings or failures)
              2 = Aborted (invalid arguments)
        """),
    )
    parser.add_argument(
        "experiments", nargs="+",
        help="Experiment directories (or results roots with --batch)"
    )
    parser.add_argument(
        "--batch", action="store_true",
        help="Treat each path as a results root and analyze every experiment below it"
    )
    parser.add_argument(
        "--thresholds", type=str, default=None,
        help="Path to a quality thresholds file (default: bundled thresholds)"
    )
    parser.add_argument(
        "--recovery-threshold", type=float, default=None, dest="recovery_threshold",
        help="Override [parameter_recovery] param_distance_threshold"
    )
    parser.add_argument(
        "--output", type=str, default=None,
        help="Write all reports as JSON to this file"
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"], dest="log_level",
        help="Logging verbosity"
    )
    parser.add_argument(
        "--log-dir", type=str, default=None, dest="log_dir",
        help="Directory for the rotating log file"
    )
    parser.add_argument(
        "--no-progress", action="store_true", dest="no_progress",
        help="Disable the progress bar"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point; returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    log_file = setup_logging(getattr(logging, args.log_level), log_dir=args.log_dir)
    logger.debug("Logging to %s", log_file)

    errors = _validate_arguments(args)
    if errors:
        print("\nERROR: Invalid arguments:")
        for err in errors:
            print(f"  - {err}")
        print("\nUse --help for usage information.")
        return EXIT_ABORTED

    params = get_default_parameters({
        "thresholds_path": args.thresholds,
        "recovery_threshold": args.recovery_threshold,
    })

    try:
        thresholds = load_quality_thresholds(params.thresholds_path)
    except QualityAnalysisError as exc:
        logger.error("Cannot load quality thresholds: %s", exc)
        return EXIT_ABORTED

    if args.batch:
        paths = []
        for root in args.experiments:
            paths.extend(discover_experiments(root))
        if not paths:
            logger.error("No experiments found under %s", ", ".join(args.experiments))
            return EXIT_ABORTED
    else:
        paths = [Path(p) for p in args.experiments]

    analyzer = ExperimentQualityAnalyzer(thresholds, params)
    reports = analyze_experiments(paths, analyzer, show_progress=not args.no_progress)

    for report in reports:
        print(format_report(report))

    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(json.dumps([r.to_dict() for r in reports], indent=2, allow_nan=False))
        logger.info("Wrote %d reports to %s", len(reports), output)

    exit_code = _exit_code(reports)
    if exit_code == EXIT_SUCCESS:
        logger.info("Quality analysis completed: ALL OK")
    else:
        logger.warning("Quality analysis completed: DEGRADED")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
