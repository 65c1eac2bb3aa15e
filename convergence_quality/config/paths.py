"""Path configuration for the convergence quality project.

Centralizes all filesystem paths to avoid hardcoding across modules.
"""
from pathlib import Path

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
PROJECT_ROOT = PACKAGE_ROOT.parent
DEFAULT_THRESHOLDS_PATH = Path(__file__).resolve().parent / "quality_thresholds.toml"
LOG_DIR = PROJECT_ROOT / "logs"

EXPERIMENT_CONFIG_FILENAME = "experiment_config.json"
RESULTS_SUMMARY_FILENAME = "results_summary.json"
