"""Central logging configuration."""
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .paths import LOG_DIR

LOG_FILENAME = "quality_analysis.log"


def setup_logging(log_level: int = logging.INFO, log_dir: Optional[Path] = None) -> Path:
    """Configure root logger with console and rotating file handler.

    Args:
        log_level: Level applied to the root logger and both handlers
        log_dir: Directory for quality_analysis.log (default: LOG_DIR);
            created if missing. The CLI passes --log-dir here.

    Returns:
        Path of the log file
    """
    target_dir = Path(log_dir) if log_dir is not None else LOG_DIR
    target_dir.mkdir(parents=True, exist_ok=True)
    log_file = target_dir / LOG_FILENAME

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler()
    console.setLevel(log_level)
    console.setFormatter(formatter)

    file_handler = RotatingFileHandler(
        filename=log_file,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(console)
    root_logger.addHandler(file_handler)
    return log_file
