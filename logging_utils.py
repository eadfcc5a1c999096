"""
Run logging for the derivation CLI.

Each run gets one log file beside its outputs. Module loggers propagate to
the root logger, so formula-level debug lines and the runner's status lines
land in the same file.
"""

import logging
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

RUN_LOGGER_NAME = "derive_run"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_run_logging(run_dir: str, source: str, level: str = "INFO") -> Tuple[logging.Logger, str]:
    """
    Route all logging for this run to ``run_dir`` and the console.

    The file always receives DEBUG; ``level`` only filters the console.

    Returns:
        Tuple of (run logger, log file path)
    """
    Path(run_dir).mkdir(parents=True, exist_ok=True)
    log_file_path = str(Path(run_dir) / f"derive_log_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    file_handler = logging.FileHandler(log_file_path, mode="w", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)

    run_logger = logging.getLogger(RUN_LOGGER_NAME)
    run_logger.debug("Source report: %s", source)
    run_logger.debug("Run directory: %s", run_dir)
    return run_logger, log_file_path


def log_exception(logger: logging.Logger, exc: Exception, step: str, source: Optional[str] = None) -> None:
    """Log a failed runner step with its traceback."""
    logger.error("%s failed for %s: %s: %s", step, source or "<unknown>", type(exc).__name__, exc)
    logger.debug("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))


def error_record(exc: Exception, step: str, source: str) -> Dict[str, Any]:
    """Contents of ``error.json`` for a run that stopped before saving a report."""
    return {
        "error_type": type(exc).__name__,
        "error_message": str(exc),
        "step": step,
        "source": source,
        "traceback": traceback.format_exception(type(exc), exc, exc.__traceback__),
        "timestamp": datetime.now().isoformat(),
    }
