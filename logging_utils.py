"""
Logging Utilities for the CRI analysis pipeline

Run-scoped logging for the CLI: one log file per report directory, a console
handler for progress, status lines mirrored into the log, and structured
error records for failed analysis requests.
"""

import logging
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from errors import ConfigurationError

RUN_LOGGER = "cri_run"
STATUS_LOGGER = "cri_run.status"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_run_logging(report_dir: str, user_context: str, debug: bool = False) -> Tuple[logging.Logger, str]:
    """
    Route every module logger into ``<report_dir>/run_log_<timestamp>.log``.

    The file always receives DEBUG; the console shows INFO unless ``debug``.
    Existing root handlers are replaced, so calling this twice does not
    duplicate output.

    Returns:
        Tuple of (run_logger, log_file_path)
    """
    Path(report_dir).mkdir(parents=True, exist_ok=True)
    log_filename = f"run_log_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
    log_file_path = str(Path(report_dir) / log_filename)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    file_handler = logging.FileHandler(log_file_path, mode='w', encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if debug else logging.INFO)
    console_handler.setFormatter(logging.Formatter('%(message)s'))
    root_logger.addHandler(console_handler)

    # Status lines are printed by the CLI; only the file should get a copy.
    status_logger = logging.getLogger(STATUS_LOGGER)
    status_logger.propagate = False
    status_logger.handlers[:] = [file_handler]
    status_logger.setLevel(logging.INFO)

    run_logger = logging.getLogger(RUN_LOGGER)
    run_logger.setLevel(logging.DEBUG)
    run_logger.debug(f"Run started {datetime.now().isoformat()} (debug={debug})")
    run_logger.debug(f"Context: {user_context[:200]}")
    run_logger.debug(f"Report directory: {report_dir}")
    return run_logger, log_file_path


def announce(message: str) -> None:
    """Print a CLI status line and keep a copy in the run log."""
    print(message)
    logging.getLogger(STATUS_LOGGER).info(message)


def log_exception(logger: logging.Logger, exc: Exception, context: str = "",
                  query: Optional[str] = None, **kwargs) -> None:
    """
    Log an exception with traceback and context information.

    Args:
        logger: Logger instance to use
        exc: Exception that was raised
        context: Where it happened (e.g. "generator call")
        query: User context string for the failing request
        **kwargs: Additional context key-value pairs
    """
    error_msg = f"Exception occurred: {type(exc).__name__}: {exc}"
    if context:
        error_msg = f"{context} - {error_msg}"
    logger.error(error_msg)
    logger.debug(f"Traceback:\n{traceback.format_exc()}")
    if query:
        logger.error(f"Context: {query[:200]}")
    if kwargs:
        logger.error(f"Details: {kwargs}")


def get_error_info(exc: Exception, context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Structured error record (written next to the run log on failure)."""
    return {
        "error_type": type(exc).__name__,
        "error_message": str(exc),
        # Missing credentials will fail the same way until the config changes.
        "retryable": not isinstance(exc, ConfigurationError),
        "traceback": traceback.format_exc(),
        "timestamp": datetime.now().isoformat(),
        "context": context or {},
    }
