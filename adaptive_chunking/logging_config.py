"""
Logging setup for the adaptive-chunking command line.

Library modules only create loggers with logging.getLogger(__name__), which
places them below the "adaptive_chunking" package logger. The CLI attaches
handlers to that package logger once per run: a console handler on stderr,
so stdout carries command output only, and an optional log file.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

ROOT_LOGGER = "adaptive_chunking"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def level_from_flags(verbose: bool = False, quiet: bool = False) -> int:
    """Map the CLI -v/-q flags to a logging level. -v wins over -q."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Attach console (and optionally file) handlers to the package logger.

    Calling it again closes and replaces the handlers of the previous call.

    Args:
        level: Level for the package logger and its handlers
        log_file: Optional log file; missing parent directories are created
        format_string: Record format (default: LOG_FORMAT)

    Returns:
        The "adaptive_chunking" logger
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    formatter = logging.Formatter(format_string or LOG_FORMAT, datefmt=DATE_FORMAT)

    logger = logging.getLogger(ROOT_LOGGER)
    _close_handlers(logger)
    logger.setLevel(level)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def _close_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def get_logger(name: str) -> logging.Logger:
    """Logger for `name`, placed below the package logger if it is not already."""
    if name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
