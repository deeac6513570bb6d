"""Centralized logging configuration for tracflow.

Console logging by default; a rotating file log when a directory is given.
"""

from __future__ import annotations

import logging
import os
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Default configuration
DEFAULT_LOG_FILE = "tracflow.log"
DEFAULT_MAX_BYTES = 5 * 1024 * 1024  # 5MB
DEFAULT_BACKUP_COUNT = 3
DEFAULT_LOG_LEVEL = "INFO"

# Log format
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    log_dir: str | Path | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    level: str | None = None,
    console: bool = True,
) -> logging.Logger:
    """Set up logging for the tracflow logger tree.

    Args:
        log_dir: Directory for log files. No file is written unless this is
                 given or TRACFLOW_LOG_DIR is set.
        log_file: Log file name. Defaults to 'tracflow.log'.
        max_bytes: Maximum size per log file before rotation. Defaults to 5MB.
        backup_count: Number of backup files to keep. Defaults to 3.
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to INFO.
               Can be overridden with TRACFLOW_LOG_LEVEL environment variable.
        console: Whether to log to stderr. Defaults to True.

    Returns:
        The root tracflow logger.
    """
    if log_dir is None:
        log_dir = os.environ.get("TRACFLOW_LOG_DIR") or None

    if level is None:
        level = os.environ.get("TRACFLOW_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("tracflow")
    logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    log_path: Path | None = None
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = log_dir / log_file
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    logger.debug("tracflow logging initialized (level=%s, file=%s)", level, log_path)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a component.

    Args:
        name: Component name (e.g., 'trac', 'cli'). Will be prefixed
              with 'tracflow.'.

    Returns:
        Logger instance for the component.
    """
    if not name.startswith("tracflow."):
        name = f"tracflow.{name}"
    return logging.getLogger(name)


def truncate_output(output: str, max_length: int = 2000) -> str:
    """Truncate long output for logging.

    Args:
        output: The output string to truncate.
        max_length: Maximum length before truncation.

    Returns:
        Truncated string with indicator if truncated.
    """
    if len(output) <= max_length:
        return output
    return output[:max_length] + f"\n... [truncated, {len(output) - max_length} more chars]"


def sanitize_for_log(text: str) -> str:
    """Remove credentials from log output.

    Args:
        text: Text that may contain credentials.

    Returns:
        Sanitized text safe for logging.
    """
    patterns = [
        (r"Basic [A-Za-z0-9+/=]+", "Basic [REDACTED]"),  # Authorization header
        (r"(https?://)[^/\s:@]+:[^/\s@]+@", r"\1[REDACTED]@"),  # user:pass@ in URLs
        (r"password=[^&\s]+", "password=[REDACTED]"),  # Query param passwords
    ]

    result = text
    for pat, replacement in patterns:
        result = re.sub(pat, replacement, result)

    return result
