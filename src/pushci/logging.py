"""Logging setup for pushci.

Every component logs under the ``pushci`` logger hierarchy, to a rotating
file and optionally the console.
"""

from __future__ import annotations

import logging
import os
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

DEFAULT_LOG_DIR = "server-logs"
DEFAULT_LOG_FILE = "pushci.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_SECRET_PATTERNS = [
    (r"ghp_[a-zA-Z0-9]{36}", "[GITHUB_TOKEN]"),
    (r"gho_[a-zA-Z0-9]{36}", "[GITHUB_TOKEN]"),
    (r"github_pat_[a-zA-Z0-9_]{82}", "[GITHUB_TOKEN]"),
    (r"Bearer [a-zA-Z0-9._-]+", "Bearer [REDACTED]"),
    (r"token=[a-zA-Z0-9._-]+", "token=[REDACTED]"),
    # credentials embedded in clone URLs
    (r"(https?://)[^/@\s]+@", r"\1[REDACTED]@"),
]


def setup_logging(
    log_dir: str | Path | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    level: str | None = None,
    console: bool = True,
) -> logging.Logger:
    """Set up logging with a rotating file handler.

    Args:
        log_dir: Directory for log files. Defaults to PUSHCI_LOG_DIR or 'server-logs'.
        log_file: Log file name.
        max_bytes: Maximum size per log file before rotation.
        backup_count: Number of rotated files to keep.
        level: Log level name. Defaults to PUSHCI_LOG_LEVEL or INFO.
        console: Whether to also log to stderr.

    Returns:
        The root pushci logger.
    """
    if log_dir is None:
        log_dir = os.environ.get("PUSHCI_LOG_DIR", DEFAULT_LOG_DIR)
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    if level is None:
        level = os.environ.get("PUSHCI_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("pushci")
    logger.setLevel(log_level)

    # close handlers from a previous call so rotated files are released
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

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

    logger.info("pushci logging initialized (level=%s, file=%s)", level, log_path)

    return logger


def truncate_output(output: str, max_length: int = 5000) -> str:
    """Truncate long command output for logging.

    The tail is kept, since build tools print the failure summary last.
    """
    if len(output) <= max_length:
        return output
    return f"[truncated, {len(output) - max_length} earlier chars] ...\n" + output[-max_length:]


def sanitize_for_log(text: str) -> str:
    """Remove tokens and URL credentials from text before logging it."""
    result = text
    for pattern, replacement in _SECRET_PATTERNS:
        result = re.sub(pattern, replacement, result)
    return result
