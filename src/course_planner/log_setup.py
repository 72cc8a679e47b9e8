"""Central logging configuration for the course planner.

Engine modules log through ``logging.getLogger(__name__)``, which places
them under the ``course_planner`` logger configured here.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_MAX_BYTES = 5 * 1024 * 1024  # 5MB
DEFAULT_BACKUP_COUNT = 3

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROOT_LOGGER = "course_planner"


def setup_logging(
    level: str | None = None,
    log_file: str | Path | None = None,
    console: bool = True,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
) -> logging.Logger:
    """Configure the ``course_planner`` logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to the
               COURSE_PLANNER_LOG_LEVEL environment variable, then INFO.
        log_file: Optional path of a rotating log file.
        console: Whether to log to stderr.
        max_bytes: Maximum size per log file before rotation.
        backup_count: Number of rotated files to keep.

    Returns:
        The ``course_planner`` logger.
    """
    if level is None:
        level = os.environ.get("COURSE_PLANNER_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
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

    logger.debug("Logging initialized (level=%s, file=%s)", level, log_file)
    return logger
