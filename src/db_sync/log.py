"""Logging setup: rich console output plus a daily-rotating log file.

Every module logs through ``logging.getLogger(__name__)``, so all records
flow through the ``db_sync`` logger configured here.

Usage:
    from db_sync.log import setup_logging

    setup_logging("info", file="logs/db-sync.log", console=True)
"""

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from rich.logging import RichHandler

ROOT_LOGGER_NAME = "db_sync"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def parse_level(level: str | None) -> int:
    """Map a config level name to a ``logging`` level (unknown -> INFO)."""
    return _LEVELS.get((level or "").strip().lower(), logging.INFO)


def setup_logging(
    level: str = "info",
    file: str | None = None,
    console: bool = True,
) -> logging.Logger:
    """Configure the ``db_sync`` logger.

    Existing handlers on the ``db_sync`` logger are closed and replaced, so
    calling this more than once is safe.

    Args:
        level: Level name (``debug``, ``info``, ``warn``, ``error``).
        file: Optional log file path.  Rotated at midnight; rotated files
            get a ``.YYYY-MM-DD`` suffix.
        console: Whether to emit colored records to the terminal.

    Returns:
        The configured ``db_sync`` logger.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(parse_level(level))
    logger.propagate = False

    if console:
        console_handler = RichHandler(
            show_path=False,
            log_time_format="[%Y-%m-%d %H:%M:%S]",
        )
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(console_handler)

    if file:
        Path(file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            file, when="midnight", encoding="utf-8"
        )
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, DATE_FORMAT))
        logger.addHandler(file_handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    return logger
