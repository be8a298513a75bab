"""
Logging setup for yorihime.

The terminal belongs to the curses UI while the app runs, so records go
to a log file unless a console handler is asked for explicitly.
"""

from __future__ import annotations

import logging
from pathlib import Path

LOGGER_NAME = "yorihime"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: int = logging.INFO,
    log_file: str | Path | None = None,
    console: bool = False,
) -> logging.Logger:
    """
    Configure logging for yorihime.

    Args:
        level: Logging level.
        log_file: Optional file to write logs to.
        console: Also log to stderr. Only useful outside the TUI.

    Returns:
        The configured package logger.
    """
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger(LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.propagate = False
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    if not root_logger.handlers:
        root_logger.addHandler(logging.NullHandler())

    return root_logger
