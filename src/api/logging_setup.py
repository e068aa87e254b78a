"""Process logging configuration."""

from __future__ import annotations

import logging
import sys


def setup_logging(level: str | int = logging.INFO, log_file: str | None = None) -> None:
    """
    Configure the ``moonshine`` logger tree once at startup.
    Logs go to *log_file* when given, otherwise to stdout.
    """
    logger = logging.getLogger("moonshine")

    if logger.handlers:
        return

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger.setLevel(level)
    logger.propagate = False

    if log_file:
        handler: logging.Handler = logging.FileHandler(log_file)
    else:
        handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
