"""Logging helpers.

Adds a TRACE level below DEBUG and a factory for a console logger, used when
a pipeline is given a minimum level instead of a logger.
"""

from __future__ import annotations

import itertools
import logging
import sys

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

_LEVEL_NAMES = {
    "trace": TRACE,
    "debug": logging.DEBUG,
    "information": logging.INFO,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "critical": logging.CRITICAL,
}

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

_console_ids = itertools.count(1)


def parse_level(level: int | str) -> int:
    """Convert a level name or number to a logging level.

    Raises:
        ValueError: If the name is not a known level
    """
    if isinstance(level, int):
        return level
    key = level.strip().lower()
    if key.isdigit():
        return int(key)
    if key not in _LEVEL_NAMES:
        raise ValueError(f"Unknown log level: {level}")
    return _LEVEL_NAMES[key]


def console_logger(level: int | str = logging.INFO, name: str | None = None) -> logging.Logger:
    """Get a logger writing to stderr, filtered at the given level.

    Without a name each call gets its own child of "rulemake.console", so
    loggers made for different pipelines keep independent levels.
    """
    if name is None:
        name = f"rulemake.console.{next(_console_ids)}"
    logger = logging.getLogger(name)
    logger.setLevel(parse_level(level))
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.propagate = False
    return logger


def trace(logger: logging.Logger, msg: str, *args) -> None:
    """Log at TRACE level."""
    if logger.isEnabledFor(TRACE):
        logger.log(TRACE, msg, *args)
