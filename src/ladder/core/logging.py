"""
Centralized logging configuration for the ladder package.

This module provides consistent logging setup across the rating and bracket
engines, plus a timing helper for the heavier recomputations.
"""

from __future__ import annotations

import logging
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Mapping

ROOT_LOGGER_NAME = "ladder"

LOG_FORMATS = {
    "simple": "%(levelname)s: %(message)s",
    "detailed": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    "json": '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}',
}

# Advancement logs every bye, void and placement at DEBUG.
DEFAULT_COMPONENT_LEVELS: dict[str, str | int] = {
    "bracket.advancement": logging.INFO,
}


def _to_level(level: str | int) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper())
    return level


def setup_logging(
    level: str | int = logging.INFO,
    log_file: str | Path | None = None,
    format_style: str = "detailed",
    component_levels: Mapping[str, str | int] | None = None,
) -> logging.Logger:
    """Configure the ``ladder`` logger tree.

    Args:
        level: Level for the ``ladder`` root logger and its handlers.
        log_file: Optional file that receives the same records as stdout.
        format_style: One of ``LOG_FORMATS`` ("simple", "detailed", "json").
        component_levels: Levels for sub-loggers, keyed by name relative to
            ``ladder`` (e.g. ``{"rating.replay": "DEBUG"}``). Merged over
            ``DEFAULT_COMPONENT_LEVELS``.

    Returns:
        The configured ``ladder`` logger.
    """
    if format_style not in LOG_FORMATS:
        raise ValueError(
            f"format_style must be one of {sorted(LOG_FORMATS)}, got {format_style!r}"
        )
    level = _to_level(level)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMATS[format_style])
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    levels = {**DEFAULT_COMPONENT_LEVELS, **(component_levels or {})}
    for component, component_level in levels.items():
        get_logger(component).setLevel(_to_level(component_level))

    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific module/component.

    Args:
        name: Name of the component (usually __name__).

    Returns:
        Logger instance nested under the ``ladder`` namespace.
    """
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


@contextmanager
def log_timing(
    logger: logging.Logger, operation: str, level: int = logging.INFO
):
    """Context manager to log the timing of operations.

    Args:
        logger: Logger to use for timing messages.
        operation: Description of the operation being timed.
        level: Logging level for timing messages. Defaults to logging.INFO.

    Examples:
        >>> logger = get_logger(__name__)
        >>> with log_timing(logger, "replaying ratings"):
        ...     replay = replay_ratings(players, matches)
    """
    start_time = time.time()
    logger.log(level, f"Starting {operation}")

    try:
        yield
        elapsed_time = time.time() - start_time
        logger.log(level, f"Completed {operation} in {elapsed_time:.2f}s")
    except Exception as exception:
        elapsed_time = time.time() - start_time
        logger.error(
            f"Failed {operation} after {elapsed_time:.2f}s: {exception}"
        )
        raise
