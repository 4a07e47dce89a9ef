"""Structured logging configuration.

Every module logs through structlog with snake_case event names and
keyword fields, rendered as one JSON object per line.
"""

from __future__ import annotations

import logging
from typing import Any

import structlog

from railmap.constants import DEFAULT_LOG_LEVEL
from railmap.errors import RailmapConfigError

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def parse_log_level(raw_value: str) -> int:
    """Resolve a level name such as "info" into a logging level number.

    Raises:
        RailmapConfigError: If the name is not a known level.
    """
    level = _LEVELS.get(raw_value.strip().lower())
    if level is None:
        raise RailmapConfigError(
            f"Invalid log level '{raw_value}'. Expected one of: {', '.join(_LEVELS)}."
        )
    return level


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Configure structlog processors and the minimum level.

    Args:
        level: Level name, e.g. "info" or "debug".
    """
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(parse_log_level(level)),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.
    """
    return structlog.get_logger(name)
