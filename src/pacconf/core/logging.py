"""Structured logging via structlog.

Call ``configure_logging`` once at process start (the CLI does this).
Library code only calls ``get_logger``; without configuration structlog
falls back to its own defaults.
"""

import logging
import sys
from typing import Any

import structlog

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def configure_logging(level: str = "WARNING", *, json_output: bool = False) -> None:
    """Configure structlog processors and level filtering.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR)
        json_output: Render events as JSON lines instead of console text

    Raises:
        ValueError: If level is not a known level name
    """
    try:
        numeric_level = _LEVELS[level.upper()]
    except KeyError:
        raise ValueError(
            f"Unknown log level '{level}'. Expected one of: {', '.join(_LEVELS)}"
        ) from None

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Return a structlog logger, optionally bound to a component name."""
    logger = structlog.get_logger()
    if name is not None:
        return logger.bind(component=name)
    return logger
