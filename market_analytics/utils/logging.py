"""structlog setup.

Every component asks for a named logger via :func:`get_logger` and logs
snake_case events with keyword fields, e.g.::

    logger.debug("session_profile_insufficient_data", candles=12)
"""

from __future__ import annotations

import logging
import sys

import structlog

from market_analytics.config import get_settings


def setup_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """Configure stdlib logging and structlog for the host process.

    Call once at process start; the analytics functions never call it.
    Arguments left as None are taken from ``LOG_LEVEL`` / ``LOG_JSON``.
    """
    settings = get_settings()
    if level is None:
        level = settings.log_level
    if json_output is None:
        json_output = settings.log_json

    log_level = getattr(logging, str(level).upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
        force=True,
    )

    renderer: structlog.types.Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a named structlog logger."""
    return structlog.get_logger(name)
