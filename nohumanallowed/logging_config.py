"""
Structured logging configuration using structlog.

JSON output in production, pretty console output in development. The API logs
to stdout and the process manager handles persistence; the CLI logs to stderr
so that stdout stays parseable.
"""

import logging
import sys
from typing import TextIO

import structlog

from nohumanallowed.config import settings


def setup_logging(stream: TextIO | None = None) -> None:
    """
    Configure structlog and stdlib logging integration.

    Call this once at startup (the API lifespan and the CLI both do).

    Args:
        stream: Where log lines are written. Defaults to stdout.
    """
    stream = stream or sys.stdout

    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=stream.isatty())

    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.contextvars.merge_contextvars,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )

    # uvicorn logs through stdlib logging
    logging.basicConfig(
        format="%(message)s",
        stream=stream,
        level=level,
    )
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str | None = None):
    """
    Get a structlog logger instance.

    Args:
        name: Optional logger name for context

    Returns:
        Configured structlog logger
    """
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger_name=name)
    return logger
