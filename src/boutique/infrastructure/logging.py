"""Logging configuration: stdlib root handler plus structlog processors.

JSON lines in production and staging, a console renderer otherwise.
Everything goes to stderr so command output on stdout stays clean.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog


def get_log_level() -> str:
    env = (os.getenv("ENVIRONMENT") or "development").lower()
    level_map = {
        "production": "INFO",
        "staging": "INFO",
        "development": "INFO",
        "test": "WARNING",
    }
    return os.getenv("LOG_LEVEL", level_map.get(env, "INFO")).upper()


def setup_stdlib_logging() -> None:
    log_level = get_log_level()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = []

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    root_logger.addHandler(handler)


def setup_structlog() -> None:
    env = (os.getenv("ENVIRONMENT") or "development").lower()

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if env in ["production", "staging"]:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging() -> None:
    """Configure all logging for the process; called once by the CLI."""
    setup_stdlib_logging()
    setup_structlog()
