"""
Structured logging configuration using structlog.

Development gets colored console lines; staging and production get one JSON
object per line. Ledger events carry float quantities and costs, which are
rounded before rendering so folded sums read as 50 and not 49.99999999.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from stockledger.config.settings import get_settings

QUANTITY_DECIMALS = 4

QUIET_LOGGERS = ("aiosqlite", "uvicorn.access")


def app_context_processor() -> Processor:
    """Stamp every event with the app name, version and environment."""
    settings = get_settings()
    context = {
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }

    def add_app_context(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        for key, value in context.items():
            event_dict.setdefault(key, value)
        return event_dict

    return add_app_context


def round_floats(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    for key, value in event_dict.items():
        if isinstance(value, float):
            event_dict[key] = round(value, QUANTITY_DECIMALS)
    return event_dict


def _renderer(environment: str) -> list[Processor]:
    if environment == "development":
        return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]
    return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]


def configure_logging(level: str | None = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    ``level`` overrides the configured log level, e.g. for the migrate CLI.
    """
    settings = get_settings()
    level_name = (level or settings.log_level).upper()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        round_floats,
        app_context_processor(),
        *_renderer(settings.environment),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=getattr(logging, level_name))
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
