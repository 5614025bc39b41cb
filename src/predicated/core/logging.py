"""Structured logging.

This module configures structlog for structured logging, with console output
for development and JSON output otherwise.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from predicated.core.config import get_settings


def add_logger_name(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add logger name to log entry.

    Args:
        logger: Logger instance.
        method_name: Method name (unused).
        event_dict: Event dictionary to modify.

    Returns:
        EventDict: Modified event dictionary with logger name.
    """
    name = event_dict.pop("logger_name", None) or getattr(logger, "name", "predicated")
    event_dict.setdefault("logger", name)
    return event_dict


def rename_message_field(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Rename 'event' field to 'message' for compatibility.

    Args:
        logger: Logger instance (unused).
        method_name: Method name (unused).
        event_dict: Event dictionary to modify.

    Returns:
        EventDict: Modified event dictionary with message field.
    """
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def configure_logging(settings: Any | None = None) -> None:
    """Configure structured logging.

    Sets up structlog with console formatting for development and
    JSON formatting otherwise.

    Args:
        settings: Optional settings instance. If not provided, will load from environment.
    """
    if settings is None:
        settings = get_settings()

    level = getattr(logging, settings.log_level)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        # structlog.stdlib.add_logger_name doesn't work with PrintLogger
        add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.is_development or settings.log_format == "console":
        renderer: Processor = structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )
    else:
        renderer = structlog.processors.JSONRenderer()
        shared_processors.append(rename_message_field)

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=not settings.is_testing,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Until the host configures structlog (directly or via configure_logging),
    the logger filters below ``Settings.log_level`` so library debug events
    are not printed.

    Args:
        name: Optional logger name. If not provided, uses 'predicated'.

    Returns:
        BoundLogger: Configured structured logger instance.
    """
    logger_name = name or "predicated"
    wrapper_class = None
    if not structlog.is_configured():
        level = getattr(logging, get_settings().log_level)
        wrapper_class = structlog.make_filtering_bound_logger(level)

    return structlog.wrap_logger(
        None,
        wrapper_class=wrapper_class,
        logger_factory_args=(logger_name,),
        logger_name=logger_name,
    )
