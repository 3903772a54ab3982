"""
Structured logging configuration.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import Any

import structlog

from reportline.core.config import settings

SERVICE_NAME = "reportline"


def _add_service_context(
    _logger: Any,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("environment", settings.ENVIRONMENT)
    if settings.SERVERLESS:
        event_dict.setdefault("serverless", True)
    return event_dict


def configure_logging() -> None:
    """Configure stdlib and structlog processors."""
    level_value = getattr(logging, settings.effective_log_level.upper(), logging.INFO)
    logging.basicConfig(level=level_value, format="%(message)s")

    # SQL statements are only wanted when explicitly echoed.
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.SQL_ECHO else logging.WARNING
    )

    renderer: structlog.types.Processor = (
        structlog.dev.ConsoleRenderer()
        if settings.LOG_FORMAT == "console"
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _add_service_context,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
