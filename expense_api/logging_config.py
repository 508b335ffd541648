"""structlog setup shared by the API process."""

import logging

import structlog

from expense_api.config import settings


def configure_logging() -> None:
    """
    Configure structlog once at startup.

    Events are rendered as JSON lines unless LOG_JSON is disabled, in which
    case the human-readable console renderer is used (local development).
    """
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.LOG_JSON
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )
