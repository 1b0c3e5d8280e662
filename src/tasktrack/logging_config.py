"""structlog configuration.

Learn: structlog's contextvars processor merges anything bound with
bind_contextvars() (request_id from RequestIdMiddleware, user_id from
the auth gate) into every log entry emitted while handling a request.
"""

import logging

import structlog

from tasktrack.config import Settings


def configure_logging(settings: Settings) -> None:
    """Configure structlog once at startup."""
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_json
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        # Cached loggers ignore later reconfiguration (structlog.testing)
        cache_logger_on_first_use=settings.environment != "development",
    )
