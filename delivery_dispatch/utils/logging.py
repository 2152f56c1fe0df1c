"""Structured logging configuration."""

import logging
import sys
from typing import Any

import structlog
from pythonjsonlogger import jsonlogger

from delivery_dispatch.config import get_settings


def _handler(log_format: str) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if log_format == "json":
        handler.setFormatter(
            jsonlogger.JsonFormatter(
                fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
                rename_fields={"levelname": "level", "asctime": "timestamp"},
            )
        )
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
                datefmt="%H:%M:%S",
            )
        )
    return handler


def setup_logging(level: str | None = None, log_format: str | None = None) -> None:
    """
    Route stdlib and structlog output to stdout.

    ``level`` and ``log_format`` default to the ``LOG_LEVEL`` and
    ``LOG_FORMAT`` settings.
    """
    settings = get_settings()
    level = (level or settings.log_level).upper()
    log_format = log_format or settings.log_format
    numeric_level = logging.getLevelName(level)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(_handler(log_format))
    root_logger.setLevel(numeric_level)

    renderer = (
        structlog.processors.JSONRenderer()
        if log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


class OperationLogger:
    """Logs the outcome of public engine operations, tagged with the component."""

    def __init__(self, component: str):
        self.component = component
        self.logger = get_logger(component).bind(component=component)

    def log_dispatch(
        self,
        message_type: str | None,
        recipient_kind: str,
        recipient_id: str,
        **kwargs: Any,
    ) -> None:
        """Log a persisted notification."""
        self.logger.info(
            "message_persisted",
            message_type=message_type,
            recipient_kind=recipient_kind,
            recipient_id=recipient_id,
            **kwargs,
        )

    def log_refusal(self, operation: str, reason: str, **kwargs: Any) -> None:
        self.logger.info("operation_refused", operation=operation, reason=reason, **kwargs)

    def log_failure(self, operation: str, error: str, **kwargs: Any) -> None:
        """Log an unexpected failure that was converted into a result."""
        self.logger.error("operation_failed", operation=operation, error=error, **kwargs)
