"""Logging configuration for the notifier service.

stdlib handlers (console plus rotating files) carry structlog output; JSON
rendering in production and staging, a colored console renderer elsewhere.
Every event is stamped with the service name and environment, and message
deliveries bind their routing details for the duration of one message.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path

import structlog

SERVICE_NAME = "notifier"

# Client libraries that flood DEBUG output with per-command chatter
QUIET_LOGGERS = {
    "redis": logging.WARNING,
    "asyncio": logging.WARNING,
    "protean": logging.INFO,
}


def _environment() -> str:
    return (os.getenv("ENV") or os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level() -> str:
    """Get log level based on environment."""
    level_map = {
        "production": "INFO",
        "staging": "INFO",
        "development": "DEBUG",
        "test": "WARNING",
    }

    return os.getenv("LOG_LEVEL", level_map.get(_environment(), "INFO")).upper()


def setup_stdlib_logging(log_dir: Path | str = "logs") -> None:
    """Configure standard library logging."""
    log_level = get_log_level()

    log_dir = Path(log_dir)
    log_dir.mkdir(exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    file_handler = logging.handlers.RotatingFileHandler(
        filename=log_dir / f"{SERVICE_NAME}.log",
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(log_level)

    error_handler = logging.handlers.RotatingFileHandler(
        filename=log_dir / f"{SERVICE_NAME}_error.log",
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.ERROR)

    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(error_handler)

    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(max(level, logging.getLevelName(log_level)))


def add_service_fields(logger, method_name, event_dict):
    """structlog processor stamping the service name and environment on every event."""
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("env", _environment())
    return event_dict


def setup_structlog() -> None:
    """Configure structlog for structured logging."""
    env = _environment()

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        add_service_fields,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
                structlog.processors.CallsiteParameter.FUNC_NAME,
            ]
        ),
    ]

    if env in ["production", "staging"]:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.RichTracebackFormatter(
                    show_locals=False,
                    max_frames=2,
                ),
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(log_dir: Path | str = "logs") -> None:
    """Configure all logging for the service."""
    setup_stdlib_logging(log_dir)
    setup_structlog()


def delivery_context(binding):
    """Bind a binding's routing details to every log line emitted while one message is handled.

    Leaving the block restores whatever context was bound before, so an
    outer caller's fields survive a delivery.
    """
    return structlog.contextvars.bound_contextvars(
        exchange=binding.exchange,
        routing_key=binding.routing_key,
        queue=binding.queue,
    )
