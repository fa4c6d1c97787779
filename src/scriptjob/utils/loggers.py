"""
Structured logging configuration for scriptjob.

Configures structlog on top of the standard logging module, rendering either
human-readable console lines or JSON.

Until the host calls configure_logging(), events go through the standard
logging module unconfigured: debug and info events are dropped and warnings
reach stderr through logging's last-resort handler. Library users therefore
see nothing on stdout.
"""

import logging
import sys
from typing import Any, Optional

import structlog

from scriptjob.settings import get_settings

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _configure_structlog(renderer: Any) -> None:
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def configure_default_logging() -> None:
    """Route structlog through standard logging without adding any handler."""
    _configure_structlog(structlog.dev.ConsoleRenderer(colors=False))


def configure_logging(
    log_level: Optional[str] = None, log_format: Optional[str] = None
) -> None:
    """
    Configure structlog for console or JSON logging on stderr.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR); defaults to settings
        log_format: "text" for console output, "json" for structured lines
    """
    settings = get_settings()
    level = LOG_LEVELS.get((log_level or settings.log_level).upper(), logging.INFO)
    log_format = log_format or settings.log_format

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
        force=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if log_format == "json"
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    _configure_structlog(renderer)


def get_logger(name: str = "scriptjob", **context: Any) -> structlog.stdlib.BoundLogger:
    """
    Get a logger instance with optional bound context.

    Args:
        name: Logger name, usually the module's __name__
        **context: Key-value pairs added to every event (e.g. module="bootloader")

    Returns:
        Bound logger instance
    """
    return structlog.get_logger(name, **context)


if not structlog.is_configured():
    configure_default_logging()
