"""
Structured logging configuration for WeaveSync.

This module wires structlog on top of the standard library logging so that
every task logs structured key/value events. Output is JSON for log
aggregation, or a readable console rendering while developing.

Functions:
    setup_logging(): Initialize logging configuration
    get_logger(name): Get configured logger instance
    bind_task_context(logger, task_id, task_type): Bind task metadata

Configuration:
    Logging behavior is controlled by environment variables:
    - LOG_LEVEL: Minimum log level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
    - LOG_FORMAT: Output format (json/text)
    - LOG_FILE_PATH: Optional file output path
    - DEBUG: Enable development mode with rich formatting

Example:
    >>> from weavesync.core.logging.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Batch submitted", class_name="Movies", count=3)
"""

import logging
import logging.config
import sys
from pathlib import Path

import structlog
from rich.console import Console
from rich.logging import RichHandler

from weavesync.core.config.settings import settings


def setup_logging() -> None:
    """
    Initialize logging configuration.

    Configures structlog processors and the standard library root logger.
    The handler set depends on the environment:
        - Development or DEBUG: Rich console handler on stderr
        - Otherwise: plain stream handler on stdout
        - File: additional file handler when LOG_FILE_PATH is configured
    """

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.LOG_FORMAT.lower() == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    handlers = []

    if settings.DEBUG or settings.ENVIRONMENT == "development":
        console = Console(stderr=True)
        rich_handler = RichHandler(
            console=console,
            show_time=True,
            show_level=True,
            show_path=True,
            markup=False,
            rich_tracebacks=True,
        )
        rich_handler.setLevel(settings.LOG_LEVEL)
        handlers.append(rich_handler)
    else:
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setLevel(settings.LOG_LEVEL)
        handlers.append(stream_handler)

    if settings.LOG_FILE_PATH:
        file_path = Path(settings.LOG_FILE_PATH)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(file_path)
        file_handler.setLevel(settings.LOG_LEVEL)
        handlers.append(file_handler)

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        handlers=handlers,
        format="%(message)s",
    )

    # Request lines from the HTTP client are noise at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a configured structured logger instance.

    Args:
        name (str): Logger name, typically __name__ of the calling module

    Returns:
        structlog.stdlib.BoundLogger: Configured logger instance

    Note:
        If logging hasn't been configured yet, this function will
        call setup_logging() first.
    """
    if not structlog.is_configured():
        setup_logging()
    return structlog.get_logger(name)


def bind_task_context(
    logger: structlog.stdlib.BoundLogger, task_id: str, task_type: str
) -> structlog.stdlib.BoundLogger:
    """
    Bind task metadata to a logger.

    Every event logged through the returned logger carries ``task_id`` and
    ``task_type``, which lets a host correlate log lines with the task
    invocation that produced them.

    Example:
        >>> log = bind_task_context(get_logger(__name__), "create", "BatchCreate")
        >>> log.info("Batch submitted", count=3)
    """
    return logger.bind(task_id=task_id, task_type=task_type)


setup_logging()
