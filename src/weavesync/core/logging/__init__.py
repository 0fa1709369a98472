"""
WeaveSync Logging Module - Structured Application Logging.

Components:
    - logger: logging configuration and logger factory functions

Example:
    >>> from weavesync.core.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Query executed", size=12)
"""

from weavesync.core.logging.logger import bind_task_context, get_logger, setup_logging

__all__ = ["bind_task_context", "get_logger", "setup_logging"]
