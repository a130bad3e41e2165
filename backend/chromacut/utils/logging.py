"""
Chromacut Structured Logging
Centralized logging configuration using loguru.
"""
import sys
from typing import Optional

from loguru import logger

from chromacut.config import config

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message} | {extra}"

_handler_id: Optional[int] = None


def configure_logging(level: Optional[str] = None) -> None:
    """
    Replace loguru's default handler with the service's stdout sink.

    Safe to call more than once; only the sink added here is replaced.
    """
    global _handler_id
    if _handler_id is None:
        # Remove default handler
        logger.remove()
    else:
        logger.remove(_handler_id)

    _handler_id = logger.add(
        sys.stdout,
        format=LOG_FORMAT,
        level=level or config.LOG_LEVEL,
        serialize=False  # Set to True for JSON output
    )


def get_logger(**extra):
    """Logger bound to structured context (request ids and the like)."""
    return logger.bind(**extra)
