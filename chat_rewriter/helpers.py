"""Shared helpers"""

import logging
from typing import Any

from chat_rewriter.config import LOG_PREFIX

logger = logging.getLogger("chat_rewriter")


def configure_logging(verbose: bool = False) -> None:
    """Send package log records to stderr, for command line use"""
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def log_event(event: str, details: Any = None) -> None:
    """Record a diagnostic event, never raising"""
    try:
        if details is None:
            logger.info(f"{LOG_PREFIX} {event}")
        else:
            logger.info(f"{LOG_PREFIX} {event} {details!r}")
    except Exception:  # pylint: disable=broad-except
        pass


def log_debug(message: str) -> None:
    """Record a low-level trace message, never raising"""
    try:
        logger.debug(f"{LOG_PREFIX} {message}")
    except Exception:  # pylint: disable=broad-except
        pass
