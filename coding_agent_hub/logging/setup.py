"""Logging system setup: stderr output via a non-blocking queue handler.

stdout carries the MCP JSON-RPC stream, so nothing here may write to it.
"""

import atexit
import logging
import logging.handlers
import queue
import sys
from typing import Optional

from ..config import get_settings

LOGGER_NAME = "coding_agent_hub"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_queue_listener: Optional[logging.handlers.QueueListener] = None


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Initialize logging for the hub.

    Args:
        level: Log level override; defaults to settings.logging.level

    Returns:
        The configured package logger
    """
    global _queue_listener

    app_logger = logging.getLogger(LOGGER_NAME)
    app_logger.setLevel((level or get_settings().logging.level).upper())
    app_logger.propagate = False

    # Idempotent: tear down a previous listener before re-configuring
    if _queue_listener is not None:
        _queue_listener.stop()
        _queue_listener = None
    if app_logger.hasHandlers():
        app_logger.handlers.clear()

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    log_queue: queue.Queue = queue.Queue(-1)  # -1 means unlimited size
    _queue_listener = logging.handlers.QueueListener(
        log_queue, stderr_handler, respect_handler_level=True
    )
    _queue_listener.start()
    atexit.unregister(shutdown_logging)
    atexit.register(shutdown_logging)

    app_logger.addHandler(logging.handlers.QueueHandler(log_queue))
    app_logger.debug("Logging initialized (stderr)")
    return app_logger


def shutdown_logging() -> None:
    """Flush and stop the queue listener."""
    global _queue_listener
    if _queue_listener is not None:
        _queue_listener.stop()
        _queue_listener = None
