"""Shortcut imports for the logging helpers in :mod:`txseries.core.log`."""
from __future__ import annotations

from .log import get_logger, init_logging, log_context, shutdown_logging, timeit

__all__ = ["get_logger", "init_logging", "shutdown_logging", "log_context", "timeit"]
