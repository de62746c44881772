"""Read-only HTTP API over a time series of blockchain transactions."""

from .core import get_logger, get_settings
from .main import create_app

__all__ = ["create_app", "get_logger", "get_settings"]
