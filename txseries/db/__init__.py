"""Database engine and session factories."""

from .engine import create_sync_engine
from .session import get_sessionmaker, session_scope

__all__ = ["create_sync_engine", "get_sessionmaker", "session_scope"]
