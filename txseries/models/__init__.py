"""Database models for the transaction time series."""
from __future__ import annotations

from .base import Base
from .transactions import Transaction

__all__ = ["Base", "Transaction"]
