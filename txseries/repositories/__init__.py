"""Repositories executing read-only statements against the data store."""

from .base import BaseRepository
from .transaction_repository import TimeBucketRow, TransactionRepository

__all__ = ["BaseRepository", "TimeBucketRow", "TransactionRepository"]
