"""Shared FastAPI dependency definitions."""
from __future__ import annotations

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import sessionmaker

from txseries.db.session import get_sessionmaker
from txseries.repositories import TransactionRepository
from txseries.services import TransactionsService


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker:
    """Return the process-wide session factory.

    The engine behind it owns the connection pool; it is built lazily on the
    first request so importing the application never touches the database.
    Tests override this dependency with their own factory.
    """

    return get_sessionmaker()


def get_transaction_repository(
    session_factory: sessionmaker = Depends(get_session_factory),
) -> TransactionRepository:
    return TransactionRepository(session_factory)


def get_transactions_service(
    repository: TransactionRepository = Depends(get_transaction_repository),
) -> TransactionsService:
    """Return a service instance per request."""

    return TransactionsService(repository)
