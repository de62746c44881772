"""Shared helpers for repositories executing statements on short-lived sessions."""
from __future__ import annotations

from decimal import Decimal
from typing import Any

from sqlalchemy import Select
from sqlalchemy.orm import Session, sessionmaker


class BaseRepository:
    """Base repository bound to an injected session factory.

    Every call opens its own session so that independent statements can run
    concurrently on separate pooled connections.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def _session(self) -> Session:
        return self._session_factory()

    def _scalar(self, statement: Select) -> int:
        """Execute ``statement`` and return the scalar integer result."""

        with self._session() as session:
            value = session.execute(statement).scalar() or 0
        return int(value)

    @staticmethod
    def _to_optional_decimal(value: Any) -> Decimal | None:
        # avg() comes back as float on some drivers.
        if value is None or isinstance(value, Decimal):
            return value
        return Decimal(str(value))
