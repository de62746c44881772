"""Data access for the ``transactions`` hypertable."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Select

from txseries.models import Transaction

from .base import BaseRepository


@dataclass(frozen=True)
class TimeBucketRow:
    bucket: datetime
    transaction_count: int
    total_volume: Decimal | None
    avg_fee: Decimal | None
    max_transaction: Decimal | None
    min_transaction: Decimal | None


class TransactionRepository(BaseRepository):
    """Executes statements produced by the query builder."""

    def fetch_transactions(self, statement: Select) -> list[Transaction]:
        with self._session() as session:
            return list(session.scalars(statement).all())

    def count(self, statement: Select) -> int:
        return self._scalar(statement)

    def fetch_one(self, statement: Select) -> Transaction | None:
        with self._session() as session:
            return session.scalars(statement).first()

    def fetch_time_buckets(self, statement: Select) -> list[TimeBucketRow]:
        with self._session() as session:
            result = session.execute(statement)
            rows: list[TimeBucketRow] = []
            for row in result.mappings():
                rows.append(
                    TimeBucketRow(
                        bucket=row["bucket"],
                        transaction_count=int(row["transaction_count"] or 0),
                        total_volume=self._to_optional_decimal(row.get("total_volume")),
                        avg_fee=self._to_optional_decimal(row.get("avg_fee")),
                        max_transaction=self._to_optional_decimal(row.get("max_transaction")),
                        min_transaction=self._to_optional_decimal(row.get("min_transaction")),
                    )
                )
        return rows
