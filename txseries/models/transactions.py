"""ORM model for the blockchain transaction time series."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, DateTime, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

_ID_TYPE = BigInteger().with_variant(Integer, "sqlite")


class Transaction(Base):
    """One confirmed transaction, keyed on the time axis of the hypertable.

    TimescaleDB requires the partitioning column in every unique constraint,
    so the primary key is ``(hash, time)``. Its leading column serves point
    lookups by hash.
    """

    __tablename__ = "transactions"
    __table_args__ = (Index("ix_transactions_time", "time"),)

    hash: Mapped[str] = mapped_column(String(64), primary_key=True)
    time: Mapped[datetime] = mapped_column(DateTime(timezone=True), primary_key=True)
    block_id: Mapped[int] = mapped_column(_ID_TYPE, nullable=False)
    output_total: Mapped[Decimal] = mapped_column(Numeric(24, 8), nullable=False)
    output_total_usd: Mapped[Decimal | None] = mapped_column(Numeric(24, 4))
    fee: Mapped[Decimal] = mapped_column(Numeric(24, 8), nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False)
