"""Response schemas for the transaction read API."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_serializer
from pydantic.alias_generators import to_camel


class TimeInterval(str, Enum):
    """Bucket widths accepted by the by-time aggregation."""

    ONE_MINUTE = "1 minute"
    FIVE_MINUTES = "5 minutes"
    TEN_MINUTES = "10 minutes"
    FIFTEEN_MINUTES = "15 minutes"
    THIRTY_MINUTES = "30 minutes"
    ONE_HOUR = "1 hour"
    TWO_HOURS = "2 hours"
    SIX_HOURS = "6 hours"
    TWELVE_HOURS = "12 hours"
    ONE_DAY = "1 day"
    ONE_WEEK = "1 week"
    ONE_MONTH = "1 month"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TransactionPayload(BaseModel):
    """A single transaction row as exposed over HTTP."""

    model_config = ConfigDict(from_attributes=True)

    hash: str
    block_id: int
    time: datetime
    output_total: Decimal
    output_total_usd: Decimal | None = None
    fee: Decimal
    size: int

    @field_serializer("output_total", "output_total_usd", "fee")
    def serialize_amount(self, value: Decimal | None) -> str | None:
        if value is None:
            return None
        return format(value, "f")


class TimeBucketPayload(BaseModel):
    """Aggregates over the transactions falling into one bucket."""

    model_config = ConfigDict(from_attributes=True)

    bucket: datetime
    transaction_count: int
    total_volume: Decimal | None = None
    avg_fee: Decimal | None = None
    max_transaction: Decimal | None = None
    min_transaction: Decimal | None = None

    @field_serializer("total_volume", "avg_fee", "max_transaction", "min_transaction")
    def serialize_amount(self, value: Decimal | None) -> str | None:
        if value is None:
            return None
        return format(value, "f")


class Pagination(_CamelModel):
    limit: int
    offset: int
    current_page: int
    total_pages: int


class TransactionPage(_CamelModel):
    """Envelope returned by the paginated list endpoints."""

    rows: list[TransactionPayload]
    total_count: int
    pagination: Pagination


class TransactionSearchResult(_CamelModel):
    rows: list[TransactionPayload]
    total_count: int


class HealthStatus(BaseModel):
    status: str
    timestamp: datetime


class ErrorDetail(BaseModel):
    field: str
    location: str
    message: str
    value: Any = None


class ErrorEnvelope(BaseModel):
    """Body of every 4xx/5xx response (documented in the OpenAPI schema)."""

    error: str
    message: str
    code: str
    details: list[ErrorDetail] | None = None
