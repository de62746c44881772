"""Pydantic schemas exposed by the HTTP API."""

from .transactions import (
    ErrorDetail,
    ErrorEnvelope,
    HealthStatus,
    Pagination,
    TimeBucketPayload,
    TimeInterval,
    TransactionPage,
    TransactionPayload,
    TransactionSearchResult,
)

__all__ = [
    "ErrorDetail",
    "ErrorEnvelope",
    "HealthStatus",
    "Pagination",
    "TimeBucketPayload",
    "TimeInterval",
    "TransactionPage",
    "TransactionPayload",
    "TransactionSearchResult",
]
