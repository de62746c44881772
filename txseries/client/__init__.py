"""Python data access layer for consumers of the transaction API."""

from .transactions_client import (
    TransactionsApiError,
    TransactionsClient,
    TransactionsClientError,
    TransactionsNetworkError,
    error_message,
)

__all__ = [
    "TransactionsApiError",
    "TransactionsClient",
    "TransactionsClientError",
    "TransactionsNetworkError",
    "error_message",
]
