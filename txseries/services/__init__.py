"""Service layer for the transaction read API."""

from .pagination import compute_pagination, pagination_headers
from .query_builder import QueryPair, TransactionQueryBuilder
from .transactions_service import TransactionsService

__all__ = [
    "QueryPair",
    "TransactionQueryBuilder",
    "TransactionsService",
    "compute_pagination",
    "pagination_headers",
]
