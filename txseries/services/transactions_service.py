"""Read-side service assembling transaction pages, searches and buckets."""
from __future__ import annotations

import asyncio
from collections.abc import Sequence
from datetime import date

from starlette.concurrency import run_in_threadpool

from txseries.core.errors import NotFoundError
from txseries.core.logger import get_logger, timeit
from txseries.models import Transaction
from txseries.repositories import TransactionRepository
from txseries.schemas.transactions import (
    TimeBucketPayload,
    TimeInterval,
    TransactionPage,
    TransactionPayload,
    TransactionSearchResult,
)

from .pagination import compute_pagination
from .query_builder import (
    DEFAULT_BUCKET_LIMIT,
    DEFAULT_PAGE_LIMIT,
    QueryPair,
    TransactionQueryBuilder,
)

LOGGER = get_logger(__name__)


def _payloads(rows: Sequence[Transaction]) -> list[TransactionPayload]:
    return [TransactionPayload.model_validate(row) for row in rows]


class TransactionsService:
    """Run the statements for each read operation and shape the responses.

    The repository is injected; the service never reaches for a global
    connection pool.
    """

    def __init__(
        self,
        repository: TransactionRepository,
        *,
        query_builder: TransactionQueryBuilder | None = None,
    ) -> None:
        self._repository = repository
        self._queries = query_builder or TransactionQueryBuilder()

    async def _fetch_with_count(
        self, label: str, pair: QueryPair
    ) -> tuple[list[Transaction], int]:
        # Both statements run concurrently; a failure in either propagates.
        with timeit(label, logger=LOGGER) as timer:
            rows, total = await asyncio.gather(
                run_in_threadpool(self._repository.fetch_transactions, pair.rows),
                run_in_threadpool(self._repository.count, pair.count),
            )
            timer.add(len(rows))
        return rows, total

    async def _page(
        self, label: str, pair: QueryPair, *, limit: int, offset: int
    ) -> TransactionPage:
        rows, total = await self._fetch_with_count(label, pair)
        LOGGER.info(
            "Found %d transactions, total count: %d (limit=%d, offset=%d)",
            len(rows),
            total,
            limit,
            offset,
        )
        return TransactionPage(
            rows=_payloads(rows),
            total_count=total,
            pagination=compute_pagination(total_count=total, limit=limit, offset=offset),
        )

    async def list_transactions(
        self, *, limit: int = DEFAULT_PAGE_LIMIT, offset: int = 0
    ) -> TransactionPage:
        """Return the most recent transactions, newest first."""

        pair = self._queries.latest(limit=limit, offset=offset)
        return await self._page("transactions.list", pair, limit=limit, offset=offset)

    async def list_transactions_in_range(
        self,
        *,
        start: date,
        end: date,
        limit: int = DEFAULT_PAGE_LIMIT,
        offset: int = 0,
    ) -> TransactionPage:
        """Return transactions between two calendar days, both inclusive.

        Raises :class:`~txseries.core.errors.InvalidDateRangeError` before any
        statement is executed when ``end`` precedes ``start``.
        """

        pair = self._queries.date_range(start=start, end=end, limit=limit, offset=offset)
        return await self._page("transactions.range", pair, limit=limit, offset=offset)

    async def transactions_by_time(
        self, *, interval: TimeInterval, limit: int = DEFAULT_BUCKET_LIMIT
    ) -> list[TimeBucketPayload]:
        statement = self._queries.time_buckets(interval=interval, limit=limit)
        with timeit("transactions.by_time", logger=LOGGER, unit="buckets") as timer:
            buckets = await run_in_threadpool(self._repository.fetch_time_buckets, statement)
            timer.add(len(buckets))
        return [TimeBucketPayload.model_validate(bucket) for bucket in buckets]

    async def search_transactions(
        self, *, term: str, limit: int = DEFAULT_PAGE_LIMIT
    ) -> TransactionSearchResult:
        pair = self._queries.search(term=term, limit=limit)
        rows, total = await self._fetch_with_count("transactions.search", pair)
        return TransactionSearchResult(rows=_payloads(rows), total_count=total)

    async def get_transaction(self, tx_hash: str) -> TransactionPayload:
        statement = self._queries.by_hash(tx_hash)
        row = await run_in_threadpool(self._repository.fetch_one, statement)
        if row is None:
            raise NotFoundError(f"Transaction {tx_hash} not found")
        return TransactionPayload.model_validate(row)
