"""Translate validated request parameters into parameterised SQL statements."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time

from sqlalchemy import Interval, Select, cast, func, literal, literal_column, select

from txseries.core.errors import InvalidDateRangeError, InvalidParameterError
from txseries.models import Transaction
from txseries.schemas.transactions import TimeInterval

DEFAULT_PAGE_LIMIT = 25
DEFAULT_BUCKET_LIMIT = 30
MAX_LIMIT = 100
# OFFSET is bound as a signed 64-bit integer by both PostgreSQL and SQLite.
MAX_OFFSET = 2**63 - 1
MIN_SEARCH_TERM_LENGTH = 3

_LIKE_ESCAPE = "/"
_END_OF_DAY = time(23, 59, 59)


@dataclass(frozen=True)
class QueryPair:
    """A rows statement and the count statement sharing its filter."""

    rows: Select
    count: Select


@dataclass(frozen=True)
class TimeRange:
    start: datetime
    end: datetime


def day_range(start: date, end: date) -> TimeRange:
    """Expand calendar dates to ``[start 00:00:00, end 23:59:59]``."""

    if end < start:
        raise InvalidDateRangeError()
    return TimeRange(
        start=datetime.combine(start, time.min),
        end=datetime.combine(end, _END_OF_DAY),
    )


def like_pattern(term: str) -> str:
    """Return a substring pattern matching ``term`` literally."""

    escaped = (
        term.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", f"{_LIKE_ESCAPE}%")
        .replace("_", f"{_LIKE_ESCAPE}_")
    )
    return f"%{escaped}%"


class TransactionQueryBuilder:
    """Builds the read-only statements behind each endpoint."""

    def _page(self, *criteria, limit: int, offset: int | None) -> QueryPair:
        rows = (
            select(Transaction)
            .where(*criteria)
            .order_by(Transaction.time.desc())
            .limit(limit)
        )
        if offset is not None:
            rows = rows.offset(offset)
        count = select(func.count()).select_from(Transaction).where(*criteria)
        return QueryPair(rows=rows, count=count)

    def latest(self, *, limit: int, offset: int) -> QueryPair:
        return self._page(limit=limit, offset=offset)

    def date_range(self, *, start: date, end: date, limit: int, offset: int) -> QueryPair:
        window = day_range(start, end)
        return self._page(
            Transaction.time >= window.start,
            Transaction.time <= window.end,
            limit=limit,
            offset=offset,
        )

    def search(self, *, term: str, limit: int) -> QueryPair:
        if len(term) < MIN_SEARCH_TERM_LENGTH:
            raise InvalidParameterError(
                "term",
                f"Search term must be at least {MIN_SEARCH_TERM_LENGTH} characters",
            )
        criterion = Transaction.hash.ilike(like_pattern(term), escape=_LIKE_ESCAPE)
        return self._page(criterion, limit=limit, offset=None)

    def by_hash(self, tx_hash: str) -> Select:
        return select(Transaction).where(Transaction.hash == tx_hash).limit(1)

    def time_buckets(self, *, interval: TimeInterval, limit: int) -> Select:
        """Aggregate transactions into ``interval``-wide buckets, newest first.

        ``time_bucket`` is provided by TimescaleDB; the interval is bound as a
        parameter and cast server side.
        """

        try:
            interval = TimeInterval(interval)
        except ValueError:
            allowed = ", ".join(TimeInterval.values())
            raise InvalidParameterError(
                "interval", f"Interval must be one of: {allowed}"
            ) from None
        width = cast(literal(interval.value), Interval())
        bucket = literal_column("bucket")
        return (
            select(
                func.time_bucket(width, Transaction.time).label("bucket"),
                func.count().label("transaction_count"),
                func.sum(Transaction.output_total).label("total_volume"),
                func.avg(Transaction.fee).label("avg_fee"),
                func.max(Transaction.output_total).label("max_transaction"),
                func.min(Transaction.output_total).label("min_transaction"),
            )
            .group_by(bucket)
            .order_by(bucket.desc())
            .limit(limit)
        )
