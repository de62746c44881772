"""JSON routes exposing the transaction time series."""
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Path, Query, Response

from txseries.core.logger import get_logger
from txseries.dependencies import get_transactions_service
from txseries.schemas.transactions import (
    ErrorEnvelope,
    TimeBucketPayload,
    TimeInterval,
    TransactionPage,
    TransactionPayload,
    TransactionSearchResult,
)
from txseries.services import TransactionsService, pagination_headers
from txseries.services.query_builder import (
    DEFAULT_BUCKET_LIMIT,
    DEFAULT_PAGE_LIMIT,
    MAX_LIMIT,
    MAX_OFFSET,
    MIN_SEARCH_TERM_LENGTH,
)

router = APIRouter(tags=["transactions"])
LOGGER = get_logger(__name__)

_ERRORS = {
    400: {"model": ErrorEnvelope, "description": "Validation or domain error"},
    500: {"model": ErrorEnvelope, "description": "Data store failure"},
}


@router.get("/transactions", response_model=TransactionPage, responses=_ERRORS)
async def list_transactions(
    response: Response,
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_LIMIT),
    offset: int = Query(0, ge=0, le=MAX_OFFSET),
    service: TransactionsService = Depends(get_transactions_service),
) -> TransactionPage:
    """Paginated transactions, newest first."""

    LOGGER.debug("Fetching transactions with limit=%s, offset=%s", limit, offset)
    page = await service.list_transactions(limit=limit, offset=offset)
    response.headers.update(pagination_headers(page.total_count, page.pagination))
    return page


@router.get("/transactions/range", response_model=TransactionPage, responses=_ERRORS)
async def list_transactions_in_range(
    response: Response,
    start: date = Query(..., description="First day (YYYY-MM-DD), inclusive"),
    end: date = Query(..., description="Last day (YYYY-MM-DD), inclusive"),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_LIMIT),
    offset: int = Query(0, ge=0, le=MAX_OFFSET),
    service: TransactionsService = Depends(get_transactions_service),
) -> TransactionPage:
    page = await service.list_transactions_in_range(
        start=start, end=end, limit=limit, offset=offset
    )
    response.headers.update(pagination_headers(page.total_count, page.pagination))
    return page


@router.get(
    "/transactions/by-time",
    response_model=list[TimeBucketPayload],
    responses=_ERRORS,
)
async def transactions_by_time(
    interval: TimeInterval = Query(..., description="Bucket width"),
    limit: int = Query(DEFAULT_BUCKET_LIMIT, ge=1, le=MAX_LIMIT),
    service: TransactionsService = Depends(get_transactions_service),
) -> list[TimeBucketPayload]:
    """Time-bucketed aggregates, most recent bucket first."""

    return await service.transactions_by_time(interval=interval, limit=limit)


@router.get(
    "/transactions/search",
    response_model=TransactionSearchResult,
    responses=_ERRORS,
)
async def search_transactions(
    response: Response,
    term: str = Query(..., min_length=MIN_SEARCH_TERM_LENGTH),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_LIMIT),
    service: TransactionsService = Depends(get_transactions_service),
) -> TransactionSearchResult:
    """Case-insensitive substring search on the transaction hash."""

    result = await service.search_transactions(term=term, limit=limit)
    response.headers["X-Total-Count"] = str(result.total_count)
    return result


@router.get(
    "/transaction/{tx_hash}",
    response_model=TransactionPayload,
    responses={**_ERRORS, 404: {"model": ErrorEnvelope, "description": "Unknown hash"}},
)
async def get_transaction(
    tx_hash: str = Path(..., description="Transaction hash"),
    service: TransactionsService = Depends(get_transactions_service),
) -> TransactionPayload:
    return await service.get_transaction(tx_hash)
