"""Pagination metadata derived from limit/offset and a total row count."""
from __future__ import annotations

import math

from txseries.schemas.transactions import Pagination


def compute_pagination(*, total_count: int, limit: int, offset: int) -> Pagination:
    """Return the pagination block for an offset-based page.

    ``offset`` beyond ``total_count`` is valid and simply describes an empty
    page past the end.
    """

    if limit < 1:
        raise ValueError("limit must be at least 1")
    if offset < 0:
        raise ValueError("offset must not be negative")
    return Pagination(
        limit=limit,
        offset=offset,
        current_page=offset // limit + 1,
        total_pages=math.ceil(total_count / limit),
    )


def pagination_headers(total_count: int, pagination: Pagination) -> dict[str, str]:
    """Mirror the pagination block as response headers."""

    return {
        "X-Total-Count": str(total_count),
        "X-Total-Pages": str(pagination.total_pages),
        "X-Current-Page": str(pagination.current_page),
        "X-Per-Page": str(pagination.limit),
    }
