"""HTTP client mirroring each endpoint of the transaction API."""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)


class TransactionsClientError(Exception):
    """Base class for every error raised by :class:`TransactionsClient`."""


class TransactionsApiError(TransactionsClientError):
    """The API answered with a non-success status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TransactionsNetworkError(TransactionsClientError):
    """The request never produced an HTTP response."""


def error_message(response: httpx.Response) -> str:
    """Extract a human readable message from an error response.

    ``message`` wins over ``error``; non-JSON bodies fall back to the status.
    """

    fallback = f"API error: {response.status_code}"
    content_type = response.headers.get("content-type", "")
    if "application/json" not in content_type:
        return fallback
    try:
        payload = response.json()
    except ValueError:
        return fallback
    if not isinstance(payload, dict):
        return fallback
    for key in ("message", "error"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
    return fallback


def _format_date(value: date | str) -> str:
    return value.isoformat() if isinstance(value, date) else value


class TransactionsClient:
    """Single-attempt client for the transaction API (no retries, no caching)."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000/api",
        *,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "TransactionsClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        try:
            response = self._client.get(path, params=params)
        except httpx.TransportError as exc:
            logger.error("Request to %s failed: %s", path, exc)
            raise TransactionsNetworkError(f"Request to {path} failed: {exc}") from exc

        if not response.is_success:
            message = error_message(response)
            logger.error("Error fetching %s: %s", path, message)
            raise TransactionsApiError(message, response.status_code)
        return response.json()

    def list_transactions(self, limit: int = 25, offset: int = 0) -> dict[str, Any]:
        """Get a page of transactions, newest first."""

        return self._get("/transactions", {"limit": limit, "offset": offset})

    def transactions_by_range(
        self,
        start: date | str,
        end: date | str,
        limit: int = 25,
        offset: int = 0,
    ) -> dict[str, Any]:
        """Get transactions between two days (``YYYY-MM-DD``), both inclusive."""

        params = {
            "start": _format_date(start),
            "end": _format_date(end),
            "limit": limit,
            "offset": offset,
        }
        return self._get("/transactions/range", params)

    def transactions_by_time(self, interval: str = "1 day", limit: int = 50) -> list[dict[str, Any]]:
        """Get time-bucketed aggregates, most recent bucket first."""

        return self._get("/transactions/by-time", {"interval": interval, "limit": limit})

    def search_transactions(self, term: str, limit: int = 25) -> dict[str, Any]:
        return self._get("/transactions/search", {"term": term, "limit": limit})

    def get_transaction(self, tx_hash: str) -> dict[str, Any] | None:
        """Return one transaction, or ``None`` when the hash is unknown."""

        try:
            return self._get(f"/transaction/{quote(tx_hash, safe='')}")
        except TransactionsApiError as exc:
            if exc.status_code == 404:
                return None
            raise

    def health(self) -> dict[str, Any]:
        return self._get("/health")
