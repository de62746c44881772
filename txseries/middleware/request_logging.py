"""Access logging in the combined log format, with per-request log context."""
from __future__ import annotations

from collections.abc import Awaitable, Callable
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from txseries.core.logger import get_logger, log_context

LOGGER = get_logger("txseries.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Bind request id, method and path to the log context; log one line per request."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("x-request-id") or uuid4().hex[:12]
        with log_context.scope(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        ):
            response = await call_next(request)
            self._log_access(request, response)
        response.headers["X-Request-ID"] = request_id
        return response

    @staticmethod
    def _log_access(request: Request, response: Response) -> None:
        client = request.client.host if request.client else "-"
        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"
        LOGGER.info(
            '%s - - "%s %s HTTP/%s" %s %s "%s" "%s"',
            client,
            request.method,
            target,
            request.scope.get("http_version", "1.1"),
            response.status_code,
            response.headers.get("content-length", "-"),
            request.headers.get("referer", "-"),
            request.headers.get("user-agent", "-"),
        )


__all__ = ["RequestLoggingMiddleware"]
