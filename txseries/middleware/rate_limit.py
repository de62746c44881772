"""Fixed-window request quota per client address."""
from __future__ import annotations

import math
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from threading import Lock

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from txseries.core.errors import error_body
from txseries.core.logger import get_logger

LOGGER = get_logger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests, please try again later."


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_after: int


class FixedWindowRateLimiter:
    """Count hits per key inside windows of ``window_seconds``.

    Windows start at the first hit of a key and are reset once expired.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests < 1 or window_seconds < 1:
            raise ValueError("max_requests and window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = Lock()
        self._windows: dict[str, tuple[float, int]] = {}

    def hit(self, key: str) -> RateLimitDecision:
        now = self._clock()
        with self._lock:
            started, count = self._windows.get(key, (now, 0))
            if now - started >= self.window_seconds:
                started, count = now, 0
            count += 1
            self._windows[key] = (started, count)
            self._evict_expired(now)
        reset_after = max(0, math.ceil(started + self.window_seconds - now))
        return RateLimitDecision(
            allowed=count <= self.max_requests,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - count),
            reset_after=reset_after,
        )

    def _evict_expired(self, now: float) -> None:
        expired = [
            key
            for key, (started, _) in self._windows.items()
            if now - started >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests under ``path_prefix`` once a client exhausts its quota."""

    def __init__(
        self,
        app,
        limiter: FixedWindowRateLimiter,
        *,
        path_prefix: str = "/api",
    ) -> None:
        super().__init__(app)
        self._limiter = limiter
        self._path_prefix = path_prefix

    def _applies_to(self, path: str) -> bool:
        if not self._path_prefix:
            return True
        return path == self._path_prefix or path.startswith(f"{self._path_prefix}/")

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if not self._applies_to(request.url.path):
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        decision = self._limiter.hit(client)
        headers = {
            "RateLimit-Limit": str(decision.limit),
            "RateLimit-Remaining": str(decision.remaining),
            "RateLimit-Reset": str(decision.reset_after),
        }

        if not decision.allowed:
            LOGGER.warning("Rate limit exceeded for %s", client)
            headers["Retry-After"] = str(decision.reset_after)
            return JSONResponse(
                status_code=429,
                content=error_body(
                    error="Too Many Requests",
                    message=RATE_LIMIT_MESSAGE,
                    code="RATE_LIMITED",
                ),
                headers=headers,
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response


__all__ = ["FixedWindowRateLimiter", "RateLimitDecision", "RateLimitMiddleware"]
