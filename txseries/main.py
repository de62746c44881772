"""FastAPI application instance and startup hooks."""
from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from txseries.core.config import Settings, get_settings
from txseries.core.errors import register_exception_handlers
from txseries.core.logger import get_logger, init_logging, shutdown_logging
from txseries.dependencies import get_session_factory
from txseries.middleware import (
    FixedWindowRateLimiter,
    RateLimitMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from txseries.routers import health_router, transactions_router

LOGGER = get_logger(__name__)

EXPOSED_HEADERS = [
    "X-Total-Count",
    "X-Total-Pages",
    "X-Current-Page",
    "X-Per-Page",
    "X-Request-ID",
]


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = settings or get_settings()
    init_logging(level=settings.logging.level, log_dir=settings.logging.log_dir)

    app = FastAPI(title="Transaction Time Series API", version="0.1.0")
    register_exception_handlers(app)

    prefix = settings.api.prefix
    app.include_router(transactions_router, prefix=prefix)
    app.include_router(health_router, prefix=prefix)

    if settings.rate_limit.enabled:
        limiter = FixedWindowRateLimiter(
            settings.rate_limit.max_requests,
            settings.rate_limit.window_seconds,
        )
        app.add_middleware(RateLimitMiddleware, limiter=limiter, path_prefix=prefix)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.api.cors_origins),
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=EXPOSED_HEADERS,
    )
    app.add_middleware(SecurityHeadersMiddleware)

    @app.on_event("shutdown")
    def release_resources() -> None:
        if get_session_factory.cache_info().currsize:
            LOGGER.info("Shutting down: disposing database connection pool")
            get_session_factory().kw["bind"].dispose()
            get_session_factory.cache_clear()
        shutdown_logging()

    LOGGER.info(
        "FastAPI application initialised",
        extra={"prefix": prefix, "rate_limit": settings.rate_limit.enabled},
    )
    return app


app = create_app()
