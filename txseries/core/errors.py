"""Error taxonomy and the JSON error envelope rendered for every 4xx/5xx."""
from __future__ import annotations

from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .logger import get_logger

LOGGER = get_logger(__name__)


class ApiError(Exception):
    """Base application error rendered with a consistent envelope."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"
    error: str = "Internal Server Error"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        error: str | None = None,
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if error is not None:
            self.error = error
        self.details = details


class DomainError(ApiError):
    """Well-formed input that is semantically invalid."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "BAD_REQUEST"
    error = "Bad Request"


class InvalidParameterError(DomainError):
    """A parameter that slipped past request validation is out of bounds."""

    code = "VALIDATION_ERROR"
    error = "Validation failed"

    def __init__(self, field: str, message: str) -> None:
        super().__init__(
            f"{field}: {message}",
            details=[{"field": field, "location": "query", "message": message}],
        )


class InvalidDateRangeError(DomainError):
    code = "INVALID_DATE_RANGE"
    error = "Invalid date range"

    def __init__(self, message: str = "End date cannot be before start date") -> None:
        super().__init__(message)


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    error = "Not found"


def error_body(
    *,
    error: str,
    message: str,
    code: str,
    details: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {"error": error, "message": message, "code": code}
    if details:
        body["details"] = details
    return body


def _field_name(location: tuple[Any, ...]) -> str:
    # ("query", "limit") -> "limit"; body locations keep their dotted path.
    parts = [str(part) for part in location[1:]] or [str(part) for part in location]
    return ".".join(parts)


def validation_details(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Flatten pydantic errors into one entry per failing field."""

    details: list[dict[str, Any]] = []
    for item in exc.errors():
        entry: dict[str, Any] = {
            "field": _field_name(tuple(item.get("loc", ()))),
            "location": item.get("loc", ("query",))[0],
            "message": item.get("msg", "Invalid value"),
        }
        if "input" in item and item["input"] is not None:
            entry["value"] = item["input"]
        details.append(entry)
    return details


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    LOGGER.info("Request rejected: %s (%s)", exc.message, exc.code)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(
            error=exc.error,
            message=exc.message,
            code=exc.code,
            details=exc.details,
        ),
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = validation_details(exc)
    LOGGER.info(
        "Validation failed for %s",
        ", ".join(entry["field"] for entry in details),
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(
            error="Validation failed",
            message="; ".join(f"{entry['field']}: {entry['message']}" for entry in details),
            code="VALIDATION_ERROR",
            details=details,
        ),
    )


async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        error, code = "Not found", "NOT_FOUND"
    else:
        error, code = "HTTP error", f"HTTP_{exc.status_code}"
    message = exc.detail if isinstance(exc.detail, str) else error
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(error=error, message=message, code=code),
        headers=getattr(exc, "headers", None),
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    LOGGER.exception("Database query failed", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(
            error="Internal Server Error",
            message="The data store failed to execute the query",
            code="DATABASE_ERROR",
        ),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled exception", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(
            error="Internal Server Error",
            message="Internal Server Error",
            code="INTERNAL_ERROR",
        ),
    )


def register_exception_handlers(app) -> None:
    """Attach the envelope renderers to ``app``."""

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)


__all__ = [
    "ApiError",
    "DomainError",
    "InvalidDateRangeError",
    "InvalidParameterError",
    "NotFoundError",
    "error_body",
    "register_exception_handlers",
    "validation_details",
]
