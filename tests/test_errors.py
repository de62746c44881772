"""Error envelope rendering for the remaining exception types."""
from fastapi import APIRouter
from fastapi.testclient import TestClient

from txseries.core.config import Settings
from txseries.core.errors import DomainError, error_body
from txseries.main import create_app


def _app_with_failing_routes(settings: Settings):
    app = create_app(settings)
    router = APIRouter()

    @router.get("/boom")
    async def boom() -> None:
        raise RuntimeError("secret internals")

    @router.get("/domain")
    async def domain() -> None:
        raise DomainError("Nope", details=[{"field": "x", "message": "bad"}])

    app.include_router(router)
    return app


def test_unhandled_exception_returns_generic_envelope(settings: Settings) -> None:
    app = _app_with_failing_routes(settings)

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/boom")

    assert response.status_code == 500
    assert response.json() == {
        "error": "Internal Server Error",
        "message": "Internal Server Error",
        "code": "INTERNAL_ERROR",
    }


def test_domain_error_keeps_details(settings: Settings) -> None:
    app = _app_with_failing_routes(settings)

    with TestClient(app) as client:
        response = client.get("/domain")

    assert response.status_code == 400
    assert response.json() == {
        "error": "Bad Request",
        "message": "Nope",
        "code": "BAD_REQUEST",
        "details": [{"field": "x", "message": "bad"}],
    }


def test_error_body_omits_empty_details() -> None:
    assert error_body(error="E", message="M", code="C", details=[]) == {
        "error": "E",
        "message": "M",
        "code": "C",
    }
