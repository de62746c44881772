from fastapi.testclient import TestClient

from txseries.core.config import Settings
from txseries.dependencies import get_session_factory
from txseries.main import create_app
from txseries.middleware.rate_limit import RATE_LIMIT_MESSAGE, FixedWindowRateLimiter


class _Clock:
    def __init__(self) -> None:
        self.now = 1_000.0

    def __call__(self) -> float:
        return self.now


def test_fixed_window_counts_per_key() -> None:
    clock = _Clock()
    limiter = FixedWindowRateLimiter(2, 900, clock=clock)

    first = limiter.hit("10.0.0.1")
    second = limiter.hit("10.0.0.1")
    third = limiter.hit("10.0.0.1")
    other = limiter.hit("10.0.0.2")

    assert (first.allowed, first.remaining) == (True, 1)
    assert (second.allowed, second.remaining) == (True, 0)
    assert third.allowed is False
    assert other.allowed is True
    assert third.reset_after == 900


def test_window_resets_after_expiry() -> None:
    clock = _Clock()
    limiter = FixedWindowRateLimiter(1, 60, clock=clock)

    assert limiter.hit("client").allowed is True
    clock.now += 30
    blocked = limiter.hit("client")
    assert blocked.allowed is False
    assert blocked.reset_after == 30

    clock.now += 30
    assert limiter.hit("client").allowed is True


def test_middleware_rejects_requests_over_quota(settings: Settings, session_factory) -> None:
    settings.rate_limit.enabled = True
    settings.rate_limit.max_requests = 2
    app = create_app(settings)
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    with TestClient(app) as client:
        responses = [client.get("/api/health") for _ in range(3)]

    assert [response.status_code for response in responses] == [200, 200, 429]
    assert responses[0].headers["RateLimit-Limit"] == "2"
    assert responses[1].headers["RateLimit-Remaining"] == "0"
    blocked = responses[2]
    assert blocked.json() == {
        "error": "Too Many Requests",
        "message": RATE_LIMIT_MESSAGE,
        "code": "RATE_LIMITED",
    }
    assert "Retry-After" in blocked.headers
    assert blocked.headers["X-Content-Type-Options"] == "nosniff"


def test_middleware_ignores_paths_outside_the_api(settings: Settings) -> None:
    settings.rate_limit.enabled = True
    settings.rate_limit.max_requests = 1
    app = create_app(settings)

    with TestClient(app) as client:
        statuses = [client.get("/openapi.json").status_code for _ in range(3)]

    assert statuses == [200, 200, 200]
