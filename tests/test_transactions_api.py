"""End-to-end HTTP behaviour of the transaction routes."""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import create_autospec

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from tests.factories import SEED_HASHES
from txseries.dependencies import get_transaction_repository
from txseries.repositories import TimeBucketRow, TransactionRepository
from txseries.schemas.transactions import TimeInterval


@pytest.fixture()
def stub_repository(app) -> TransactionRepository:
    repository = create_autospec(TransactionRepository, instance=True)
    app.dependency_overrides[get_transaction_repository] = lambda: repository
    return repository


def test_list_first_page(client: TestClient) -> None:
    response = client.get("/api/transactions", params={"limit": 2, "offset": 0})

    assert response.status_code == 200
    body = response.json()
    assert [row["hash"] for row in body["rows"]] == SEED_HASHES[:2]
    assert body["totalCount"] == 5
    assert body["pagination"] == {
        "limit": 2,
        "offset": 0,
        "currentPage": 1,
        "totalPages": 3,
    }
    assert response.headers["X-Total-Count"] == "5"
    assert response.headers["X-Total-Pages"] == "3"
    assert response.headers["X-Current-Page"] == "1"
    assert response.headers["X-Per-Page"] == "2"


def test_list_defaults(client: TestClient) -> None:
    body = client.get("/api/transactions").json()

    assert body["pagination"]["limit"] == 25
    assert body["pagination"]["offset"] == 0
    assert len(body["rows"]) == 5


def test_rows_render_numeric_columns_as_strings(client: TestClient) -> None:
    row = client.get("/api/transactions", params={"limit": 1}).json()["rows"][0]

    assert row["hash"] == "ffee0005aa"
    assert row["block_id"] == 840_005
    assert Decimal(row["output_total"]) == Decimal("1.25")
    assert Decimal(row["output_total_usd"]) == Decimal("80000")
    assert Decimal(row["fee"]) == Decimal("0.00012")
    assert row["size"] == 250
    assert datetime.fromisoformat(row["time"]).replace(tzinfo=None) == datetime(2024, 1, 3, 23, 59, 59)


def test_offset_past_the_end_returns_empty_rows(client: TestClient) -> None:
    response = client.get("/api/transactions", params={"limit": 10, "offset": 50})

    assert response.status_code == 200
    body = response.json()
    assert body["rows"] == []
    assert body["totalCount"] == 5
    assert body["pagination"]["totalPages"] == 1


def test_huge_offset_past_the_end_returns_empty_rows(client: TestClient) -> None:
    response = client.get("/api/transactions", params={"limit": 10, "offset": 10**12})

    assert response.status_code == 200
    assert response.json()["rows"] == []
    assert response.headers["X-Current-Page"] == str(10**11 + 1)


@pytest.mark.parametrize("path", ["/api/transactions", "/api/transactions/range"])
def test_offset_beyond_64_bits_is_a_validation_error(
    client: TestClient, stub_repository, path: str
) -> None:
    params = {"limit": 10, "offset": str(2**64), "start": "2024-01-01", "end": "2024-01-03"}

    response = client.get(path, params=params)

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert [detail["field"] for detail in body["details"]] == ["offset"]
    stub_repository.fetch_transactions.assert_not_called()


def test_invalid_paging_reports_every_field(client: TestClient, stub_repository) -> None:
    response = client.get("/api/transactions", params={"limit": 0, "offset": -1})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation failed"
    assert body["code"] == "VALIDATION_ERROR"
    assert {detail["field"] for detail in body["details"]} == {"limit", "offset"}
    stub_repository.fetch_transactions.assert_not_called()
    stub_repository.count.assert_not_called()


@pytest.mark.parametrize("limit", ["101", "abc", "1.5"])
def test_out_of_range_or_non_integer_limit(client: TestClient, limit: str) -> None:
    response = client.get("/api/transactions", params={"limit": limit})

    assert response.status_code == 400
    assert [detail["field"] for detail in response.json()["details"]] == ["limit"]


def test_range_returns_inclusive_window(client: TestClient) -> None:
    response = client.get(
        "/api/transactions/range",
        params={"start": "2024-01-02", "end": "2024-01-03", "limit": 2},
    )

    assert response.status_code == 200
    body = response.json()
    assert [row["hash"] for row in body["rows"]] == ["ffee0005aa", "ABCD0004ff"]
    assert body["totalCount"] == 3
    assert body["pagination"]["totalPages"] == 2
    assert response.headers["X-Total-Count"] == "3"
    assert response.headers["X-Per-Page"] == "2"


def test_range_with_end_before_start_is_a_domain_error(client: TestClient, stub_repository) -> None:
    response = client.get(
        "/api/transactions/range", params={"start": "2024-01-03", "end": "2024-01-01"}
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Invalid date range"
    assert body["message"] == "End date cannot be before start date"
    assert body["code"] == "INVALID_DATE_RANGE"
    stub_repository.fetch_transactions.assert_not_called()
    stub_repository.count.assert_not_called()


def test_range_requires_both_dates(client: TestClient) -> None:
    response = client.get("/api/transactions/range", params={"end": "not-a-date"})

    assert response.status_code == 400
    assert {detail["field"] for detail in response.json()["details"]} == {"start", "end"}


def test_by_time_rejects_unknown_interval(client: TestClient, stub_repository) -> None:
    response = client.get("/api/transactions/by-time", params={"interval": "3 hours"})

    assert response.status_code == 400
    body = response.json()
    assert body["details"][0]["field"] == "interval"
    for allowed in TimeInterval.values():
        assert f"'{allowed}'" in body["details"][0]["message"]
    stub_repository.fetch_time_buckets.assert_not_called()


def test_by_time_returns_bucket_array(client: TestClient, stub_repository) -> None:
    stub_repository.fetch_time_buckets.return_value = [
        TimeBucketRow(
            bucket=datetime(2024, 1, 3, 23),
            transaction_count=1,
            total_volume=Decimal("1.25"),
            avg_fee=Decimal("0.00012"),
            max_transaction=Decimal("1.25"),
            min_transaction=Decimal("1.25"),
        ),
        TimeBucketRow(
            bucket=datetime(2024, 1, 3, 8),
            transaction_count=1,
            total_volume=Decimal("0.5"),
            avg_fee=Decimal("0.0002"),
            max_transaction=Decimal("0.5"),
            min_transaction=Decimal("0.5"),
        ),
    ]

    response = client.get(
        "/api/transactions/by-time", params={"interval": "1 hour", "limit": 5}
    )

    assert response.status_code == 200
    buckets = response.json()
    assert len(buckets) <= 5
    assert all(bucket["transaction_count"] >= 0 for bucket in buckets)
    stamps = [datetime.fromisoformat(bucket["bucket"]) for bucket in buckets]
    assert stamps == sorted(stamps, reverse=True)
    assert buckets[0]["total_volume"] == "1.25"
    statement = stub_repository.fetch_time_buckets.call_args.args[0]
    assert "time_bucket" in str(statement)


def test_search_is_case_insensitive(client: TestClient) -> None:
    response = client.get("/api/transactions/search", params={"term": "ABCD"})

    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"rows", "totalCount"}
    assert [row["hash"] for row in body["rows"]] == ["ABCD0004ff", "abcd0003ee"]
    assert body["totalCount"] == 2
    assert response.headers["X-Total-Count"] == "2"


def test_search_limit_caps_rows_not_total(client: TestClient) -> None:
    body = client.get("/api/transactions/search", params={"term": "abcd", "limit": 1}).json()

    assert len(body["rows"]) == 1
    assert body["totalCount"] == 2


@pytest.mark.parametrize("term", ["", "a", "ab"])
def test_short_search_term_is_rejected(client: TestClient, stub_repository, term: str) -> None:
    response = client.get("/api/transactions/search", params={"term": term})

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "term"
    stub_repository.fetch_transactions.assert_not_called()


def test_lookup_by_hash(client: TestClient) -> None:
    response = client.get("/api/transaction/9999000200")

    assert response.status_code == 200
    assert response.json()["hash"] == "9999000200"


def test_unknown_hash_is_not_found(client: TestClient) -> None:
    response = client.get("/api/transaction/deadbeef")

    assert response.status_code == 404
    body = response.json()
    assert body["code"] == "NOT_FOUND"
    assert body["error"] == "Not found"
    assert "deadbeef" in body["message"]


def test_data_store_failure_maps_to_generic_500(client: TestClient, stub_repository) -> None:
    stub_repository.fetch_transactions.return_value = []
    stub_repository.count.side_effect = OperationalError(
        "SELECT count(*) FROM transactions", {}, Exception("connection refused")
    )

    response = client.get("/api/transactions")

    assert response.status_code == 500
    body = response.json()
    assert body["code"] == "DATABASE_ERROR"
    assert "rows" not in body
    assert "SELECT" not in body["message"]


def test_unknown_route_uses_error_envelope(client: TestClient) -> None:
    response = client.get("/api/nothing-here")

    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_health(client: TestClient) -> None:
    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["timestamp"].startswith(str(datetime.now(timezone.utc).year))


def test_security_and_request_id_headers(client: TestClient) -> None:
    response = client.get("/api/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "SAMEORIGIN"
    assert response.headers["X-Request-ID"] == "req-123"
