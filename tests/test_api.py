"""
Tests for the HTTP layer in `api/`.

The Supabase-backed repository functions are replaced with in-memory fakes, so
these tests exercise request parsing, status codes and response shapes only.

Covers contract rules:
- Unknown platforms and sales are 404, malformed ranges are 400.
- Dates arrive as YYYY-MM-DD or timestamp strings and are read as local dates.
- A plan that is not accepted is never committed (409).
"""

from __future__ import annotations

import sys
import types
from typing import List

import pytest
from fastapi.testclient import TestClient

from domain.platform import PlatformRule, PlatformRuleTable
from domain.sale import Sale
from services.commit_service import CommitResult

RULES = PlatformRuleTable.of([
    PlatformRule(platform_id="steam", cooldown_days=30, name="Steam"),
    PlatformRule(platform_id="epic", cooldown_days=14, name="Epic"),
])

SALES: List[Sale] = [
    Sale.from_iso("a", "p1", "steam", "2024-01-01", "2024-01-10"),
    Sale.from_iso("b", "p1", "steam", "2024-02-15", "2024-02-20"),
]


@pytest.fixture
def committed():
    return []


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch, committed) -> TestClient:
    fake_client = types.ModuleType("repositories.client")
    fake_client.supabase = None
    monkeypatch.setitem(sys.modules, "repositories.client", fake_client)
    monkeypatch.delenv("SCHEDULING_HORIZON_START", raising=False)

    from api.main import app
    from api.routers import sales

    def fake_commit(plan):
        committed.append(plan.writes())
        return CommitResult(sale_id=plan.candidate.sale_id, rows_written=len(plan.writes()), shifted_count=plan.shift_count)

    monkeypatch.setattr(sales, "get_platform_rule", RULES.get)
    monkeypatch.setattr(sales, "load_platform_rules", lambda: RULES)
    monkeypatch.setattr(
        sales,
        "list_lane_sales",
        lambda product_id, platform_id: [s for s in SALES if s.lane == (product_id, platform_id)],
    )
    monkeypatch.setattr(sales, "list_product_sales", lambda product_id: [s for s in SALES if s.product_id == product_id])
    monkeypatch.setattr(sales, "get_sale_by_id", lambda sale_id: next((s for s in SALES if s.sale_id == sale_id), None))
    monkeypatch.setattr(sales, "commit_move", fake_commit)

    return TestClient(app)


def _body(**overrides):
    body = {
        "sale_id": "b",
        "product_id": "p1",
        "platform_id": "steam",
        "start_date": "2024-01-11",
        "end_date": "2024-01-20",
    }
    body.update(overrides)
    return body


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_validate_reports_cooldown_conflict(client: TestClient) -> None:
    response = client.post("/api/v1/sales/validate", json=_body())

    assert response.status_code == 200
    data = response.json()
    assert data["valid"] is False
    assert data["conflict"] == "cooldown_conflict"
    assert data["conflicting_sale_id"] == "a"
    assert "2024-02-09" in data["reason"]


def test_validate_accepts_timestamp_dates(client: TestClient) -> None:
    response = client.post(
        "/api/v1/sales/validate",
        json=_body(start_date="2024-02-10T00:00:00.000Z", end_date="2024-02-14T23:00:00-05:00"),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["valid"] is True
    assert data["cooldown_end"] == "2024-03-15"


def test_validate_unknown_platform_is_404(client: TestClient) -> None:
    response = client.post("/api/v1/sales/validate", json=_body(platform_id="gog"))

    assert response.status_code == 404


def test_validate_inverted_range_is_400(client: TestClient) -> None:
    response = client.post("/api/v1/sales/validate", json=_body(start_date="2024-01-20", end_date="2024-01-11"))

    assert response.status_code == 400


def test_plan_move_returns_shifts(client: TestClient) -> None:
    response = client.post(
        "/api/v1/sales/plan-move",
        json=_body(sale_id="a", start_date="2024-01-20", end_date="2024-01-29"),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "accepted"
    assert data["shifts"] == [
        {
            "sale_id": "b",
            "old_start_date": "2024-02-15",
            "old_end_date": "2024-02-20",
            "new_start_date": "2024-02-29",
            "new_end_date": "2024-03-05",
            "shift_days": 14,
        }
    ]
    assert data["notice"] is not None


def test_plan_move_respects_horizon(client: TestClient) -> None:
    response = client.post(
        "/api/v1/sales/plan-move",
        json=_body(sale_id="b", start_date="2024-02-05", end_date="2024-02-10", horizon_start="2024-01-01"),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "cascade_infeasible"
    assert data["accepted"] is False
    assert data["conflicting_sale_id"] == "a"


def test_commit_move_requires_sale_id(client: TestClient, committed) -> None:
    response = client.post("/api/v1/sales/commit-move", json=_body(sale_id=None))

    assert response.status_code == 400
    assert committed == []


def test_commit_move_rejected_plan_is_409(client: TestClient, committed) -> None:
    response = client.post(
        "/api/v1/sales/commit-move",
        json=_body(sale_id="b", start_date="2024-01-08", end_date="2024-01-12"),
    )

    assert response.status_code == 409
    assert "Direct overlap" in response.json()["detail"]
    assert committed == []


def test_commit_move_persists_accepted_plan(client: TestClient, committed) -> None:
    response = client.post(
        "/api/v1/sales/commit-move",
        json=_body(sale_id="a", start_date="2024-01-20", end_date="2024-01-29"),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["rows_written"] == 2
    assert data["shifted_count"] == 1
    assert len(committed) == 1


def test_duplicate_preview(client: TestClient) -> None:
    response = client.post(
        "/api/v1/sales/a/duplicate-preview",
        json={"target_platform_ids": ["epic", "gog"]},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["source_sale_id"] == "a"
    assert [t["platform_id"] for t in data["targets"]] == ["steam", "epic", "gog"]
    assert data["targets"][0]["start_date"] == "2024-02-10"
    # The dated copy lands on sale b.
    assert data["targets"][0]["valid"] is False
    assert data["targets"][2]["reason"] == "Platform not found: gog"
    assert data["valid_count"] == 1


def test_duplicate_preview_unknown_sale_is_404(client: TestClient) -> None:
    response = client.post("/api/v1/sales/zzz/duplicate-preview", json={})

    assert response.status_code == 404


def test_unknown_platform_body_uses_error_shape(client: TestClient) -> None:
    response = client.post("/api/v1/sales/plan-move", json=_body(platform_id="gog"))

    assert response.status_code == 404
    assert response.json() == {"error": "Not found", "detail": "Platform not found: gog", "status_code": 404}


def test_health_reports_horizon(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SCHEDULING_HORIZON_START", "2024-01-01")

    assert client.get("/health").json()["horizon_start"] == "2024-01-01"


@pytest.mark.parametrize("bad_date", [20240111, ["2024-01-11"], "2024-1-11"])
def test_non_string_or_unpadded_date_is_422(client: TestClient, bad_date) -> None:
    """Verify a date that is not a YYYY-MM-DD string is a validation error, not a server error."""

    response = client.post("/api/v1/sales/validate", json=_body(start_date=bad_date))

    assert response.status_code == 422


def test_malformed_platform_row_is_reported_as_500(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    """Verify a platform row that fails mapping comes back as an HTTP error with its message."""

    from api.routers import sales

    def broken_rule(platform_id):
        raise ValueError("'flash' is not a valid SaleKind")

    monkeypatch.setattr(sales, "get_platform_rule", broken_rule)

    for path in ("/api/v1/sales/validate", "/api/v1/sales/plan-move"):
        response = client.post(path, json=_body())

        assert response.status_code == 500
        assert "not a valid SaleKind" in response.json()["detail"]
