"""API tests for remittance, denial, eligibility, revenue and health routes.
"""

from __future__ import annotations

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from revcycle import __version__
from revcycle.api.deps import get_service
from revcycle.api.main import app

client = TestClient(app)

CLAIM_PAYLOAD = {
    "patient_id": "pat-001",
    "patient_name": "Marie Dubois",
    "member_id": "MBR-123456",
    "payer_id": "payer-001",
    "provider_id": "prov-001",
    "provider_name": "Dr. Martin",
    "date_of_service": "2026-02-20",
    "place_of_service": "11",
    "diagnoses": [{"code": "J06.9", "is_principal": True}],
    "procedures": [
        {"code": "99213", "unit_price": "100.00"},
        {"code": "87880", "unit_price": "250.00"},
    ],
}


@pytest.fixture(autouse=True)
def use_test_service(service):
    """Route every request to the per-test service."""
    app.dependency_overrides[get_service] = lambda: service
    yield
    app.dependency_overrides.clear()


def _submitted_claim() -> dict:
    claim = client.post("/api/v1/claims", json=CLAIM_PAYLOAD).json()
    client.post(f"/api/v1/claims/{claim['id']}/validate")
    return client.post(f"/api/v1/claims/{claim['id']}/submit").json()


def _post_remittance(lines: list[dict], payment_amount: str = "0", **extra):
    return client.post(
        "/api/v1/remittances",
        json={
            "remittance_number": "ERA-0001",
            "payer_id": "payer-001",
            "payment_amount": payment_amount,
            "claim_payments": lines,
            **extra,
        },
    )


def _deny(claim: dict) -> dict:
    _post_remittance(
        [
            {
                "claim_number": claim["claim_number"],
                "status": "denied",
                "adjustments": [{"code": "CO-50", "group": "CO", "amount": "350"}],
            }
        ]
    )
    return client.get("/api/v1/denials").json()[0]


# =============================================================================
# Remittances
# =============================================================================


@pytest.mark.api
def test_post_partial_payment():
    claim = _submitted_claim()

    response = _post_remittance(
        [
            {
                "claim_number": claim["claim_number"],
                "allowed_amount": "350",
                "paid_amount": "300",
                "status": "partial",
            }
        ],
        payment_amount="300",
    )

    assert response.status_code == 201
    remittance = response.json()
    assert remittance["status"] == "processed"
    assert remittance["claim_payments"][0]["posting_result"] == "applied"
    assert Decimal(remittance["posted_amount"]) == Decimal("300")

    posted = client.get(f"/api/v1/claims/{claim['id']}").json()
    assert posted["status"] == "partial_paid"
    assert Decimal(posted["paid_amount"]) == Decimal("300")


@pytest.mark.api
def test_unmatched_line_is_reported():
    response = _post_remittance(
        [{"claim_number": "CLM-209901-999999", "paid_amount": "50", "status": "paid"}],
        payment_amount="50",
    )

    body = response.json()
    assert response.status_code == 201
    assert body["status"] == "exception"
    assert body["exceptions"][0]["posting_result"] == "unmatched"
    assert Decimal(body["unapplied_amount"]) == Decimal("50")


@pytest.mark.api
def test_remittance_unknown_payer_returns_404():
    assert _post_remittance([], payer_id="payer-999").status_code == 404


@pytest.mark.api
def test_get_and_list_remittances():
    created = _post_remittance([]).json()

    assert client.get(f"/api/v1/remittances/{created['id']}").json()["id"] == created["id"]
    assert [r["id"] for r in client.get("/api/v1/remittances").json()] == [created["id"]]
    assert client.get("/api/v1/remittances", params={"payer_id": "payer-002"}).json() == []
    assert client.get("/api/v1/remittances/missing").status_code == 404


# =============================================================================
# Denials & Appeals
# =============================================================================


@pytest.mark.api
def test_denied_remittance_opens_denial():
    claim = _submitted_claim()
    denial = _deny(claim)

    assert denial["claim_id"] == claim["id"]
    assert denial["category"] == "clinical"
    assert denial["status"] == "new"
    assert denial["denial_codes"] == ["CO-50"]
    assert client.get(f"/api/v1/denials/{denial['id']}").status_code == 200
    assert client.get("/api/v1/denials", params={"category": "technical"}).json() == []


@pytest.mark.api
def test_appeal_flow():
    claim = _submitted_claim()
    denial = _deny(claim)

    filed = client.post(
        f"/api/v1/denials/{denial['id']}/appeals",
        json={"level": "first", "reason": "Medically necessary", "supporting_docs": ["notes.pdf"]},
    )
    assert filed.status_code == 201
    assert filed.json()["status"] == "appealing"
    appeal = filed.json()["appeals"][0]
    assert appeal["status"] == "pending"
    assert client.get(f"/api/v1/claims/{claim['id']}").json()["status"] == "appealed"

    conflict = client.post(
        f"/api/v1/denials/{denial['id']}/appeals",
        json={"level": "second", "reason": "Escalate"},
    )
    assert conflict.status_code == 409

    decided = client.post(
        f"/api/v1/denials/{denial['id']}/appeals/{appeal['id']}/decision",
        json={"decision": "approved", "details": "Overturned"},
    )
    assert decided.status_code == 200
    assert decided.json()["status"] == "resolved"
    assert decided.json()["resolution"]["type"] == "overturned"
    assert client.get(f"/api/v1/claims/{claim['id']}").json()["status"] == "processing"


@pytest.mark.api
def test_appeal_unknown_denial_returns_404():
    response = client.post(
        "/api/v1/denials/missing/appeals", json={"reason": "Medically necessary"}
    )
    assert response.status_code == 404


@pytest.mark.api
def test_review_and_write_off():
    denial = _deny(_submitted_claim())

    reviewed = client.post(
        f"/api/v1/denials/{denial['id']}/review", params={"assigned_to": "analyst-3"}
    )
    assert reviewed.json()["status"] == "in_review"
    assert reviewed.json()["assigned_to"] == "analyst-3"

    written_off = client.post(
        f"/api/v1/denials/{denial['id']}/write-off", json={"notes": "Below threshold"}
    )
    assert written_off.json()["status"] == "written_off"
    assert Decimal(written_off.json()["resolution"]["amount"]) == Decimal("350")

    again = client.post(f"/api/v1/denials/{denial['id']}/write-off", json={})
    assert again.status_code == 409


# =============================================================================
# Eligibility, Metrics & Health
# =============================================================================


@pytest.mark.api
def test_check_eligibility():
    response = client.post(
        "/api/v1/eligibility",
        json={
            "patient_id": "pat-001",
            "payer_id": "payer-001",
            "member_id": "MBR-123456",
            "date_of_service": "2026-03-02",
        },
    )

    assert response.status_code == 200
    assert response.json()["coverage_status"] == "active"
    assert response.json()["payer_name"] == "CPAM - Assurance Maladie"


@pytest.mark.api
def test_revenue_metrics():
    claim = _submitted_claim()
    _post_remittance(
        [{"claim_number": claim["claim_number"], "paid_amount": "280", "status": "partial"}],
        payment_amount="280",
    )

    response = client.get(
        "/api/v1/revenue/metrics",
        params={"from_date": "2026-02-01", "to_date": "2026-02-28"},
    )

    assert response.status_code == 200
    metrics = response.json()
    assert metrics["claim_count"] == 1
    assert Decimal(metrics["total_charges"]) == Decimal("350")
    assert metrics["collection_rate"] == pytest.approx(0.8)
    assert len(metrics["aging_buckets"]) == 5


@pytest.mark.api
def test_revenue_metrics_rejects_inverted_window():
    response = client.get(
        "/api/v1/revenue/metrics",
        params={"from_date": "2026-03-01", "to_date": "2026-02-01"},
    )
    assert response.status_code == 422


@pytest.mark.api
def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "service": "revcycle-api",
        "version": __version__,
    }


@pytest.mark.api
def test_detailed_health_reports_follow_up_queues():
    assert client.get("/health/detailed").json()["status"] == "healthy"

    _deny(_submitted_claim())
    _post_remittance(
        [{"claim_number": "CLM-209901-999999", "paid_amount": "50", "status": "paid"}],
        payment_amount="50",
    )

    body = client.get("/health/detailed").json()
    assert body["status"] == "degraded"
    assert body["checks"] == {"claims": 1, "remittance_exceptions": 1, "new_denials": 1}
