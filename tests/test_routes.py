"""
Pytest tests for the Graphite Trust Gateway HTTP API.

Uses FastAPI TestClient with the in-memory trust provider from conftest.
"""

from __future__ import annotations

from graphite_trust.models import NetworkStats

from .conftest import ALICE, BOB, SIGNER


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "healthy"
    assert data["node_connected"] is True


def test_root(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["service"] == "Graphite Trust Gateway"


def test_trust_profile(client, provider):
    provider.set_account(ALICE, activated=True, reputation=500, kyc_level=1)

    r = client.get(f"/trust-profile/{ALICE}")

    assert r.status_code == 200
    data = r.json()
    assert data["trust_level"] == "Good"
    assert data["eligible_features"] == ["Basic Trading", "Lending", "Borrowing", "Premium Rates"]


def test_trust_profile_invalid_address(client):
    r = client.get("/trust-profile/not-an-address")
    assert r.status_code == 400
    assert r.json()["detail"]["error"] == "invalid_address"


def test_provider_error_is_502(client, provider):
    provider.fail_on = "get_kyc_level"

    r = client.get(f"/trust-profile/{ALICE}")

    assert r.status_code == 502
    data = r.json()
    assert data["error"] == "provider_error"
    assert data["message"] == "execution reverted"
    assert data["details"]["operation"] == "get_kyc_level"


def test_missing_trust_client_is_503(client):
    client.app.state.trust_client = None

    r = client.get(f"/trust-profile/{ALICE}")

    assert r.status_code == 503
    assert r.json()["error"] == "not_initialized"


def test_lending_assessment(client, provider):
    provider.set_account(ALICE, activated=True, reputation=600, kyc_level=1)

    r = client.get(f"/lending/assessment/{ALICE}", params={"amount": "5000"})

    assert r.status_code == 200
    data = r.json()
    assert data["eligible"] is True
    assert data["interest_rate_display"] == "4.50%"
    assert data["risk_level"] == "Medium"


def test_lending_assessment_rejects_non_positive_amount(client):
    r = client.get(f"/lending/assessment/{ALICE}", params={"amount": "-5"})
    assert r.status_code == 400
    assert r.json()["error"] == "validation_error"


def test_loan_application_inactive(client):
    r = client.post("/lending/applications", json={"borrower": BOB, "amount": "1000", "purpose": "Inventory"})

    assert r.status_code == 200
    data = r.json()
    assert data["purpose"] == "Inventory"
    assert data["assessment"]["eligible"] is False
    assert data["assessment"]["reason"] == "Account must be activated"


def test_marketplace_assessment(client, provider):
    provider.set_account(ALICE, activated=True, reputation=800, kyc_level=2)

    r = client.get(f"/marketplace/assessment/{ALICE}")

    assert r.status_code == 200
    data = r.json()
    assert data["seller_badge"] == "Trusted Seller"
    assert data["can_sell_high_value"] is True
    assert data["max_listing_display"] == "Unlimited"


def test_create_listing_restricted(client, provider):
    provider.set_account(ALICE, activated=True, reputation=300, kyc_level=1)

    r = client.post("/marketplace/listings", json={"seller": ALICE, "item_name": "Luxury Car", "item_value": "15000"})

    assert r.status_code == 200
    data = r.json()
    assert data["success"] is False
    assert data["reason"] == "Verification required for high-value items"


def test_activate_account(client, provider):
    r = client.post("/account/activate")

    assert r.status_code == 200
    assert r.json()["success"] is True
    assert provider.accounts[SIGNER.lower()]["activated"] is True


def test_activate_account_failure_is_structured(client, provider):
    provider.fail_on = "activate_account"

    r = client.post("/account/activate")

    assert r.status_code == 200
    data = r.json()
    assert data["success"] is False
    assert data["error"]


def test_fees(client, provider):
    r = client.get("/fees/activation")
    assert r.status_code == 200
    assert r.json()["fee"] == provider.activation_fee

    r = client.get("/fees/kyc/2")
    assert r.status_code == 200
    assert r.json() == {"operation": "kyc", "level": 2, "fee": provider.kyc_fees[2]}

    r = client.get("/fees/kyc/5")
    assert r.status_code == 400


def test_kyc_request_and_status(client):
    r = client.post("/kyc/requests", json={"level": 1})
    assert r.status_code == 200
    assert r.json()["success"] is True

    r = client.get("/kyc/status")
    assert r.status_code == 200
    data = r.json()
    assert data["current_level"] == 0
    assert data["last_request"]["level"] == 1


def test_kyc_request_invalid_level(client):
    r = client.post("/kyc/requests", json={"level": 4})
    assert r.status_code == 400


def test_network_stats(client, trust_client, monkeypatch):
    r = client.get("/network-stats")
    assert r.status_code == 404

    monkeypatch.setattr(trust_client, "get_network_stats", lambda: NetworkStats(latest_block=4242))
    r = client.get("/network-stats")
    assert r.status_code == 200
    assert r.json() == {"latest_block": 4242}
