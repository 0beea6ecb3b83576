import hashlib
import hmac
import json
import time
from decimal import Decimal

import stripe

from app.core.config import settings
from app.deps import get_checkout_service
from app.main import app
from app.services.checkout import CheckoutService
from tests.mocks import FakeStripeSessions


def test_create_session_success(client, fake_stripe):
    resp = client.post("/api/checkout/create-session", json={"plan": "premium", "billing": "monthly"})
    assert resp.status_code == 200
    assert resp.json() == {"sessionId": "cs_test_123", "url": "https://checkout.stripe.com/c/pay/cs_test_123"}
    assert fake_stripe.created[0]["line_items"][0]["price"] == "price_Premium_Monthly_490"


def test_create_session_alternate_body(client, fake_stripe):
    resp = client.post("/api/checkout/create-session", json={"planId": "elite", "billingInterval": "yearly"})
    assert resp.status_code == 200
    assert fake_stripe.created[0]["metadata"]["plan"] == "elite"


def test_create_session_by_price_id(client, fake_stripe):
    resp = client.post("/api/checkout/create-session", json={"priceId": "price_Elite_Monthly_1990"})
    assert resp.status_code == 200
    assert fake_stripe.created[0]["metadata"]["billing"] == "monthly"


def test_missing_fields_is_client_error(client, fake_stripe):
    resp = client.post("/api/checkout/create-session", json={"plan": "premium"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Plan and billing type are required"}
    assert fake_stripe.created == []


def test_unknown_plan_is_client_error(client, fake_stripe):
    resp = client.post("/api/checkout/create-session", json={"plan": "gold", "billing": "monthly"})
    assert resp.status_code == 400
    assert "gold" in resp.json()["error"]


def test_unknown_interval_is_client_error(client, fake_stripe):
    resp = client.post("/api/checkout/create-session", json={"plan": "elite", "billing": "weekly"})
    assert resp.status_code == 400
    assert "weekly" in resp.json()["error"]


def test_unknown_price_id_is_client_error(client, fake_stripe):
    resp = client.post("/api/checkout/create-session", json={"priceId": "price_nope"})
    assert resp.status_code == 400


def test_malformed_json_is_client_error(client):
    resp = client.post(
        "/api/checkout/create-session", content="not json", headers={"Content-Type": "application/json"}
    )
    assert resp.status_code == 400
    assert "error" in resp.json()


def test_not_configured_is_server_error(client):
    app.dependency_overrides[get_checkout_service] = lambda: CheckoutService("")
    resp = client.post("/api/checkout/create-session", json={"plan": "premium", "billing": "monthly"})
    assert resp.status_code == 500
    assert "not configured" in resp.json()["error"]


def test_provider_failure_is_server_error(client, monkeypatch):
    sessions = FakeStripeSessions(error=stripe.InvalidRequestError("No such price", "price"))
    monkeypatch.setattr(stripe.checkout.Session, "create", sessions.create)
    resp = client.post("/api/checkout/create-session", json={"plan": "premium", "billing": "yearly"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}


def test_plans_listing(client):
    resp = client.get("/api/checkout/plans", params={"plan": "elite"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["selectedPlan"] == "elite"
    elite = body["plans"][1]
    assert elite["monthly"]["priceId"] == "price_Elite_Monthly_1990"
    assert elite["monthly"]["currency"] == "EUR"
    assert float(elite["monthly"]["price"]) == 19.90
    assert float(elite["yearly"]["price"]) == 199.90


def test_plans_listing_defaults_to_premium(client):
    assert client.get("/api/checkout/plans", params={"plan": "gold"}).json()["selectedPlan"] == "premium"


def test_ui_prices_match_session_metadata(client, fake_stripe):
    plans = {p["id"]: p for p in client.get("/api/checkout/plans").json()["plans"]}
    for plan_id in ("premium", "elite"):
        for billing in ("monthly", "yearly"):
            client.post("/api/checkout/create-session", json={"plan": plan_id, "billing": billing})
            sent = fake_stripe.created[-1]["metadata"]["price"]
            assert Decimal(sent) == Decimal(str(plans[plan_id][billing]["price"]))


def test_success_verified(client, fake_stripe):
    resp = client.get("/api/checkout/success", params={"session_id": "cs_test_123"})
    assert resp.json() == {
        "sessionId": "cs_test_123",
        "verified": True,
        "status": "complete",
        "plan": "elite",
        "billing": "yearly",
    }


def test_success_unverified_when_open(client, fake_stripe):
    fake_stripe.status = "open"
    assert client.get("/api/checkout/success", params={"session_id": "cs_test_123"}).json()["verified"] is False


def test_success_unverified_without_stripe(client):
    app.dependency_overrides[get_checkout_service] = lambda: CheckoutService("")
    body = client.get("/api/checkout/success", params={"session_id": "cs_x"}).json()
    assert body["verified"] is False
    assert body["sessionId"] == "cs_x"


def test_webhook_not_configured(client, monkeypatch):
    monkeypatch.setattr(settings, "stripe_webhook_secret", "")
    resp = client.post("/api/checkout/webhook", content=b"{}", headers={"Stripe-Signature": "t=1,v1=x"})
    assert resp.status_code == 500


def test_webhook_resolves_plan(client, monkeypatch):
    monkeypatch.setattr(settings, "stripe_webhook_secret", "whsec_test")
    payload = json.dumps(
        {
            "id": "evt_1",
            "type": "checkout.session.completed",
            "data": {"object": {"id": "cs_1", "metadata": {"plan": "premium", "billing": "monthly"}}},
        }
    )
    timestamp = int(time.time())
    digest = hmac.new(b"whsec_test", f"{timestamp}.{payload}".encode(), hashlib.sha256).hexdigest()
    resp = client.post(
        "/api/checkout/webhook",
        content=payload.encode(),
        headers={"Stripe-Signature": f"t={timestamp},v1={digest}", "Content-Type": "application/json"},
    )
    assert resp.status_code == 200
    assert resp.json() == {
        "received": True,
        "eventType": "checkout.session.completed",
        "plan": "premium",
        "billing": "monthly",
    }


def test_webhook_bad_signature(client, monkeypatch):
    monkeypatch.setattr(settings, "stripe_webhook_secret", "whsec_test")
    resp = client.post("/api/checkout/webhook", content=b'{"id": "e", "type": "t"}', headers={"Stripe-Signature": "t=1,v1=00"})
    assert resp.status_code == 400


def test_webhook_event_without_session_is_acknowledged(client, monkeypatch):
    monkeypatch.setattr(settings, "stripe_webhook_secret", "whsec_test")
    payload = json.dumps({"id": "evt_4", "type": "checkout.session.completed"})
    timestamp = int(time.time())
    digest = hmac.new(b"whsec_test", f"{timestamp}.{payload}".encode(), hashlib.sha256).hexdigest()
    resp = client.post(
        "/api/checkout/webhook",
        content=payload.encode(),
        headers={"Stripe-Signature": f"t={timestamp},v1={digest}", "Content-Type": "application/json"},
    )
    assert resp.status_code == 200
    assert resp.json() == {
        "received": True,
        "eventType": "checkout.session.completed",
        "plan": None,
        "billing": None,
    }
