"""Tests for Razorpay create-order / verify / webhook"""
import hashlib
import hmac
import json
from unittest.mock import MagicMock, patch

import pytest
import razorpay

from resume_analyzer.app.core.config import settings
from resume_analyzer.app.models.payment import Payment
from resume_analyzer.app.services import payment_service

WEBHOOK_SECRET = "whsec_test"


@pytest.fixture(autouse=True)
def razorpay_settings(monkeypatch):
    monkeypatch.setattr(settings, "razorpay_key_id", "rzp_test_key")
    monkeypatch.setattr(settings, "razorpay_key_secret", "rzp_test_secret")
    monkeypatch.setattr(settings, "razorpay_webhook_secret", WEBHOOK_SECRET)


@pytest.fixture
def rzp_client():
    mock_client = MagicMock()
    mock_client.order.create.return_value = {"id": "order_123", "amount": 39900, "currency": "INR"}
    with patch("resume_analyzer.app.api.v1.payment.routes.get_razorpay_client", return_value=mock_client):
        yield mock_client


@pytest.fixture
def order(client, auth_headers, rzp_client):
    r = client.post("/api/payment/create-order", headers=auth_headers, json={"plan_id": "weekly"})
    assert r.status_code == 200
    return r.json()


@pytest.fixture
def pending_payment(db_session, test_user):
    """Order row as create-order leaves it; webhook tests verify real HMAC signatures."""
    return payment_service.record_order(db_session, test_user, "order_123", 39900, "weekly")


def sign(body: str) -> str:
    return hmac.new(WEBHOOK_SECRET.encode(), body.encode(), hashlib.sha256).hexdigest()


def post_webhook(client, event: dict, signature: str | None = None):
    body = json.dumps(event)
    return client.post(
        "/api/payment/webhook",
        content=body,
        headers={"Content-Type": "application/json", "X-Razorpay-Signature": signature or sign(body)},
    )


def captured_event(order_id="order_123", event="payment.captured"):
    return {
        "event": event,
        "payload": {"payment": {"entity": {"id": "pay_abc", "order_id": order_id, "status": "captured"}}},
    }


def test_create_order_records_payment(order, rzp_client, db_session, test_user):
    assert order == {"order_id": "order_123", "amount": 39900, "currency": "INR", "key_id": "rzp_test_key"}
    sent = rzp_client.order.create.call_args.kwargs["data"]
    assert sent["amount"] == 39900
    assert sent["notes"] == {"plan_id": "weekly", "user_id": str(test_user.id)}

    payment = db_session.query(Payment).one()
    assert payment.user_id == test_user.id
    assert payment.razorpay_order_id == "order_123"
    assert payment.payment_status == "created"
    assert payment.plan_id == "weekly"


def test_create_order_invalid_plan(client, auth_headers, rzp_client):
    r = client.post("/api/payment/create-order", headers=auth_headers, json={"plan_id": "yearly"})
    assert r.status_code == 400
    rzp_client.order.create.assert_not_called()


def test_create_order_gateway_not_configured(client, auth_headers, monkeypatch):
    monkeypatch.setattr(settings, "razorpay_key_secret", "")
    r = client.post("/api/payment/create-order", headers=auth_headers, json={"plan_id": "daily"})
    assert r.status_code == 503


def test_verify_marks_paid_and_upgrades(client, auth_headers, order, rzp_client, db_session, test_user):
    r = client.post(
        "/api/payment/verify",
        headers=auth_headers,
        json={
            "razorpay_order_id": "order_123",
            "razorpay_payment_id": "pay_abc",
            "razorpay_signature": "sig",
            "plan_id": "weekly",
        },
    )
    assert r.status_code == 200
    assert r.json()["success"] is True

    payment = db_session.query(Payment).one()
    db_session.refresh(payment)
    assert payment.payment_status == "paid"
    assert payment.razorpay_payment_id == "pay_abc"
    assert payment.razorpay_signature == "sig"
    db_session.refresh(test_user)
    assert test_user.subscription_tier == "weekly"


def test_verify_bad_signature(client, auth_headers, order, rzp_client, db_session):
    rzp_client.utility.verify_payment_signature.side_effect = razorpay.errors.SignatureVerificationError("bad")
    r = client.post(
        "/api/payment/verify",
        headers=auth_headers,
        json={
            "razorpay_order_id": "order_123",
            "razorpay_payment_id": "pay_abc",
            "razorpay_signature": "forged",
            "plan_id": "weekly",
        },
    )
    assert r.status_code == 400
    assert db_session.query(Payment).one().payment_status == "created"


def test_verify_unknown_order(client, auth_headers, rzp_client):
    r = client.post(
        "/api/payment/verify",
        headers=auth_headers,
        json={
            "razorpay_order_id": "order_missing",
            "razorpay_payment_id": "pay_abc",
            "razorpay_signature": "sig",
            "plan_id": "weekly",
        },
    )
    assert r.status_code == 404


def test_webhook_captured_upgrades_user(client, pending_payment, db_session, test_user):
    r = post_webhook(client, captured_event())
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
    db_session.expire_all()
    assert db_session.query(Payment).one().payment_status == "paid"
    assert db_session.get(type(test_user), test_user.id).subscription_tier == "weekly"


def test_webhook_failed_payment(client, pending_payment, db_session):
    r = post_webhook(client, captured_event(event="payment.failed"))
    assert r.json() == {"status": "ok"}
    db_session.expire_all()
    assert db_session.query(Payment).one().payment_status == "failed"


def test_webhook_failure_after_capture_keeps_paid(client, pending_payment, db_session):
    post_webhook(client, captured_event())
    post_webhook(client, captured_event(event="payment.failed"))
    db_session.expire_all()
    assert db_session.query(Payment).one().payment_status == "paid"


def test_webhook_unknown_order_is_acknowledged(client, pending_payment):
    r = post_webhook(client, captured_event(order_id="order_other"))
    assert r.status_code == 200
    assert r.json() == {"status": "ignored"}


def test_webhook_rejects_bad_signature(client, pending_payment, db_session):
    r = post_webhook(client, captured_event(), signature="0" * 64)
    assert r.status_code == 400
    assert db_session.query(Payment).one().payment_status == "created"


def test_webhook_missing_signature(client):
    r = client.post("/api/payment/webhook", content="{}", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
