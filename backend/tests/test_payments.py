from decimal import Decimal

import pytest
from django.core import mail

from scribe.exceptions import ScribeError
from scribe.models import Credits, Notification, Payment
from scribe.services.payment_service import PaymentService
from scribe.services.stripe_service import StripeService


@pytest.fixture
def fake_stripe(monkeypatch):
    created = []

    def create_payment_intent(self, amount_cents, metadata, receipt_email=None, currency="usd"):
        intent_id = f"pi_test_{len(created) + 1}"
        created.append({"id": intent_id, "amount": amount_cents, "metadata": metadata})
        return {"client_secret": f"{intent_id}_secret", "payment_intent_id": intent_id}

    monkeypatch.setattr(StripeService, "create_payment_intent", create_payment_intent)
    return created


def _post_event(client, monkeypatch, event):
    monkeypatch.setattr(StripeService, "construct_event", staticmethod(lambda payload, sig_header: event))
    return client.post(
        "/api/webhooks/stripe/",
        data="{}",
        content_type="application/json",
        HTTP_STRIPE_SIGNATURE="t=1,v1=signature",
    )


def _event(event_type, intent_id):
    return {
        "type": event_type,
        "data": {"object": {"id": intent_id, "amount": 1000, "currency": "usd", "status": "succeeded"}},
    }


@pytest.mark.parametrize(
    "kwargs, amount, credits",
    [
        ({"payment_type": "credits", "package": "3h"}, Decimal("25.00"), 180),
        ({"payment_type": "credits", "minutes": 90}, Decimal("15.00"), 90),
        ({"payment_type": "credits", "minutes": 1}, Decimal("0.17"), 1),
        ({"payment_type": "subscription", "plan": "pro"}, Decimal("79.00"), 500),
        ({"payment_type": "subscription", "plan": "enterprise"}, Decimal("199.00"), 0),
    ],
)
def test_quote(kwargs, amount, credits):
    quote = PaymentService.quote(**kwargs)
    assert quote["amount"] == amount
    assert quote["credits"] == credits


@pytest.mark.parametrize(
    "kwargs",
    [
        {"payment_type": "credits", "package": "100h"},
        {"payment_type": "credits", "minutes": 0},
        {"payment_type": "credits"},
        {"payment_type": "subscription", "plan": "gold"},
        {"payment_type": "gift"},
    ],
)
def test_quote_rejects_invalid_input(kwargs):
    with pytest.raises(ScribeError):
        PaymentService.quote(**kwargs)


@pytest.mark.django_db
def test_start_payment_creates_pending_payment(user_client, user, fake_stripe):
    response = user_client.post("/api/payments/", {"payment_type": "credits", "package": "1h"}, format="json")

    assert response.status_code == 201
    assert response.data["client_secret"] == "pi_test_1_secret"
    payment = Payment.objects.get(user=user)
    assert payment.status == "pending"
    assert payment.transaction_id == "pi_test_1"
    assert fake_stripe[0]["amount"] == 1000
    assert fake_stripe[0]["metadata"]["payment_id"] == str(payment.payment_id)


@pytest.mark.django_db
def test_start_payment_rejects_non_integer_minutes(user_client, fake_stripe):
    response = user_client.post("/api/payments/", {"payment_type": "credits", "minutes": "lots"}, format="json")

    assert response.status_code == 400
    assert not fake_stripe


@pytest.mark.django_db
def test_webhook_success_grants_credits_once(api_client, monkeypatch, user, fake_stripe):
    PaymentService.start_payment(user, "credits", package="1h")

    response = _post_event(api_client, monkeypatch, _event("payment_intent.succeeded", "pi_test_1"))
    assert response.status_code == 200

    response = _post_event(api_client, monkeypatch, _event("payment_intent.succeeded", "pi_test_1"))
    assert response.status_code == 200

    payment = Payment.objects.get(transaction_id="pi_test_1")
    assert payment.status == "completed"
    assert payment.raw_response["id"] == "pi_test_1"
    assert Credits.objects.get(user=user).remaining_credits == 90
    assert Notification.objects.filter(user=user, type="payment").count() == 1


@pytest.mark.django_db
def test_webhook_failure_marks_failed_and_emails(api_client, monkeypatch, user, fake_stripe):
    PaymentService.start_payment(user, "credits", minutes=30)

    response = _post_event(api_client, monkeypatch, _event("payment_intent.payment_failed", "pi_test_1"))

    assert response.status_code == 200
    assert Payment.objects.get(transaction_id="pi_test_1").status == "failed"
    assert Credits.objects.get(user=user).remaining_credits == 30
    assert mail.outbox[0].subject == "Payment failed"


@pytest.mark.django_db
def test_webhook_success_after_failed_attempt_grants_credits(api_client, monkeypatch, user, fake_stripe):
    PaymentService.start_payment(user, "credits", package="1h")

    response = _post_event(api_client, monkeypatch, _event("payment_intent.payment_failed", "pi_test_1"))
    assert response.status_code == 200
    assert Payment.objects.get(transaction_id="pi_test_1").status == "failed"

    response = _post_event(api_client, monkeypatch, _event("payment_intent.succeeded", "pi_test_1"))
    assert response.status_code == 200

    assert Payment.objects.get(transaction_id="pi_test_1").status == "completed"
    assert Credits.objects.get(user=user).remaining_credits == 90


@pytest.mark.django_db
def test_webhook_for_unknown_intent_is_ignored(api_client, monkeypatch):
    response = _post_event(api_client, monkeypatch, _event("payment_intent.succeeded", "pi_missing"))

    assert response.status_code == 200
    assert response.data["status"] == "ignored"


@pytest.mark.django_db
def test_webhook_requires_signature(api_client):
    response = api_client.post("/api/webhooks/stripe/", data="{}", content_type="application/json")
    assert response.status_code == 400


@pytest.mark.django_db
def test_payment_history(user_client, user, fake_stripe):
    PaymentService.start_payment(user, "subscription", plan="basic")

    response = user_client.get("/api/payments/history/")

    assert response.status_code == 200
    assert response.data["payments"][0]["plan"] == "basic"
    assert response.data["payments"][0]["amount"] == "29.00"
