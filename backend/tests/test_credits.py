import pytest
from django.core import mail

from scribe.exceptions import InsufficientCreditsError, InvalidTransitionError, ScribeError
from scribe.models import CreditRequest, CreditTransaction, Credits, Notification
from scribe.services.credit_service import CreditService


def _balance(user):
    return Credits.objects.get(user=user)


@pytest.mark.parametrize(
    "seconds, expected",
    [(0, 1), (1, 1), (59.9, 1), (60, 1), (61, 2), (3600, 60)],
)
def test_credits_needed_rounds_minutes_up(seconds, expected):
    assert CreditService.credits_needed_for_duration(seconds) == expected


@pytest.mark.django_db
def test_grant_credits_updates_totals_and_ledger(make_user):
    user = make_user()

    CreditService.grant_credits(user, 45, "purchase", "Package 1h")

    credits = _balance(user)
    assert credits.total_credits == 45
    assert credits.remaining_credits == 45
    tx = CreditTransaction.objects.get(user=user)
    assert tx.amount == 45
    assert tx.type == "purchase"
    assert tx.balance_after == 45


@pytest.mark.django_db
def test_grant_credits_rejects_non_positive(make_user):
    user = make_user()
    with pytest.raises(ScribeError):
        CreditService.grant_credits(user, 0, "approval", "Nothing")


@pytest.mark.django_db
def test_approve_request_credits_user_once(make_user):
    user = make_user()
    credit_request = CreditService.submit_request(user, "Need minutes for the Smith deposition")

    CreditService.approve_request(credit_request.request_id, 60, "Enjoy")

    credit_request.refresh_from_db()
    assert credit_request.status == "approved"
    assert credit_request.credits_approved == 60
    assert credit_request.resolved_at is not None
    assert _balance(user).remaining_credits == 60

    with pytest.raises(InvalidTransitionError):
        CreditService.approve_request(credit_request.request_id, 60)
    assert _balance(user).remaining_credits == 60


@pytest.mark.django_db
def test_decline_then_approve_is_rejected(make_user):
    user = make_user()
    credit_request = CreditService.submit_request(user, "More please")

    CreditService.decline_request(credit_request.request_id, "Not this month")

    with pytest.raises(InvalidTransitionError):
        CreditService.approve_request(credit_request.request_id, 10)
    assert _balance(user).remaining_credits == 0


@pytest.mark.django_db
@pytest.mark.parametrize("amount", [0, -5, "ten", None, 2.7, "2.7", True])
def test_approve_request_validates_amount(make_user, amount):
    user = make_user()
    credit_request = CreditService.submit_request(user, "Hello")

    with pytest.raises(ScribeError):
        CreditService.approve_request(credit_request.request_id, amount)

    credit_request.refresh_from_db()
    assert credit_request.status == "pending"


@pytest.mark.django_db
def test_consume_personal_credits_and_refund(user):
    charge = CreditService.consume_credits(user, 12, "Transcription test")

    assert charge == {"source": "personal", "amount": 12, "member_id": None, "organization_id": None}
    assert _balance(user).remaining_credits == 18
    assert _balance(user).used_credits == 12

    CreditService.refund_credits(user, charge, "Refund test")

    credits = _balance(user)
    assert credits.remaining_credits == 30
    assert credits.used_credits == 0
    assert CreditTransaction.objects.filter(user=user, type="refund").count() == 1


@pytest.mark.django_db
def test_consume_more_than_available_raises_without_side_effects(user):
    with pytest.raises(InsufficientCreditsError) as exc:
        CreditService.consume_credits(user, 31, "Too long")

    assert exc.value.details["credits_needed"] == 31
    assert exc.value.details["credits_available"] == 30
    assert _balance(user).remaining_credits == 30
    assert not CreditTransaction.objects.filter(user=user, type="consumption").exists()


@pytest.mark.django_db
def test_credit_request_endpoints(user_client, user):
    response = user_client.post("/api/credits/requests/", {"message": "Need 2 hours"}, format="json")
    assert response.status_code == 201
    assert response.data["status"] == "pending"

    response = user_client.post("/api/credits/requests/", {"message": "   "}, format="json")
    assert response.status_code == 400

    response = user_client.get("/api/credits/requests/")
    assert response.status_code == 200
    assert len(response.data["requests"]) == 1


@pytest.mark.django_db
def test_balance_and_history_endpoints(user_client):
    response = user_client.get("/api/credits/")
    assert response.status_code == 200
    assert response.data["remaining_credits"] == 30
    assert response.data["available_for_transcription"] == 30

    response = user_client.get("/api/credits/history/?limit=500")
    assert response.status_code == 200
    assert response.data["limit"] == 100
    assert response.data["total"] == 1

    response = user_client.get("/api/credits/history/?limit=abc")
    assert response.status_code == 400


@pytest.mark.django_db
def test_admin_approves_request_with_notification_and_email(admin_client, user):
    credit_request = CreditService.submit_request(user, "Deposition next week")

    url = f"/api/admin/credit-requests/{credit_request.request_id}/approve/"
    response = admin_client.post(url, {"credits": 90, "admin_note": "Approved"}, format="json")

    assert response.status_code == 200
    assert response.data["status"] == "approved"
    assert _balance(user).remaining_credits == 120
    assert Notification.objects.filter(user=user, type="credits").count() == 1
    assert len(mail.outbox) == 1

    response = admin_client.post(url, {"credits": 90}, format="json")
    assert response.status_code == 409
    assert response.data["error_code"] == "INVALID_TRANSITION"
    assert _balance(user).remaining_credits == 120


@pytest.mark.django_db
def test_admin_declines_request(admin_client, user):
    credit_request = CreditService.submit_request(user, "Please")

    response = admin_client.post(
        f"/api/admin/credit-requests/{credit_request.request_id}/decline/",
        {"admin_note": "Buy a package"},
        format="json",
    )

    assert response.status_code == 200
    assert CreditRequest.objects.get(pk=credit_request.pk).status == "declined"
    assert "declined" in mail.outbox[0].subject


@pytest.mark.django_db
def test_non_admin_cannot_approve(user_client, user):
    credit_request = CreditService.submit_request(user, "Please")

    response = user_client.post(
        f"/api/admin/credit-requests/{credit_request.request_id}/approve/",
        {"credits": 1000},
        format="json",
    )

    assert response.status_code == 403
    assert _balance(user).remaining_credits == 30


@pytest.mark.django_db
def test_suspended_user_is_blocked(client_for, make_user):
    suspended = make_user(email="blocked@example.com", suspended=True)

    response = client_for(suspended).get("/api/credits/")

    assert response.status_code == 403
    assert response.data["error_code"] == "ACCOUNT_SUSPENDED"
