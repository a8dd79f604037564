from decimal import Decimal

import pytest

from authentication.models import Profile
from scribe.models import Hearing, Message, Notification, Payment, Project
from scribe.services.admin_service import AdminService, parse_duration
from scribe.services.credit_service import CreditService


@pytest.mark.parametrize(
    "value, seconds",
    [("01:30:00", 5400), ("02:15", 135), ("", 0), ("bad", 0), (None, 0)],
)
def test_parse_duration(value, seconds):
    assert parse_duration(value) == seconds


@pytest.fixture
def payments(make_user):
    big = make_user(email="big@firm.com", full_name="Big Spender")
    small = make_user(email="small@firm.com", full_name="")
    Payment.objects.create(user=big, amount=Decimal("70.00"), credits_purchased=600, status="completed", transaction_id="pi_1")
    Payment.objects.create(user=big, amount=Decimal("25.00"), credits_purchased=180, status="completed", transaction_id="pi_2")
    Payment.objects.create(user=small, amount=Decimal("45.00"), credits_purchased=360, status="completed", transaction_id="pi_3")
    Payment.objects.create(user=small, amount=Decimal("199.00"), status="failed", transaction_id="pi_4")
    return big, small


@pytest.mark.django_db
def test_highest_payer_counts_completed_only(payments):
    big, _ = payments

    top = AdminService.highest_payer()

    assert top["user_id"] == str(big.user_id)
    assert top["total_amount"] == "95.00"


@pytest.mark.django_db
def test_payments_csv(payments):
    rows = AdminService.payments_csv().strip().splitlines()

    assert rows[0] == "Date,User,Amount,Credits,Method,Transaction ID"
    assert len(rows) == 5
    assert any(",Unknown,45.00,360,card,pi_3" in row for row in rows)


@pytest.mark.django_db
def test_stats(admin_client, user, payments):
    project = Project.objects.create(user=user, name="Case 1")
    Hearing.objects.create(project=project, user=user, title="Day 1", audio_duration="01:00:00")
    Hearing.objects.create(project=project, user=user, title="Day 2", audio_duration="00:30:00")

    response = admin_client.get("/api/admin/stats/")

    assert response.status_code == 200
    assert response.data["total_users"] == 4
    assert response.data["total_projects"] == 1
    assert response.data["total_payments"] == "140.00"
    assert response.data["recording_hours"] == 1.5


@pytest.mark.django_db
def test_list_payments_includes_totals(admin_client, user, payments):
    CreditService.consume_credits(user, 10, "Hearing")

    response = admin_client.get("/api/admin/payments/?status=completed")

    assert response.status_code == 200
    assert len(response.data["payments"]) == 3
    assert response.data["highest_payer"]["name"] == "Big Spender"
    assert response.data["credit_usage"]["total_used"] == 10
    assert response.data["credit_usage"]["remaining_worth_usd"] == "2.00"


@pytest.mark.django_db
def test_export_csv_endpoint(admin_client, payments):
    response = admin_client.get("/api/admin/payments/export/")

    assert response.status_code == 200
    assert response["Content-Type"].startswith("text/csv")
    assert response["Content-Disposition"].startswith('attachment; filename="payments-')


@pytest.mark.django_db
def test_toggle_role_and_suspension(admin_client, admin_user, user):
    response = admin_client.post(f"/api/admin/users/{user.user_id}/role/")
    assert response.status_code == 200
    assert response.data["role"] == "admin"

    response = admin_client.post(f"/api/admin/users/{admin_user.user_id}/role/")
    assert response.status_code == 400

    response = admin_client.post(f"/api/admin/users/{user.user_id}/suspend/")
    assert response.status_code == 200
    assert response.data["suspended"] is True
    assert Profile.objects.get(user=user).suspended is True


@pytest.mark.django_db
def test_send_message_notifies_user(admin_client, user):
    response = admin_client.post(
        f"/api/admin/users/{user.user_id}/messages/",
        {"subject": "Welcome", "content": "Your account is ready."},
        format="json",
    )

    assert response.status_code == 201
    assert Message.objects.get(user=user).from_admin is True
    assert Notification.objects.get(user=user).type == "system"


@pytest.mark.django_db
def test_user_details(admin_client, user):
    response = admin_client.get(f"/api/admin/users/{user.user_id}/")

    assert response.status_code == 200
    assert response.data["profile"]["full_name"] == "Dana Reporter"
    assert response.data["credits"]["remaining_credits"] == 30


@pytest.mark.django_db
def test_admin_endpoints_require_admin(user_client):
    for url in ("/api/admin/users/", "/api/admin/stats/", "/api/admin/payments/"):
        assert user_client.get(url).status_code == 403
