import json

import pytest

from authentication.models import Profile
from scribe.models import CreditTransaction, Credits


def _post(client, url, body):
    return client.post(url, data=json.dumps(body), content_type="application/json")


@pytest.mark.django_db
def test_register_grants_signup_credits(client, settings):
    settings.SIGNUP_FREE_CREDITS = 30

    response = _post(client, "/api/auth/register/", {
        "email": "New.Reporter@Example.com",
        "password": "secret123",
        "full_name": "New Reporter",
        "title": "Court Reporter",
    })

    assert response.status_code == 201
    assert response.json()["email"] == "new.reporter@example.com"
    profile = Profile.objects.get(user__email="new.reporter@example.com")
    assert profile.title == "Court Reporter"
    assert Credits.objects.get(user=profile.user).remaining_credits == 30
    assert CreditTransaction.objects.get(user=profile.user).type == "signup"


@pytest.mark.django_db
@pytest.mark.parametrize(
    "body, detail",
    [
        ({"email": "bad", "password": "secret123"}, "Please enter a valid email address"),
        ({"email": "a@b.com", "password": "123"}, "Password must be at least 6 characters"),
        ({"email": "a@b.com", "password": 12345678}, "Password must be a string"),
        ({"email": 42, "password": "secret123"}, "Please enter a valid email address"),
        ({"email": "reporter@example.com", "password": "secret123"}, "Email already exists"),
    ],
)
def test_register_validation(client, user, body, detail):
    response = _post(client, "/api/auth/register/", body)

    assert response.status_code == 400
    assert response.json()["detail"] == detail


@pytest.mark.django_db
def test_login_and_me(client, user):
    response = _post(client, "/api/auth/login/", {"email": user.email, "password": "secret123"})
    assert response.status_code == 200
    assert response.json()["role"] == "user"

    response = client.get("/api/auth/me/")
    assert response.status_code == 200
    data = response.json()
    assert data["profile"]["full_name"] == "Dana Reporter"
    assert data["credits"]["remaining_credits"] == 30
    assert data["organization"] is None


@pytest.mark.django_db
def test_login_rejects_bad_password(client, user):
    response = _post(client, "/api/auth/login/", {"email": user.email, "password": "wrong-pass"})
    assert response.status_code == 400


@pytest.mark.django_db
def test_suspended_user_cannot_log_in(client, make_user):
    suspended = make_user(email="suspended@example.com", suspended=True)

    response = _post(client, "/api/auth/login/", {"email": suspended.email, "password": "secret123"})

    assert response.status_code == 403


@pytest.mark.django_db
def test_update_profile(client, user):
    client.force_login(user)

    response = client.patch(
        "/api/auth/profile/",
        data=json.dumps({"title": "Senior Court Reporter", "license_number": "CSR-1234"}),
        content_type="application/json",
    )

    assert response.status_code == 200
    profile = Profile.objects.get(user=user)
    assert profile.title == "Senior Court Reporter"
    assert profile.license_number == "CSR-1234"


@pytest.mark.django_db
def test_me_requires_login(client):
    assert client.get("/api/auth/me/").status_code == 401
