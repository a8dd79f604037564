import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from authentication.models import Profile
from scribe.services.credit_service import CreditService

User = get_user_model()


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def make_user(db):
    def _make_user(email="reporter@example.com", credits=0, is_admin=False, full_name="Dana Reporter", **profile):
        user = User.objects.create_user(email=email, password="secret123")
        if is_admin:
            user.is_admin = True
            user.save()
        Profile.objects.create(user=user, full_name=full_name, **profile)
        if credits:
            CreditService.grant_credits(user, credits, "approval", "Test credits")
        else:
            CreditService.get_or_create_credits(user)
        return user

    return _make_user


@pytest.fixture
def user(make_user):
    return make_user(credits=30)


@pytest.fixture
def admin_user(make_user):
    return make_user(email="admin@example.com", is_admin=True, full_name="Court Admin")


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for():
    def _client_for(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    return _client_for


@pytest.fixture
def user_client(client_for, user):
    return client_for(user)


@pytest.fixture
def admin_client(client_for, admin_user):
    return client_for(admin_user)
