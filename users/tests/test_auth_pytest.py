import pytest
from common.choices import UserRole
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from users.tests.factories import UserFactory


@pytest.mark.django_db
def test_signin_and_profile_pytest():
    user = UserFactory(email="Seller@Example.com")
    client = APIClient()

    resp = client.post(
        "/api/v1/auth/signin/",
        {"email": "seller@example.com", "password": "secret123"},
        format="json",
    )
    assert resp.status_code == 200
    assert resp.data["role"] == UserRole.SELLER
    assert resp.data["branch_id"] == user.branch_id
    access = resp.data["access"]

    client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
    profile = client.get("/api/v1/account/profile/")
    assert profile.status_code == 200
    assert profile.data["email"] == "seller@example.com"
    assert profile.data["branch_name"] == user.branch.name


@pytest.mark.django_db
def test_signin_rejects_bad_password_and_inactive_user():
    user = UserFactory()
    client = APIClient()
    resp = client.post("/api/v1/auth/signin/", {"email": user.email, "password": "wrong"}, format="json")
    assert resp.status_code == 400

    get_user_model().objects.filter(id=user.id).update(is_active=False)
    resp = client.post("/api/v1/auth/signin/", {"email": user.email, "password": "secret123"}, format="json")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_signout_blacklists_refresh_token():
    user = UserFactory()
    client = APIClient()
    tokens = client.post("/api/v1/auth/signin/", {"email": user.email, "password": "secret123"}, format="json").data

    resp = client.post("/api/v1/auth/signout/", {"refresh": tokens["refresh"]}, format="json")
    assert resp.status_code == 205

    again = client.post("/api/v1/auth/refresh/", {"refresh": tokens["refresh"]}, format="json")
    assert again.status_code == 401


@pytest.mark.django_db
def test_profile_requires_authentication():
    assert APIClient().get("/api/v1/account/profile/").status_code == 401
