import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

pytestmark = pytest.mark.django_db


def test_me_requires_auth():
    c = APIClient()
    res = c.get("/api/me/")
    assert res.status_code in (401, 403)


def test_login_sets_cookies(donor_user, settings):
    c = APIClient()
    res = c.post("/api/auth/login/", {"username": "donor", "password": "testpass"}, format="json")
    assert res.status_code == 200

    assert settings.SIMPLE_JWT["AUTH_COOKIE"] in res.cookies
    assert settings.SIMPLE_JWT["AUTH_COOKIE_REFRESH"] in res.cookies


def test_login_with_bad_password_uses_error_envelope(donor_user):
    res = APIClient().post("/api/auth/login/", {"username": "donor", "password": "nope"}, format="json")

    assert res.status_code in (401, 403)
    assert res.json()["error"]["code"] == "authentication_failed"


def test_me_with_bearer_token_returns_profile_counters(donor_user):
    token = RefreshToken.for_user(donor_user).access_token
    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

    res = c.get("/api/v1/me/")

    assert res.status_code == 200
    body = res.json()
    assert body["user"]["id"] == donor_user.id
    assert body["user"]["roles"] == ["DONOR"]
    assert body["profile"]["blood_given"] == 0


def test_me_with_access_cookie(admin_user, settings):
    token = RefreshToken.for_user(admin_user).access_token
    c = APIClient()
    c.cookies[settings.SIMPLE_JWT["AUTH_COOKIE"]] = str(token)

    res = c.get("/api/me/")

    assert res.status_code == 200
    assert res.json()["user"]["is_admin"] is True
    assert res.json()["profile"] is None


def test_cookie_auth_unsafe_method_requires_csrf(donor_user, settings):
    token = RefreshToken.for_user(donor_user).access_token
    c = APIClient(enforce_csrf_checks=True)
    c.cookies[settings.SIMPLE_JWT["AUTH_COOKIE"]] = str(token)

    res = c.post("/api/auth/logout/", {}, format="json")

    assert res.status_code == 403
    assert res.json()["error"]["code"] == "permission_denied"
    assert res.json()["error"]["message"].startswith("CSRF Failed")
