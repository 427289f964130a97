"""Integration tests for login, logout and refresh-token rotation."""

from __future__ import annotations

import pytest

from accounts.api.cookies import ACCESS_COOKIE, REFRESH_COOKIE
from accounts.models.user import User
from tests.factories.user import DEFAULT_PASSWORD, UserFactory
from tests.helpers.auth import bearer, issue_token, set_cookie_headers

LOGIN = "/api/v1/users/login"
LOGOUT = "/api/v1/users/logout"
REFRESH = "/api/v1/users/refresh"


@pytest.fixture()
def user_id(session) -> int:
    """Committed user; only the id survives the request-scoped session teardown."""
    user = UserFactory(username="grace", email="grace@example.com")
    session.commit()
    return user.id


def _login(client, **payload):
    payload.setdefault("password", DEFAULT_PASSWORD)
    return client.post(LOGIN, json=payload)


class TestLogin:
    def test_sets_cookies_and_returns_tokens(self, client, user_id) -> None:
        resp = _login(client, username="Grace")

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["message"] == "User logged in successfully"
        data = body["data"]
        assert data["user"]["id"] == user_id
        assert data["user"]["username"] == "grace"
        assert "password" not in data["user"]
        assert "refreshToken" not in data["user"]

        cookies = set_cookie_headers(resp)
        assert cookies[ACCESS_COOKIE].startswith(f"{ACCESS_COOKIE}={data['accessToken']};")
        assert cookies[REFRESH_COOKIE].startswith(f"{REFRESH_COOKIE}={data['refreshToken']};")
        for header in cookies.values():
            assert "HttpOnly" in header
            assert "SameSite=Lax" in header

    def test_stores_refresh_token(self, client, session, user_id) -> None:
        resp = _login(client, email="GRACE@example.com")

        refreshed = session.get(User, user_id)
        assert refreshed.refresh_token == resp.get_json()["data"]["refreshToken"]

    def test_missing_identifiers(self, client, user_id) -> None:
        resp = _login(client)

        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Email or username field is missing"

    def test_missing_password_is_a_payload_error(self, client, user_id) -> None:
        resp = _login(client, username="grace", password=None)

        assert resp.status_code == 400
        body = resp.get_json()
        assert body["code"] == "validation_error"
        assert body["message"] == "Invalid request payload"
        assert "password" in body["details"]["errors"]

    def test_both_identifiers_policy(self, app, client, user_id, monkeypatch) -> None:
        monkeypatch.setitem(app.config, "LOGIN_IDENTIFIER_POLICY", "both")

        assert _login(client, username="grace").status_code == 400
        assert _login(client, username="grace", email="grace@example.com").status_code == 200

    def test_unknown_user(self, client, user_id) -> None:
        resp = _login(client, username="nobody")

        assert resp.status_code == 404
        assert resp.get_json()["message"] == "User does not exist"

    def test_wrong_password(self, client, user_id) -> None:
        resp = _login(client, username="grace", password="not-it")

        assert resp.status_code == 401
        body = resp.get_json()
        assert body["message"] == "Invalid user credentials"
        assert body["statusCode"] == 401
        assert set_cookie_headers(resp) == {}


class TestRefresh:
    def test_rotates_via_cookie(self, client, user_id) -> None:
        first = _login(client, username="grace").get_json()["data"]

        resp = client.post(REFRESH)

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["message"] == "Access token refreshed"
        pair = body["data"]
        assert set(pair) == {"accessToken", "refreshToken"}
        assert pair["refreshToken"] != first["refreshToken"]
        assert client.get_cookie(REFRESH_COOKIE).value == pair["refreshToken"]

    def test_rotates_via_body(self, client, user_id) -> None:
        token = _login(client, username="grace").get_json()["data"]["refreshToken"]
        client.delete_cookie(REFRESH_COOKIE)

        resp = client.post(REFRESH, json={"refreshToken": token})

        assert resp.status_code == 200

    def test_rotated_token_is_single_use(self, client, user_id) -> None:
        token = _login(client, username="grace").get_json()["data"]["refreshToken"]
        client.delete_cookie(REFRESH_COOKIE)
        assert client.post(REFRESH, json={"refreshToken": token}).status_code == 200
        client.delete_cookie(REFRESH_COOKIE)

        replay = client.post(REFRESH, json={"refreshToken": token})

        assert replay.status_code == 401
        assert replay.get_json()["message"] == "Refresh token is expired or used"

    def test_missing_token(self, client) -> None:
        resp = client.post(REFRESH, json={})

        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Unauthorized request"

    def test_garbage_token(self, client) -> None:
        resp = client.post(REFRESH, json={"refreshToken": "not-a-jwt"})

        assert resp.status_code == 401
        assert resp.get_json()["success"] is False

    def test_access_token_is_not_a_refresh_token(self, client, user_id) -> None:
        access = _login(client, username="grace").get_json()["data"]["accessToken"]
        client.delete_cookie(REFRESH_COOKIE)

        resp = client.post(REFRESH, json={"refreshToken": access})

        assert resp.status_code == 401

    def test_expired_refresh_token(self, client, user_id, freeze_time) -> None:
        with freeze_time("2026-01-01 12:00:00"):
            _login(client, username="grace")
        with freeze_time("2026-01-12 12:00:00"):
            resp = client.post(REFRESH)

        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Token has expired"


class TestLogout:
    def test_logout_clears_slot_and_cookies(self, client, session, user_id) -> None:
        data = _login(client, username="grace").get_json()["data"]

        resp = client.post(LOGOUT, headers=bearer(data["accessToken"]))

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["message"] == "User logged out successfully"
        assert body["data"] == {}
        cookies = set_cookie_headers(resp)
        assert set(cookies) == {ACCESS_COOKIE, REFRESH_COOKIE}
        assert client.get_cookie(REFRESH_COOKIE) is None
        assert session.get(User, user_id).refresh_token is None

        after = client.post(REFRESH, json={"refreshToken": data["refreshToken"]})
        assert after.status_code == 401

    def test_logout_is_idempotent(self, app, client, user_id) -> None:
        with app.app_context():
            token = issue_token(user_id)

        assert client.post(LOGOUT, headers=bearer(token)).status_code == 200
        assert client.post(LOGOUT, headers=bearer(token)).status_code == 200

    def test_logout_requires_access_token(self, client) -> None:
        resp = client.post(LOGOUT)

        assert resp.status_code == 401
        body = resp.get_json()
        assert body["statusCode"] == 401
        assert body["success"] is False
        assert body["code"] == "unauthorized"

    def test_logout_rejects_expired_access_token(self, app, client, user_id) -> None:
        from datetime import timedelta

        with app.app_context():
            token = issue_token(user_id, expires_delta=timedelta(seconds=-1))

        resp = client.post(LOGOUT, headers=bearer(token))

        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Token has expired"


def test_session_lifecycle(client, user_id) -> None:
    login = _login(client, email="GRACE@EXAMPLE.COM")
    assert login.status_code == 200
    tokens = login.get_json()["data"]

    client.delete_cookie(REFRESH_COOKIE)
    renewed = client.post(REFRESH, json={"refreshToken": tokens["refreshToken"]})
    assert renewed.status_code == 200
    pair = renewed.get_json()["data"]
    assert pair["refreshToken"] != tokens["refreshToken"]

    client.delete_cookie(REFRESH_COOKIE)
    replay = client.post(REFRESH, json={"refreshToken": tokens["refreshToken"]})
    assert replay.status_code == 401
    assert replay.get_json()["message"] == "Refresh token is expired or used"

    assert client.post(LOGOUT, headers=bearer(pair["accessToken"])).status_code == 200
    after = client.post(REFRESH, json={"refreshToken": pair["refreshToken"]})
    assert after.status_code == 401
