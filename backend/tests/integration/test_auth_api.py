"""End-to-end tests for the ``/api/v1/auth`` endpoints."""

from __future__ import annotations

import pytest

from academy.models.refresh_token import RefreshToken
from academy.services.auth.secrets import hash_secret
from tests.factories.user import DEFAULT_PASSWORD

BASE = "/api/v1/auth"
COOKIE = "refreshToken"


def _set_cookie_header(response) -> str:
    headers = [h for h in response.headers.getlist("Set-Cookie") if h.startswith(f"{COOKIE}=")]
    assert len(headers) == 1, response.headers.getlist("Set-Cookie")
    return headers[0]


def _cookie_value(response) -> str:
    return _set_cookie_header(response).split(";", 1)[0].split("=", 1)[1]


def _with_cookie(value: str) -> dict[str, str]:
    return {"Cookie": f"{COOKIE}={value}"}


def _login(client, user, password=DEFAULT_PASSWORD):
    return client.post(f"{BASE}/login", json={"email": user.email, "password": password})


class TestRegister:
    def test_register_created(self, client):
        resp = client.post(
            f"{BASE}/register",
            json={"email": "Nova@Academy.test", "password": "secret1", "name": "Nova", "role": "PROFESSOR"},
        )
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["status"] == "ok"
        assert body["user"]["email"] == "nova@academy.test"
        assert body["user"]["role"] == "PROFESSOR"
        assert "password" not in body["user"]
        assert "password_hash" not in body["user"]

    def test_register_duplicate_email(self, client, user):
        resp = client.post(
            f"{BASE}/register",
            json={"email": user.email, "password": "secret1", "name": "Dup"},
        )
        assert resp.status_code == 409
        assert resp.mimetype == "application/problem+json"

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"email": "not-an-email", "password": "secret1", "name": "X"},
            {"email": "a@academy.test", "password": "123", "name": "X"},
            {"email": "a@academy.test", "password": "secret1", "name": "X", "role": "ROOT"},
        ],
    )
    def test_register_validation(self, client, payload):
        resp = client.post(f"{BASE}/register", json=payload)
        assert resp.status_code == 422
        assert resp.get_json()["code"] == "validation_error"


class TestLogin:
    def test_login_sets_http_only_scoped_cookie(self, client, user, session):
        resp = _login(client, user)
        assert resp.status_code == 200

        body = resp.get_json()
        assert body["accessToken"]
        assert body["user"] == {
            "id": user.id,
            "email": user.email,
            "role": "STUDENT",
            "name": user.name,
        }
        assert "refreshToken" not in body

        header = _set_cookie_header(resp)
        assert "HttpOnly" in header
        assert "Path=/api/v1/auth" in header
        assert "SameSite=Lax" in header
        assert "Max-Age=" in header

        secret = _cookie_value(resp)
        row = session.query(RefreshToken).filter_by(token_hash=hash_secret(secret)).one()
        assert row.user_id == user.id

    @pytest.mark.parametrize(
        ("email", "password"),
        [("user-does-not-exist@academy.test", DEFAULT_PASSWORD), (None, "wrong-password")],
    )
    def test_login_failures_are_indistinguishable(self, client, user, session, email, password):
        resp = client.post(
            f"{BASE}/login",
            json={"email": email or user.email, "password": password},
        )
        assert resp.status_code == 401
        assert resp.get_json()["detail"] == "Invalid credentials"
        assert resp.headers["WWW-Authenticate"] == "Bearer"
        assert "Set-Cookie" not in resp.headers
        assert session.query(RefreshToken).count() == 0

    def test_login_validation(self, client):
        resp = client.post(f"{BASE}/login", json={"email": "x@academy.test"})
        assert resp.status_code == 422


class TestRefreshToken:
    def test_rotation_replaces_cookie_and_old_one_dies(self, client, user):
        old = _cookie_value(_login(client, user))

        resp = client.post(f"{BASE}/refresh-token", headers=_with_cookie(old))
        assert resp.status_code == 200
        assert resp.get_json()["accessToken"]
        assert "user" not in resp.get_json()
        new = _cookie_value(resp)
        assert new != old
        assert "HttpOnly" in _set_cookie_header(resp)

        replay = client.post(f"{BASE}/refresh-token", headers=_with_cookie(old))
        assert replay.status_code == 401
        assert replay.get_json()["detail"] == "Invalid refresh token"

        assert client.post(f"{BASE}/refresh-token", headers=_with_cookie(new)).status_code == 200

    def test_missing_cookie(self, client):
        resp = client.post(f"{BASE}/refresh-token")
        assert resp.status_code == 401
        assert resp.get_json()["detail"] == "Invalid refresh token"

    def test_unknown_cookie(self, client, user):
        resp = client.post(f"{BASE}/refresh-token", headers=_with_cookie("deadbeef" * 12))
        assert resp.status_code == 401
        assert resp.get_json()["detail"] == "Invalid refresh token"

    def test_expired_cookie(self, client, user, freeze_time):
        with freeze_time("2024-05-01 10:00:00"):
            old = _cookie_value(_login(client, user))
        with freeze_time("2024-05-08 10:00:01"):
            resp = client.post(f"{BASE}/refresh-token", headers=_with_cookie(old))
        assert resp.status_code == 401

    def test_new_access_token_works_on_me(self, client, user):
        old = _cookie_value(_login(client, user))
        access = client.post(f"{BASE}/refresh-token", headers=_with_cookie(old)).get_json()["accessToken"]
        resp = client.get(f"{BASE}/me", headers={"Authorization": f"Bearer {access}"})
        assert resp.status_code == 200
        assert resp.get_json()["id"] == user.id


class TestLogout:
    def test_logout_revokes_and_clears_cookie(self, client, user):
        secret = _cookie_value(_login(client, user))

        resp = client.post(f"{BASE}/logout", headers=_with_cookie(secret))
        assert resp.status_code == 200
        assert resp.get_json() == {"status": "ok"}
        cleared = _set_cookie_header(resp)
        assert cleared.startswith(f"{COOKIE}=;")
        assert "Path=/api/v1/auth" in cleared

        assert client.post(f"{BASE}/refresh-token", headers=_with_cookie(secret)).status_code == 401

    def test_logout_is_idempotent(self, client, user):
        secret = _cookie_value(_login(client, user))
        assert client.post(f"{BASE}/logout", headers=_with_cookie(secret)).status_code == 200
        assert client.post(f"{BASE}/logout", headers=_with_cookie(secret)).status_code == 200

    def test_logout_without_cookie(self, client):
        resp = client.post(f"{BASE}/logout")
        assert resp.status_code == 200
        assert resp.get_json() == {"status": "ok"}

    def test_logout_only_ends_that_session(self, client, user):
        first = _cookie_value(_login(client, user))
        second = _cookie_value(_login(client, user))
        client.post(f"{BASE}/logout", headers=_with_cookie(first))
        assert client.post(f"{BASE}/refresh-token", headers=_with_cookie(second)).status_code == 200


class TestMe:
    def test_me_with_bearer(self, client, user):
        access = _login(client, user).get_json()["accessToken"]
        resp = client.get(f"{BASE}/me", headers={"Authorization": f"Bearer {access}"})
        assert resp.status_code == 200
        assert resp.get_json()["email"] == user.email

    @pytest.mark.parametrize(
        "header",
        [None, "Bearer", "Bearer not.a.jwt", "Basic dXNlcjpwYXNz"],
    )
    def test_me_rejects_bad_credentials(self, client, header):
        headers = {"Authorization": header} if header else {}
        resp = client.get(f"{BASE}/me", headers=headers)
        assert resp.status_code == 401
        assert resp.get_json()["detail"] == "Invalid or expired token"

    def test_me_rejects_expired_access_token(self, client, user, freeze_time):
        with freeze_time("2024-05-01 10:00:00"):
            access = _login(client, user).get_json()["accessToken"]
        with freeze_time("2024-05-01 10:15:01"):
            resp = client.get(f"{BASE}/me", headers={"Authorization": f"Bearer {access}"})
        assert resp.status_code == 401
