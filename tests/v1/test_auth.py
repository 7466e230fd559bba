# tests/v1/test_auth.py
"""Tests for authentication endpoints."""

from __future__ import annotations

from fastapi import status
from sqlalchemy.orm import sessionmaker

from agora.core.settings import settings
from agora.db.session import build_engine, get_session_factory

from tests.conftest import DEFAULT_PASSWORD, register

SIGN_IN_PROMPT = "Please sign in to continue."


def _login(client, login: str, password: str = DEFAULT_PASSWORD):
    return client.post("/api/v1/auth/login", json={"login": login, "password": password})


class TestRegister:
    """POST /auth/register."""

    def test_register_sets_session_cookie(self, client) -> None:
        data = register(client, "alice")

        assert data["user"]["username"] == "alice"
        assert data["message"] == "Account created! You are now logged in."
        assert client.cookies.get(settings.session_cookie_name)

        me = client.get("/api/v1/auth/me")
        assert me.status_code == status.HTTP_200_OK
        assert me.json()["email"] == "alice@example.com"

    def test_cookie_is_http_only_and_expires(self, client) -> None:
        response = client.post(
            "/api/v1/auth/register",
            json={
                "email": "alice@example.com",
                "username": "alice",
                "password": "pw",
                "confirm_password": "pw",
            },
        )

        cookie = response.headers["set-cookie"].lower()
        assert cookie.startswith(f"{settings.session_cookie_name}=")
        assert "httponly" in cookie
        assert "samesite=lax" in cookie
        assert "expires=" in cookie

    def test_password_mismatch(self, client) -> None:
        response = client.post(
            "/api/v1/auth/register",
            json={
                "email": "alice@example.com",
                "username": "alice",
                "password": "one",
                "confirm_password": "two",
            },
        )

        assert response.status_code == 422
        assert "Passwords do not match" in response.text

    def test_duplicate_identity(self, client, client_factory) -> None:
        register(client, "alice")

        response = client_factory().post(
            "/api/v1/auth/register",
            json={
                "email": "alice@example.com",
                "username": "alice2",
                "password": "pw",
                "confirm_password": "pw",
            },
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["detail"] == "Email or username already taken"

    def test_blank_username(self, client) -> None:
        response = client.post(
            "/api/v1/auth/register",
            json={
                "email": "alice@example.com",
                "username": "   ",
                "password": "pw",
                "confirm_password": "pw",
            },
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestLogin:
    """POST /auth/login."""

    def test_login_with_username_or_email(self, client_factory, test_user) -> None:
        by_name = _login(client_factory(), "alice")
        by_email = _login(client_factory(), "alice@example.com")

        assert by_name.status_code == status.HTTP_200_OK
        assert by_email.status_code == status.HTTP_200_OK
        assert by_name.json()["message"] == "Welcome back, alice!"

    def test_wrong_password_and_unknown_user_look_the_same(self, client, test_user) -> None:
        wrong_password = _login(client, "alice", "nope")
        unknown_user = _login(client, "nobody")

        assert wrong_password.status_code == status.HTTP_401_UNAUTHORIZED
        assert unknown_user.status_code == status.HTTP_401_UNAUTHORIZED
        assert wrong_password.json() == unknown_user.json() == {"detail": "Invalid credentials"}
        assert settings.session_cookie_name not in client.cookies

    def test_new_login_signs_out_other_device(self, client_factory, test_user) -> None:
        laptop = client_factory()
        phone = client_factory()
        _login(laptop, "alice")
        assert laptop.get("/api/v1/auth/me").status_code == status.HTTP_200_OK

        _login(phone, "alice")

        stale = laptop.get("/api/v1/auth/me")
        assert stale.status_code == status.HTTP_401_UNAUTHORIZED
        assert stale.json()["detail"] == SIGN_IN_PROMPT
        assert phone.get("/api/v1/auth/me").status_code == status.HTTP_200_OK


class TestLogout:
    """POST /auth/logout and POST /auth/guest."""

    def test_logout_revokes_token(self, auth_client, client_factory) -> None:
        token = auth_client.cookies.get(settings.session_cookie_name)

        response = auth_client.post("/api/v1/auth/logout")

        assert response.status_code == status.HTTP_200_OK
        assert "max-age=0" in response.headers["set-cookie"].lower()
        replay = client_factory(cookies={settings.session_cookie_name: token})
        assert replay.get("/api/v1/auth/me").status_code == status.HTTP_401_UNAUTHORIZED

    def test_logout_without_session_is_harmless(self, client) -> None:
        assert client.post("/api/v1/auth/logout").status_code == status.HTTP_200_OK

    def test_guest_mode_drops_session(self, auth_client) -> None:
        response = auth_client.post("/api/v1/auth/guest")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"].startswith("Continuing as Guest")
        assert auth_client.get("/api/v1/auth/me").status_code == status.HTTP_401_UNAUTHORIZED


class TestMe:
    """GET /auth/me."""

    def test_anonymous(self, client) -> None:
        response = client.get("/api/v1/auth/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == SIGN_IN_PROMPT

    def test_forged_cookie(self, client_factory) -> None:
        forged = client_factory(cookies={settings.session_cookie_name: "made-up"})

        assert forged.get("/api/v1/auth/me").status_code == status.HTTP_401_UNAUTHORIZED

    def test_sliding_expiry_reissues_cookie(self, auth_client, monkeypatch) -> None:
        monkeypatch.setattr(settings, "session_sliding_expiry", True)

        response = auth_client.get("/api/v1/auth/me")

        assert response.status_code == status.HTTP_200_OK
        assert response.headers["set-cookie"].startswith(f"{settings.session_cookie_name}=")

    def test_fixed_expiry_leaves_cookie_alone(self, auth_client) -> None:
        response = auth_client.get("/api/v1/auth/me")

        assert "set-cookie" not in response.headers


def test_store_timeout_answers_503(app, client, database_url, test_user, engine) -> None:
    """Login blocked on the database lock fails as a retryable 503."""
    impatient = build_engine(database_url, timeout=0.1)
    app.dependency_overrides[get_session_factory] = lambda: sessionmaker(bind=impatient)
    try:
        with engine.connect() as blocker:
            blocker.exec_driver_sql("BEGIN IMMEDIATE")
            response = _login(client, "alice")
            blocker.rollback()
    finally:
        impatient.dispose()

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.headers["retry-after"] == "1"
