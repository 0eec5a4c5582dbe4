"""
Tests for registration, login and token-based access control.
"""

import asyncio
from datetime import timedelta

from conftest import auth_headers, login, register, signup

from app.db_handlers import HistoryDBHandler, UserDBHandler
from app.models import User
from app.utils.auth import create_access_token, create_user_token, decode_access_token


def _users_with_email(email: str) -> list[User]:
    return asyncio.run(UserDBHandler().get_multi_by_attributes(email=email))


def _history_actions() -> list[str]:
    entries = asyncio.run(HistoryDBHandler().get_multi_by_attributes())
    return [entry.action for entry in entries]


class TestRegister:
    def test_register_creates_user_with_hashed_password(self, client):
        response = register(client, "alice@example.com", password="pa55word")

        assert response.status_code == 201
        assert response.json() == {"message": "User registered successfully!"}
        users = _users_with_email("alice@example.com")
        assert len(users) == 1
        assert users[0].hashed_password != "pa55word"
        assert users[0].hashed_password.startswith("$2")
        assert users[0].is_admin is False

    def test_duplicate_email_is_rejected_without_new_record(self, client):
        assert register(client, "bob@example.com").status_code == 201

        response = register(client, "bob@example.com", name="Another Bob")

        assert response.status_code == 400
        assert response.json()["detail"] == "User already exists"
        assert len(_users_with_email("bob@example.com")) == 1

    def test_missing_fields_is_rejected(self, client):
        response = client.post(
            "/api/auth/register", json={"email": "carol@example.com"}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Missing required fields"
        assert _users_with_email("carol@example.com") == []

    def test_register_attempts_are_logged(self, client):
        register(client, "dave@example.com")
        register(client, "dave@example.com")

        actions = _history_actions()
        assert "User Registered: dave@example.com" in actions
        assert "Registration Failed: User already exists - dave@example.com" in actions

    def test_password_beyond_bcrypt_limit_is_rejected(self, client):
        response = register(client, "long@example.com", password="p" * 100)

        assert response.status_code == 400
        assert response.json()["detail"] == "Password cannot be longer than 72 bytes"
        assert _users_with_email("long@example.com") == []

    def test_multibyte_password_is_measured_in_bytes(self, client):
        # 50 characters, 75 bytes in UTF-8
        response = register(client, "utf8@example.com", password="\u00e9" * 25 + "x" * 25)

        assert response.status_code == 400

    def test_password_at_bcrypt_limit_is_accepted(self, client):
        password = "p" * 72
        assert register(client, "edge@example.com", password=password).status_code == 201

        assert login(client, "edge@example.com", password=password)


class TestLogin:
    def test_login_returns_self_contained_token(self, client):
        register(client, "erin@example.com", name="Erin", is_admin=True)

        response = client.post(
            "/api/auth/login",
            json={"email": "erin@example.com", "password": "secret123"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Login successful"
        payload = decode_access_token(body["token"])
        user = _users_with_email("erin@example.com")[0]
        assert payload["id"] == str(user.id)
        assert payload["isAdmin"] is True
        assert payload["username"] == "Erin"
        assert payload["exp"] > payload["iat"]

    def test_overlong_password_is_invalid_credentials(self, client):
        register(client, "frank@example.com")

        response = client.post(
            "/api/auth/login",
            json={"email": "frank@example.com", "password": "p" * 100},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid credentials"

    def test_unknown_email_and_wrong_password_are_distinguished(self, client):
        register(client, "frank@example.com")

        unknown = client.post(
            "/api/auth/login", json={"email": "nobody@example.com", "password": "x"}
        )
        wrong = client.post(
            "/api/auth/login", json={"email": "frank@example.com", "password": "nope"}
        )

        assert unknown.status_code == 400
        assert unknown.json()["detail"] == "User not found"
        assert wrong.status_code == 400
        assert wrong.json()["detail"] == "Invalid credentials"

    def test_failed_login_is_logged_against_the_user(self, client):
        register(client, "gina@example.com")
        client.post(
            "/api/auth/login", json={"email": "gina@example.com", "password": "bad"}
        )

        user = _users_with_email("gina@example.com")[0]
        entries = asyncio.run(HistoryDBHandler().list_for_user(user.id))
        assert [e.action for e in entries][0] == (
            "Login Failed: Invalid credentials for gina@example.com"
        )


class TestAccessControl:
    def test_me_returns_token_identity(self, client):
        token = signup(client, "hank@example.com")

        response = client.get("/api/auth/me", headers=auth_headers(token))

        assert response.status_code == 200
        body = response.json()
        assert body["isAdmin"] is False
        assert body["username"] == "Test User"

    def test_missing_token_is_unauthorized(self, client):
        response = client.get("/api/files")

        assert response.status_code == 401
        assert response.json()["detail"] == "No token, authorization denied"

    def test_garbage_token_is_unauthorized(self, client):
        response = client.get("/api/files", headers=auth_headers("not-a-jwt"))

        assert response.status_code == 401
        assert response.json()["detail"] == "Token is not valid"

    def test_expired_token_is_unauthorized(self, client):
        register(client, "ivy@example.com")
        user = _users_with_email("ivy@example.com")[0]
        expired = create_user_token(user, expires_delta=timedelta(minutes=-5))

        response = client.get("/api/history", headers=auth_headers(expired))

        assert response.status_code == 401

    def test_token_signed_with_other_key_is_rejected(self, client):
        from jose import jwt

        forged = jwt.encode(
            {"id": "00000000-0000-0000-0000-000000000000", "isAdmin": True},
            "some-other-secret",
            algorithm="HS256",
        )
        response = client.get("/api/admin/users", headers=auth_headers(forged))

        assert response.status_code == 401

    def test_role_comes_from_token_not_database(self, client):
        # A token claiming admin is honoured until it expires, even though the
        # stored user is not an admin.
        register(client, "jack@example.com")
        user = _users_with_email("jack@example.com")[0]
        token = create_access_token({"id": str(user.id), "isAdmin": True})

        response = client.get("/api/admin/users", headers=auth_headers(token))

        assert response.status_code == 200

    def test_login_token_works_for_protected_routes(self, client):
        token = signup(client, "kate@example.com")
        assert client.get("/api/files", headers=auth_headers(token)).status_code == 200
        assert login(client, "kate@example.com")
