"""
Tests for the administrative routes and the cascading user deletion.
"""

import asyncio
from datetime import timedelta
from pathlib import Path
from types import SimpleNamespace
from uuid import uuid4

import pytest
from conftest import auth_headers, signup

from app.db_handlers import UploadedFileDBHandler, UserDBHandler
from app.utils.auth import create_user_token, decode_access_token


def _upload(client, token, filename, content=b"n\n1\n"):
    response = client.post(
        "/api/files/upload",
        headers=auth_headers(token),
        files={"file": (filename, content, "text/csv")},
    )
    assert response.status_code == 200, response.text
    return response.json()


def _user_id(token: str) -> str:
    return decode_access_token(token)["id"]


@pytest.fixture
def admin_token(client) -> str:
    return signup(client, "admin@example.com", is_admin=True)


@pytest.mark.parametrize(
    "method, path",
    [
        ("get", "/api/admin/users"),
        ("get", "/api/admin/files"),
        ("delete", "/api/admin/users/00000000-0000-0000-0000-000000000000"),
    ],
)
def test_admin_routes_reject_non_admins(client, method, path):
    token = signup(client, "user@example.com")

    assert getattr(client, method)(path).status_code == 401
    response = getattr(client, method)(path, headers=auth_headers(token))
    assert response.status_code == 403
    assert response.json()["detail"] == "Access Denied: Admin privileges required."

    admin = SimpleNamespace(id=uuid4(), is_admin=True, name="Root")
    expired = create_user_token(admin, expires_delta=timedelta(minutes=-5))
    response = getattr(client, method)(path, headers=auth_headers(expired))
    assert response.status_code == 401
    assert response.json()["detail"] == "Token is not valid"


def test_list_users_excludes_password_hashes(client, admin_token):
    signup(client, "user@example.com")

    response = client.get("/api/admin/users", headers=auth_headers(admin_token))

    assert response.status_code == 200
    users = response.json()["users"]
    assert {u["email"] for u in users} == {"admin@example.com", "user@example.com"}
    for user in users:
        assert "hashed_password" not in user
        assert "password" not in user
    assert {u["email"]: u["isAdmin"] for u in users}["admin@example.com"] is True


def test_list_files_includes_uploader(client, admin_token):
    token = signup(client, "user@example.com")
    _upload(client, token, "a.csv")

    response = client.get("/api/admin/files", headers=auth_headers(admin_token))

    assert response.status_code == 200
    files = response.json()["files"]
    assert len(files) == 1
    assert files[0]["uploadedBy"] == {"id": _user_id(token), "email": "user@example.com"}


def test_admin_cannot_delete_self(client, admin_token):
    _upload(client, admin_token, "mine.csv")

    response = client.delete(
        f"/api/admin/users/{_user_id(admin_token)}", headers=auth_headers(admin_token)
    )

    assert response.status_code == 400
    assert asyncio.run(UploadedFileDBHandler().get_multi_by_attributes()) != []


def test_delete_unknown_user_is_not_found(client, admin_token):
    response = client.delete(
        "/api/admin/users/00000000-0000-0000-0000-000000000000",
        headers=auth_headers(admin_token),
    )

    assert response.status_code == 404


def test_delete_malformed_user_id_is_not_found(client, admin_token):
    response = client.delete("/api/admin/users/42", headers=auth_headers(admin_token))

    assert response.status_code == 404
    assert response.json()["detail"] == "User not found."


@pytest.mark.parametrize("file_count", [0, 1, 3])
def test_delete_user_removes_all_their_files(client, admin_token, file_count):
    token = signup(client, "victim@example.com")
    survivor = signup(client, "survivor@example.com")
    _upload(client, survivor, "keep.csv")
    paths = []
    for index in range(file_count):
        file_id = _upload(client, token, f"f{index}.csv")["fileId"]
        record = client.get(f"/api/files/{file_id}", headers=auth_headers(token)).json()
        paths.append(Path(record["filepath"]))

    victim_id = _user_id(token)
    response = client.delete(
        f"/api/admin/users/{victim_id}", headers=auth_headers(admin_token)
    )

    assert response.status_code == 200
    assert response.json()["deletedFiles"] == file_count
    remaining = asyncio.run(UploadedFileDBHandler().get_multi_by_attributes())
    assert [f.filename for f in remaining] == ["keep.csv"]
    assert all(not path.exists() for path in paths)
    assert asyncio.run(UserDBHandler().get_user_by_email("victim@example.com")) is None


def test_delete_user_tolerates_missing_bytes(client, admin_token):
    token = signup(client, "victim@example.com")
    file_id = _upload(client, token, "x.csv")["fileId"]
    record = client.get(f"/api/files/{file_id}", headers=auth_headers(token)).json()
    Path(record["filepath"]).unlink()

    response = client.delete(
        f"/api/admin/users/{_user_id(token)}", headers=auth_headers(admin_token)
    )

    assert response.status_code == 200
    assert response.json()["deletedFiles"] == 1
