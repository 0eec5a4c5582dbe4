from datetime import timedelta
from types import SimpleNamespace
from uuid import uuid4

from app.dependencies.auth import identity_from_token
from app.utils.auth import (
    create_access_token,
    create_user_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)


def test_password_hash_round_trip():
    hashed = get_password_hash("correct horse")

    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong horse", hashed)


def test_user_token_carries_identity_and_role():
    user = SimpleNamespace(id=uuid4(), is_admin=True, name="Root")

    identity = identity_from_token(create_user_token(user))

    assert identity.id == user.id
    assert identity.is_admin is True
    assert identity.username == "Root"


def test_expired_token_does_not_decode():
    token = create_access_token({"id": str(uuid4())}, expires_delta=timedelta(seconds=-1))

    assert decode_access_token(token) is None
    assert identity_from_token(token) is None


def test_token_without_usable_id_is_rejected():
    assert identity_from_token(create_access_token({"isAdmin": True})) is None
    assert identity_from_token(create_access_token({"id": "not-a-uuid"})) is None
    assert identity_from_token(None) is None
