from datetime import timedelta

import pytest

from app.core.auth.service import AuthService


def test_password_hash_roundtrip():
    hashed = AuthService.get_password_hash("password123")

    assert hashed != "password123"
    assert AuthService.verify_password("password123", hashed)
    assert not AuthService.verify_password("password124", hashed)


def test_verify_against_garbage_hash_is_false():
    assert AuthService.verify_password("password123", "not-a-bcrypt-hash") is False


def test_token_carries_user_id():
    token = AuthService.create_access_token({"user_id": 7, "username": "alice_carrier"})

    payload = AuthService.verify_token(token)
    assert payload["user_id"] == 7
    assert payload["username"] == "alice_carrier"


def test_token_requires_user_id():
    with pytest.raises(ValueError):
        AuthService.create_access_token({"username": "alice_carrier"})


def test_expired_or_tampered_token_is_rejected():
    expired = AuthService.create_access_token({"user_id": 1}, expires_delta=timedelta(minutes=-1))
    assert AuthService.verify_token(expired) is None
    assert AuthService.verify_token("not.a.token") is None
