from datetime import timedelta

import jwt
import pytest

from innokit.core.security import create_token, decode_token, hash_password, verify_password


def test_password_hash_roundtrip():
    hashed = hash_password("Secret123!")
    assert hashed != "Secret123!"
    assert verify_password("Secret123!", hashed)
    assert not verify_password("wrong", hashed)


def test_decode_token_returns_claims():
    token = create_token({"sub": "1"}, "secret")
    assert decode_token(token, "secret") == {"sub": "1"}


def test_decode_token_rejects_wrong_secret_and_expired():
    with pytest.raises(jwt.InvalidTokenError):
        decode_token(create_token({"sub": "1"}, "secret"), "other")

    expired = create_token({"sub": "1"}, "secret", expires_delta=timedelta(seconds=-1))
    with pytest.raises(jwt.ExpiredSignatureError):
        decode_token(expired, "secret")
