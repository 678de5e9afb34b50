"""Tests for password hashing and access tokens."""
from datetime import timedelta

import pytest
from jose import jwt

from market.core.config import settings
from market.core.errors import Unauthorized
from market.core.security import PasswordHasher, TokenClaims, create_access_token, decode_access_token
from market.models.user import Role


def test_password_hash_verify():
    hasher = PasswordHasher(["pbkdf2_sha256"])
    digest = hasher.hash("secret123")
    assert hasher.verify("secret123", digest)
    assert not hasher.verify("secret124", digest)


def test_verify_against_garbage_digest():
    assert not PasswordHasher(["pbkdf2_sha256"]).verify("secret123", "not-a-hash")


def test_token_carries_claims():
    token = create_access_token(TokenClaims(user_id=3, role=Role.admin, email="a@b.c", username="a"))
    claims = decode_access_token(token)
    assert claims == TokenClaims(user_id=3, role=Role.admin, email="a@b.c", username="a")
    assert claims.is_admin


def test_expired_token():
    token = create_access_token(TokenClaims(user_id=3, role=Role.customer), expires_delta=timedelta(seconds=-1))
    with pytest.raises(Unauthorized):
        decode_access_token(token)


def test_token_signed_with_other_key():
    token = jwt.encode({"user_id": 3, "role": "admin"}, "some-other-key", algorithm=settings.ALGORITHM)
    with pytest.raises(Unauthorized):
        decode_access_token(token)


@pytest.mark.parametrize("payload", [
    {"role": "customer"},
    {"user_id": "3", "role": "customer"},
    {"user_id": 3, "role": "superuser"},
])
def test_malformed_claims(payload):
    token = jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    with pytest.raises(Unauthorized):
        decode_access_token(token)
