"""Tests for token and password helpers."""

from datetime import timedelta

from jose import jwt

from welltrack.config import settings
from welltrack.core.security import (
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
    get_password_hash,
    hash_token,
    verify_password,
)


def test_access_token_round_trip() -> None:
    """Test creating and decoding an access token."""
    token = create_access_token("user-1", "alex@example.com")

    payload = decode_access_token(token)

    assert payload is not None
    assert payload["sub"] == "user-1"
    assert payload["email"] == "alex@example.com"
    assert payload["type"] == "access"


def test_token_types_are_not_interchangeable() -> None:
    """Test that token types are checked."""
    access = create_access_token("user-1", "alex@example.com")
    refresh, _ = create_refresh_token("user-1")

    assert decode_refresh_token(access) is None
    assert decode_access_token(refresh) is None
    assert decode_refresh_token(refresh)["sub"] == "user-1"


def test_expired_token_is_rejected() -> None:
    """Test decoding an expired token."""
    token = create_access_token("user-1", "alex@example.com", expires_delta=timedelta(seconds=-1))

    assert decode_access_token(token) is None


def test_wrong_signature_is_rejected() -> None:
    """Test decoding a token signed with another key."""
    forged = jwt.encode({"sub": "user-1", "type": "access"}, "not-the-secret", algorithm=settings.jwt_algorithm)

    assert decode_access_token(forged) is None


def test_refresh_tokens_are_unique() -> None:
    """Test that refresh tokens are unique."""
    first, _ = create_refresh_token("user-1")
    second, _ = create_refresh_token("user-1")

    assert first != second


def test_password_hashing() -> None:
    """Test hashing and verifying passwords."""
    hashed = get_password_hash("correct-horse-battery")

    assert hashed != "correct-horse-battery"
    assert verify_password("correct-horse-battery", hashed)
    assert not verify_password("wrong", hashed)


def test_hash_token_is_stable_sha256() -> None:
    """Test hashing stored tokens."""
    assert hash_token("abc") == hash_token("abc")
    assert len(hash_token("abc")) == 64
