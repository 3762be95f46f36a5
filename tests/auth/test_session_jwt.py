"""Tests for session token management."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from atompoint.auth.jwt import create_access_token, verify_token
from atompoint.config import get_settings


def _encode(**overrides):
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload = {
        "sub": "1",
        "username": "alice",
        "iat": now,
        "exp": now + timedelta(days=1),
        "iss": settings.jwt_issuer,
        "type": "access",
    }
    payload.update(overrides)
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


class TestAccessToken:
    def test_create_and_verify(self):
        token = create_access_token(user_id=7, username="alice")
        payload = verify_token(token)
        assert payload["sub"] == "7"
        assert payload["username"] == "alice"
        assert payload["type"] == "access"

    def test_expires_after_seven_days(self):
        payload = verify_token(create_access_token(user_id=1, username="alice"))
        assert payload["exp"] - payload["iat"] == 7 * 24 * 60 * 60

    def test_expired_token_rejected(self):
        past = datetime.now(timezone.utc) - timedelta(days=8)
        token = _encode(iat=past, exp=past + timedelta(days=7))
        with pytest.raises(jwt.ExpiredSignatureError):
            verify_token(token)

    def test_wrong_type_rejected(self):
        with pytest.raises(jwt.InvalidTokenError, match="Expected token type"):
            verify_token(_encode(type="refresh"))

    def test_wrong_issuer_rejected(self):
        with pytest.raises(jwt.InvalidIssuerError):
            verify_token(_encode(iss="someone-else"))

    def test_bad_signature_rejected(self):
        token = jwt.encode(
            {"sub": "1", "iat": datetime.now(timezone.utc), "exp": datetime.now(timezone.utc) + timedelta(days=1)},
            "a-completely-different-secret-of-sufficient-length",
            algorithm="HS256",
        )
        with pytest.raises(jwt.InvalidSignatureError):
            verify_token(token)

    def test_garbage_rejected(self):
        with pytest.raises(jwt.InvalidTokenError):
            verify_token("not.a.token")
