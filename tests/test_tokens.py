"""
Tests for session tokens and password hashing.
"""

from datetime import timedelta

import jwt
import pytest

from inkpress.auth import (
    TokenExpiredError,
    TokenMalformedError,
    TokenService,
    TokenSignatureError,
    hash_password,
    verify_password,
)
from inkpress.core.models import Identity, Role
from inkpress.core.utils import utc_now


@pytest.fixture
def identity():
    return Identity(id="user_1", username="alice", email="alice@example.com", role=Role.ADMIN)


class TestTokenService:
    def test_issue_then_verify(self, tokens, identity):
        claims = tokens.verify(tokens.issue(identity))

        assert claims.sub == "user_1"
        assert claims.email == "alice@example.com"
        assert claims.role == Role.ADMIN
        assert claims.jti.startswith("tok_")

    def test_expires_after_seven_days(self, tokens, identity):
        claims = tokens.verify(tokens.issue(identity))
        assert claims.exp - claims.iat == timedelta(days=7)

    def test_expired_token(self, tokens, identity):
        token = tokens.issue(identity, now=utc_now() - timedelta(days=8))
        with pytest.raises(TokenExpiredError):
            tokens.verify(token)

    def test_other_secret_is_signature_error(self, tokens, identity):
        token = TokenService("another-secret").issue(identity)
        with pytest.raises(TokenSignatureError):
            tokens.verify(token)

    def test_garbage_is_malformed(self, tokens):
        with pytest.raises(TokenMalformedError):
            tokens.verify("invalid-token")

    def test_missing_subject_is_malformed(self, tokens):
        now = utc_now()
        token = jwt.encode({"iat": now, "exp": now + timedelta(hours=1)}, "test-secret", algorithm="HS256")
        with pytest.raises(TokenMalformedError):
            tokens.verify(token)

    def test_unknown_role_is_malformed(self, tokens):
        now = utc_now()
        token = jwt.encode(
            {"sub": "user_1", "role": "superuser", "iat": now, "exp": now + timedelta(hours=1)},
            "test-secret",
            algorithm="HS256",
        )
        with pytest.raises(TokenMalformedError):
            tokens.verify(token)


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("password123")
        assert verify_password("password123", hashed)
        assert not verify_password("wrong", hashed)

    def test_salted(self):
        assert hash_password("same") != hash_password("same")

    def test_bad_hash_format(self):
        assert not verify_password("anything", "not-a-hash")
