"""
Inkpress Backend - Token Service Unit Tests
============================================

What we test:
    ✅ issue → verify returns the same identity
    ✅ Tampered, foreign-key and garbage tokens → InvalidTokenError
    ✅ Expired token → TokenExpiredError
    ✅ Signed payloads that are not session claims are rejected
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt
import pytest

from inkpress.config import settings
from inkpress.exceptions import InvalidTokenError, TokenExpiredError
from inkpress.schemas.user import SessionClaims
from inkpress.services.token_service import TokenService

TEST_SECRET_KEY = settings.secret_key


class TestTokenService:

    def setup_method(self):
        self.service = TokenService(secret_key=TEST_SECRET_KEY, expire_minutes=60)
        self.claims = SessionClaims(username="alice", id=uuid4())

    def test_round_trip_preserves_identity(self):
        token = self.service.issue(self.claims)
        verified = self.service.verify(token)

        assert (verified.username, verified.id) == (self.claims.username, self.claims.id)
        assert verified.exp - verified.iat == 3600

    def test_tampered_token_rejected(self):
        token = self.service.issue(self.claims)
        header, payload, signature = token.split(".")
        flipped = "A" if signature[0] != "A" else "B"
        tampered = ".".join([header, payload, flipped + signature[1:]])

        with pytest.raises(InvalidTokenError):
            self.service.verify(tampered)

    def test_token_from_other_key_rejected(self):
        other = TokenService(secret_key="another-secret-key-that-is-32-bytes+", expire_minutes=60)
        token = other.issue(self.claims)

        with pytest.raises(InvalidTokenError) as exc_info:
            self.service.verify(token)
        assert not isinstance(exc_info.value, TokenExpiredError)

    def test_garbage_rejected(self):
        with pytest.raises(InvalidTokenError):
            self.service.verify("not-a-token")

    def test_expired_token(self):
        two_hours_ago = datetime.now(timezone.utc) - timedelta(hours=2)
        token = self.service.issue(self.claims, now=two_hours_ago)

        with pytest.raises(TokenExpiredError):
            self.service.verify(token)

    def test_missing_claim_rejected(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"username": "alice", "iat": now, "exp": now + timedelta(minutes=5)},
            TEST_SECRET_KEY,
            algorithm="HS256",
        )
        with pytest.raises(InvalidTokenError):
            self.service.verify(token)

    def test_non_uuid_id_rejected(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"username": "alice", "id": "42", "iat": now, "exp": now + timedelta(minutes=5)},
            TEST_SECRET_KEY,
            algorithm="HS256",
        )
        with pytest.raises(InvalidTokenError):
            self.service.verify(token)
