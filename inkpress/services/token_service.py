"""
Inkpress Backend - Session Token Service
=========================================

What:  Issues and verifies signed, time-bound session tokens (JWT, HS256).
How:   issue() signs {username, id, iat, exp} with the process-wide secret;
       verify() checks signature and expiry and returns the claims.
Who:   AuthService.login() issues; the `current_claims` dependency verifies
       the `token` cookie on every protected request.

Sessions are stateless. There is no session table and verify() never touches
the database, so a token stays valid until `exp` even after logout (logout
only clears the browser cookie).

Failure mapping:
    jwt.ExpiredSignatureError → TokenExpiredError   (403)
    any other jwt.InvalidTokenError (bad signature, garbage, missing claims)
                              → InvalidTokenError   (403)
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from pydantic import ValidationError as PydanticValidationError

from inkpress.config import settings
from inkpress.exceptions import InvalidTokenError, TokenExpiredError
from inkpress.schemas.user import SessionClaims

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ["username", "id", "exp", "iat"]


class TokenService:
    """
    Signs and verifies session tokens.

    The secret is captured once at construction. Tests build their own
    instance with a short lifetime or a different key.
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        expire_minutes: Optional[int] = None,
    ):
        self._secret_key = secret_key or settings.secret_key
        self.algorithm = algorithm or settings.token_algorithm
        self.lifetime = timedelta(minutes=expire_minutes or settings.token_expire_minutes)

    def issue(self, claims: SessionClaims, now: Optional[datetime] = None) -> str:
        """
        Sign a token for the given identity.

        Args:
            claims: username and id to embed; any iat/exp on it are ignored
            now: override of the issue time (tests use it to mint expired tokens)

        Returns:
            Compact JWT string, suitable for the `token` cookie
        """
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "username": claims.username,
            "id": str(claims.id),
            "iat": issued_at,
            "exp": issued_at + self.lifetime,
        }
        return jwt.encode(payload, self._secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> SessionClaims:
        """
        Verify signature and expiry, returning the embedded claims.

        Raises:
            TokenExpiredError: signature valid, `exp` in the past
            InvalidTokenError: anything else wrong with the token
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.algorithm],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError()
        except jwt.InvalidTokenError as e:
            logger.info("Rejected session token: %s", type(e).__name__)
            raise InvalidTokenError(context={"reason": type(e).__name__})

        try:
            return SessionClaims.model_validate(payload)
        except PydanticValidationError:
            # Correctly signed but not one of ours (e.g. non-UUID id)
            raise InvalidTokenError(context={"reason": "malformed_claims"})


# ── Singleton Instance ────────────────────────────────────────────────────
token_service = TokenService()
