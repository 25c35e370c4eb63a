"""
Inkpress Backend - Auth Service
================================

What:  Registration and login.
How:   Composes UserStore, PasswordHasher and TokenService.
Who:   Called by the /register and /login route handlers.

Flows:
    register: hash password (fresh salt) → insert user → public user view
              A taken username surfaces as DuplicateError from the store.
    login:    lookup by exact username → bcrypt verify → issue token
              Unknown user and wrong password both raise
              InvalidCredentialsError (400) and no token is issued.

The route sets the cookie; this service only hands back the token string.
"""

import logging
from typing import Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from inkpress.exceptions import InvalidCredentialsError
from inkpress.schemas.user import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    SessionClaims,
    UserResponse,
)
from inkpress.services.password_hasher import password_hasher
from inkpress.services.token_service import token_service
from inkpress.services.user_store import user_store

logger = logging.getLogger(__name__)


class AuthService:
    """Stateless; every call receives the request's session."""

    async def register(self, db: AsyncSession, data: RegisterRequest) -> RegisterResponse:
        """
        Create a user account.

        Raises:
            DuplicateError: username already registered
        """
        password_hash = await password_hasher.hash_async(data.password)
        user = await user_store.create_user(db, data.username, password_hash)
        logger.info("User registered: %s (%s)", user.username, user.id)
        return RegisterResponse(user=UserResponse.model_validate(user))

    async def login(self, db: AsyncSession, data: LoginRequest) -> Tuple[LoginResponse, str]:
        """
        Check credentials and issue a session token.

        Returns:
            (public login payload, signed token for the cookie)

        Raises:
            InvalidCredentialsError: unknown username or wrong password
        """
        user = await user_store.find_by_username(db, data.username)
        if user is None:
            logger.info("Login failed: unknown user '%s'", data.username)
            raise InvalidCredentialsError(message="User not found")

        if not await password_hasher.verify_async(data.password, user.password_hash):
            logger.info("Login failed: wrong password for '%s'", data.username)
            raise InvalidCredentialsError(message="Invalid credentials")

        token = token_service.issue(SessionClaims(username=user.username, id=user.id))
        logger.info("User logged in: %s", user.username)
        return LoginResponse(id=user.id, username=user.username), token


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService()
