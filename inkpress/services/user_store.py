"""
Inkpress Backend - Credential Store
====================================

What:  Persistence for user records.
How:   Thin async SQLAlchemy layer. Only flushes; the request's session
       dependency owns the commit.

Username uniqueness is the database's job. create_user() inserts straight
away and translates the unique-constraint IntegrityError, with no
"does it exist?" query first, so two concurrent registrations for the same
name cannot both succeed.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from inkpress.exceptions import DuplicateError
from inkpress.models import User

logger = logging.getLogger(__name__)


class UserStore:
    """Data access for the `users` table."""

    async def create_user(self, db: AsyncSession, username: str, password_hash: str) -> User:
        """
        Insert a new user.

        Raises:
            DuplicateError(field="username") if the name is taken
        """
        user = User(username=username, password_hash=password_hash)
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            logger.info("Registration rejected: username '%s' already exists", username)
            raise DuplicateError(field="username", value=username)
        return user

    async def find_by_username(self, db: AsyncSession, username: str) -> Optional[User]:
        """Exact, case-sensitive lookup. None when no such user exists."""
        result = await db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def find_by_id(self, db: AsyncSession, user_id: uuid.UUID) -> Optional[User]:
        return await db.get(User, user_id)


# ── Singleton Instance ────────────────────────────────────────────────────
user_store = UserStore()
