"""
Inkpress Backend - User SQLAlchemy Model
=========================================

What:  ORM model representing the `users` table.
Who:   Used by UserStore for registration and login lookups, by PostStore to
       resolve post authors, and by Alembic for schema management.

Table Design:
    - UUID primary key: non-sequential, safe to embed in session tokens
    - username: UNIQUE constraint; case-sensitive exact match. Uniqueness is
      enforced here and nowhere else, so concurrent registrations race on the
      insert and exactly one wins.
    - password_hash: bcrypt output (60 chars); never leaves the service layer
    - Rows are immutable after registration (no update/delete operation)
"""

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List

from sqlalchemy import DateTime, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inkpress.database import Base

if TYPE_CHECKING:
    from inkpress.models.post import Post


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """A registered author."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    username: Mapped[str] = mapped_column(
        String(150),
        nullable=False,
        unique=True,
        index=True,
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    posts: Mapped[List["Post"]] = relationship(back_populates="author", lazy="raise")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
