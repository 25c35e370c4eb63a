"""
Inkpress Backend - Post SQLAlchemy Model
=========================================

What:  ORM model representing the `posts` table.
Who:   Used by PostStore for CRUD operations and by Alembic for schema management.

Table Design:
    - UUID primary key
    - title: UNIQUE constraint, case-sensitive exact match
    - summary / content: optional free text (TEXT, no length limit)
    - cover: relative path of the uploaded image (e.g. uploads/3f2a...c1.png),
      served read-only under UPLOAD_URL_PREFIX
    - author_id: FK to users.id, set at creation and never changed
    - created_at / updated_at: UTC with timezone

    Index on created_at DESC:
        Serves the only listing query: "the 20 most recent posts".
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inkpress.database import Base
from inkpress.models.user import User


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Post(Base):
    """
    A blog post owned by exactly one author.

    Lifecycle:
        1. Created by POST /post with the caller as author
        2. Mutated only via PUT /post by that same author
        3. Never deleted

    Query Patterns:
        - List recent: SELECT ... ORDER BY created_at DESC LIMIT 20
        - Get one:     SELECT ... WHERE id = :uuid
        Both eagerly load the author row (username only is exposed).
    """

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
    )

    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cover: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)

    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
    )

    # lazy="raise": an accidental lazy load inside async code fails loudly
    # instead of hitting the database from a sync context
    author: Mapped[User] = relationship(back_populates="posts", lazy="raise")

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

    def __repr__(self) -> str:
        return (
            f"<Post(id={self.id}, title='{self.title}', "
            f"author_id={self.author_id})>"
        )


# Serves the "most recent posts" listing
Index("idx_posts_created_at", Post.created_at.desc())
