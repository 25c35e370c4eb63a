"""
Inkpress Backend - Post Store
==============================

What:  Persistence for post records: create, lookup by id, in-place save,
       and the reverse-chronological listing.
How:   Async SQLAlchemy queries that always eager-load the author row with
       selectinload(). Post.author is lazy="raise", so forgetting the option
       fails in tests instead of silently issuing sync IO.

Title uniqueness works like username uniqueness: the unique constraint
decides, and IntegrityError from flush becomes DuplicateError(field="title").
That covers both create() and a rename through save().

Query plan for list_recent():
    SELECT posts.* FROM posts ORDER BY created_at DESC LIMIT :limit
    SELECT users.* FROM users WHERE users.id IN (...)     -- selectinload
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from inkpress.exceptions import DuplicateError
from inkpress.models import Post, User

logger = logging.getLogger(__name__)


class PostStore:
    """Data access for the `posts` table."""

    async def create(
        self,
        db: AsyncSession,
        title: str,
        summary: Optional[str],
        content: Optional[str],
        cover: Optional[str],
        author: User,
    ) -> Post:
        """
        Insert a new post owned by `author`.

        The author is passed as a loaded User (not just an id) so the new
        post serializes with its author without another query.

        Raises:
            DuplicateError(field="title") if the title is taken
        """
        post = Post(
            title=title,
            summary=summary,
            content=content,
            cover=cover,
            author_id=author.id,
            author=author,
        )
        db.add(post)
        await self._flush_unique_title(db, title)
        return post

    async def find_by_id(self, db: AsyncSession, post_id: uuid.UUID) -> Optional[Post]:
        """Fetch one post with its author loaded, or None."""
        result = await db.execute(
            select(Post)
            .options(selectinload(Post.author))
            .where(Post.id == post_id)
        )
        return result.scalar_one_or_none()

    async def list_recent(self, db: AsyncSession, limit: int) -> List[Post]:
        """
        Newest posts first, at most `limit` of them.

        Ordering is strictly created_at DESC; posts sharing a timestamp come
        back in whatever order the database returns them.
        """
        result = await db.execute(
            select(Post)
            .options(selectinload(Post.author))
            .order_by(desc(Post.created_at))
            .limit(limit)
        )
        return list(result.scalars().all())

    async def save(self, db: AsyncSession, post: Post) -> Post:
        """
        Persist in-place changes to an already-loaded post.

        Raises:
            DuplicateError(field="title") if the post was renamed onto an
            existing title
        """
        await self._flush_unique_title(db, post.title)
        return post

    async def _flush_unique_title(self, db: AsyncSession, title: str) -> None:
        try:
            await db.flush()
        except IntegrityError:
            logger.info("Post rejected: title '%s' already exists", title)
            raise DuplicateError(field="title", value=title)


# ── Singleton Instance ────────────────────────────────────────────────────
post_store = PostStore()
