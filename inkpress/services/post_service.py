"""
Inkpress Backend - Post Service (Content API Orchestrator)
===========================================================

What:  Create, list, fetch and edit posts with ownership enforcement.
How:   Composes UserStore, PostStore and UploadService. Routes hand in the
       verified session claims; this layer never looks at cookies.
Who:   Called by the /post route handlers.

Orchestration Flow (POST /post):
    ┌──────────┐    ┌────────────┐    ┌──────────────┐    ┌──────────┐
    │  Claims  │───▶│  Resolve   │───▶│ Store upload │───▶│  Insert  │
    │ (cookie) │    │  author    │    │ (rename ext) │    │  (flush) │
    └──────────┘    └────────────┘    └──────────────┘    └──────────┘

Orchestration Flow (PUT /post):
    parse id → load post → author check → store upload (if any)
    → overwrite title/summary/content (+cover) → flush

    On a failed insert/flush the freshly stored upload is removed again.

Ownership:
    post.author_id and claims.id are both uuid.UUID; the check is plain value
    equality on those, never a comparison of their string forms.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, NamedTuple, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from inkpress.config import settings
from inkpress.exceptions import (
    DatabaseError,
    InvalidTokenError,
    NotFoundError,
    OwnershipError,
    ValidationError,
)
from inkpress.models import Post
from inkpress.schemas.post import PostCreateInput, PostEditInput, PostResponse
from inkpress.schemas.user import SessionClaims
from inkpress.services.post_store import post_store
from inkpress.services.upload_service import UPLOAD_FIELD, upload_service
from inkpress.services.user_store import user_store

logger = logging.getLogger(__name__)


class IncomingFile(NamedTuple):
    """An attachment already read from the multipart body."""
    filename: str
    content: bytes
    size: Optional[int] = None


def parse_post_id(raw: str) -> uuid.UUID:
    """
    Turn a client-supplied id into a UUID.

    A malformed id cannot name any post, so it is reported as not found
    rather than as a validation error.
    """
    try:
        return uuid.UUID(raw)
    except (ValueError, AttributeError, TypeError):
        raise NotFoundError(resource="post", resource_id=str(raw))


class PostService:
    """
    Business logic for post operations.

    Error Handling Strategy:
        Application exceptions (DuplicateError, OwnershipError, ...) propagate
        untouched. Unexpected SQLAlchemy failures are logged and wrapped in
        DatabaseError so no SQL reaches the client.
    """

    async def create_post(
        self,
        db: AsyncSession,
        claims: SessionClaims,
        data: PostCreateInput,
        upload: Optional[IncomingFile],
    ) -> PostResponse:
        """
        Create a post authored by the session user.

        Raises:
            ValidationError: no cover file attached, or the file is empty/too big
            InvalidTokenError: token names a user that does not exist
            DuplicateError: title already taken
        """
        if upload is None:
            raise ValidationError(message="A cover image file is required.", field=UPLOAD_FIELD)

        author = await user_store.find_by_id(db, claims.id)
        if author is None:
            logger.warning("Session for unknown user %s tried to create a post", claims.id)
            raise InvalidTokenError(message="Forbidden: session user does not exist")

        absolute_path, cover = await upload_service.store(
            filename=upload.filename,
            content=upload.content,
            content_length=upload.size,
        )

        try:
            post = await post_store.create(
                db,
                title=data.title,
                summary=data.summary,
                content=data.content,
                cover=cover,
                author=author,
            )
        except Exception as e:
            await upload_service.cleanup(absolute_path)
            raise self._translate(e, "creating post")

        logger.info("Post created: %s '%s' by %s", post.id, post.title, author.username)
        return PostResponse.model_validate(post)

    async def list_posts(self, db: AsyncSession, limit: Optional[int] = None) -> List[PostResponse]:
        """The most recent posts (POST_LIST_LIMIT, default 20), newest first."""
        try:
            posts = await post_store.list_recent(db, limit or settings.post_list_limit)
        except SQLAlchemyError as e:
            raise self._translate(e, "listing posts")
        return [PostResponse.model_validate(post) for post in posts]

    async def get_post(self, db: AsyncSession, post_id: str) -> PostResponse:
        """
        Raises:
            NotFoundError: unknown or malformed id
        """
        post = await self._load(db, post_id)
        return PostResponse.model_validate(post)

    async def edit_post(
        self,
        db: AsyncSession,
        claims: SessionClaims,
        data: PostEditInput,
        upload: Optional[IncomingFile],
    ) -> PostResponse:
        """
        Overwrite a post's title, summary and content, and its cover when a
        new file is attached. Without a file the existing cover is kept.

        Raises:
            NotFoundError: unknown or malformed id
            OwnershipError: session user is not the author (post unchanged)
            DuplicateError: new title collides with another post
        """
        post = await self._load(db, data.id)

        if post.author_id != claims.id:
            logger.warning(
                "Edit denied: user %s is not the author of post %s", claims.id, post.id
            )
            raise OwnershipError(post_id=str(post.id))

        absolute_path: Optional[str] = None
        if upload is not None:
            absolute_path, cover = await upload_service.store(
                filename=upload.filename,
                content=upload.content,
                content_length=upload.size,
            )
            post.cover = cover

        post.title = data.title
        post.summary = data.summary
        post.content = data.content
        post.updated_at = datetime.now(timezone.utc)

        try:
            await post_store.save(db, post)
        except Exception as e:
            if absolute_path:
                await upload_service.cleanup(absolute_path)
            raise self._translate(e, "saving post")

        logger.info("Post edited: %s by %s", post.id, claims.username)
        return PostResponse.model_validate(post)

    async def _load(self, db: AsyncSession, raw_id: str) -> Post:
        post_id = parse_post_id(raw_id)
        try:
            post = await post_store.find_by_id(db, post_id)
        except SQLAlchemyError as e:
            raise self._translate(e, "fetching post")
        if post is None:
            raise NotFoundError(resource="post", resource_id=str(post_id))
        return post

    @staticmethod
    def _translate(error: Exception, action: str) -> Exception:
        """Leave application errors alone; wrap database faults in DatabaseError."""
        if not isinstance(error, SQLAlchemyError):
            return error
        logger.error("Database error %s: %s", action, str(error), exc_info=True)
        return DatabaseError(
            message="Could not complete the request. Please try again.",
            context={"action": action, "error_type": type(error).__name__},
        )


# ── Singleton Instance ────────────────────────────────────────────────────
post_service = PostService()
