"""
Inkpress Backend - Post Route Handlers
=======================================

What:  POST /post, GET /post, GET /post/{id}, PUT /post.
How:   Extract the multipart fields and the single `file` attachment, then
       delegate to PostService.

Request Flow (create / edit):
    1. current_claims verifies the `token` cookie (401 / 403 on failure)
    2. PostCreateInput.as_form / PostEditInput.as_form validate form fields
       (missing title or id → 400 validation_error)
    3. The attachment is read into memory (bounded by MAX_FILE_SIZE checks)
    4. PostService stores the upload and writes the post
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile

from inkpress.dependencies import CurrentClaims, DBSession
from inkpress.schemas.common import ErrorResponse
from inkpress.schemas.post import PostCreateInput, PostEditInput, PostResponse
from inkpress.services.post_service import IncomingFile, post_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Posts"])


async def read_upload(file: Optional[UploadFile]) -> Optional[IncomingFile]:
    """
    Read an optional multipart attachment.

    Browsers submit an empty part (no filename) when the file input is left
    blank; that counts as "no file".
    """
    if file is None or not file.filename:
        return None
    try:
        content = await file.read()
    finally:
        await file.close()
    logger.info(
        "Received upload: filename=%s, size=%d bytes",
        file.filename,
        len(content),
    )
    return IncomingFile(filename=file.filename, content=content, size=file.size)


@router.post(
    "/post",
    response_model=PostResponse,
    responses={
        400: {"description": "Missing field, bad file, or title taken", "model": ErrorResponse},
        401: {"description": "No session cookie", "model": ErrorResponse},
        403: {"description": "Invalid or expired session token", "model": ErrorResponse},
    },
    summary="Create a post with a cover image",
)
async def create_post(
    claims: CurrentClaims,
    db: DBSession,
    data: PostCreateInput = Depends(PostCreateInput.as_form),
    file: Optional[UploadFile] = File(None, description="Cover image"),
) -> PostResponse:
    upload = await read_upload(file)
    return await post_service.create_post(db, claims, data, upload)


@router.get(
    "/post",
    response_model=List[PostResponse],
    summary="Most recent posts, newest first",
)
async def list_posts(db: DBSession) -> List[PostResponse]:
    return await post_service.list_posts(db)


@router.get(
    "/post/{post_id}",
    response_model=PostResponse,
    responses={
        404: {"description": "Post not found", "model": ErrorResponse},
    },
    summary="Get a single post",
)
async def get_post(post_id: str, db: DBSession) -> PostResponse:
    return await post_service.get_post(db, post_id)


@router.put(
    "/post",
    response_model=PostResponse,
    responses={
        400: {"description": "Missing field, bad file, or title taken", "model": ErrorResponse},
        401: {"description": "No session cookie, or not the author", "model": ErrorResponse},
        403: {"description": "Invalid or expired session token", "model": ErrorResponse},
        404: {"description": "Post not found", "model": ErrorResponse},
    },
    summary="Edit a post you authored",
)
async def edit_post(
    claims: CurrentClaims,
    db: DBSession,
    data: PostEditInput = Depends(PostEditInput.as_form),
    file: Optional[UploadFile] = File(None, description="Replacement cover image"),
) -> PostResponse:
    upload = await read_upload(file)
    return await post_service.edit_post(db, claims, data, upload)
