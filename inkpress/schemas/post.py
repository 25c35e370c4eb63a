"""
Inkpress Backend - Post Schemas
================================

What:  Input structs for the multipart create/edit routes and the post
       response model.
How:   The `as_form` constructors are FastAPI dependencies. FastAPI validates
       each form field (required, non-empty title), so a missing field raises
       RequestValidationError before any handler code runs; the handler gets
       a fully-populated struct.
"""

import uuid
from datetime import datetime
from typing import Optional

from fastapi import Form
from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Input Models
# ══════════════════════════════════════════════════════════════════════════


class PostCreateInput(BaseModel):
    """Fields of POST /post (the `file` part is handled separately)."""
    title: str = Field(min_length=1, max_length=255)
    summary: Optional[str] = None
    content: Optional[str] = None

    @classmethod
    def as_form(
        cls,
        title: str = Form(..., min_length=1, max_length=255),
        summary: Optional[str] = Form(None),
        content: Optional[str] = Form(None),
    ) -> "PostCreateInput":
        return cls(title=title, summary=summary, content=content)


class PostEditInput(BaseModel):
    """Fields of PUT /post. `id` names the post being edited."""
    id: str = Field(min_length=1)
    title: str = Field(min_length=1, max_length=255)
    summary: Optional[str] = None
    content: Optional[str] = None

    @classmethod
    def as_form(
        cls,
        id: str = Form(..., min_length=1),
        title: str = Form(..., min_length=1, max_length=255),
        summary: Optional[str] = Form(None),
        content: Optional[str] = Form(None),
    ) -> "PostEditInput":
        return cls(id=id, title=title, summary=summary, content=content)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class AuthorSummary(BaseModel):
    """The author as exposed on a post: id and username, nothing else."""
    id: uuid.UUID
    username: str

    model_config = {"from_attributes": True}


class PostResponse(BaseModel):
    """
    What:  Full representation of a post.
    Who:   Returned by every post route (create, list items, get, edit).

    cover is the stored relative path (e.g. "uploads/9b1e...4d.jpg"); the
    frontend prefixes it with the API origin.
    """
    id: uuid.UUID
    title: str
    summary: Optional[str] = None
    content: Optional[str] = None
    cover: Optional[str] = None
    author: AuthorSummary
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")

    model_config = {"from_attributes": True}
