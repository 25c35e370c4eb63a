"""
Inkpress Backend - User & Session Schemas
==========================================

What:  Pydantic models for register/login bodies, user responses and the
       claims carried inside a session token.

The password hash has no field anywhere in this module. Responses are built
from these models only, so the hash cannot be serialized by accident.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class RegisterRequest(BaseModel):
    """Body of POST /register. Both fields required and non-empty."""
    username: str = Field(min_length=1, max_length=150, description="Unique, case-sensitive")
    password: str = Field(min_length=1, description="Plaintext password (max 72 bytes)")

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


class LoginRequest(BaseModel):
    """Body of POST /login."""
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class UserResponse(BaseModel):
    """Public view of a user."""
    id: uuid.UUID
    username: str
    created_at: datetime = Field(serialization_alias="createdAt")

    model_config = {"from_attributes": True}


class RegisterResponse(BaseModel):
    message: str = Field(default="User created successfully!")
    user: UserResponse


class LoginResponse(BaseModel):
    """Returned by POST /login alongside the `token` cookie."""
    id: uuid.UUID
    username: str


# ══════════════════════════════════════════════════════════════════════════
# Session Claims
# ══════════════════════════════════════════════════════════════════════════


class SessionClaims(BaseModel):
    """
    What:  Identity payload embedded in a session token.
    Who:   Built by AuthService.login(), signed by TokenService.issue(),
           recovered by TokenService.verify(), returned as-is by GET /profile.

    `iat` and `exp` are filled in by the token service; they are None on
    claims that have not been issued yet.
    """
    username: str
    id: uuid.UUID
    iat: Optional[int] = None
    exp: Optional[int] = None
