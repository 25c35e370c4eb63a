"""
Inkpress Backend - Auth Route Handlers
=======================================

What:  POST /register, POST /login, POST /logout, GET /profile.
How:   Thin handlers: parse the JSON body, call AuthService, manage the
       `token` cookie.

Cookie contract:
    login  → Set-Cookie: token=<jwt>; HttpOnly; Path=/; SameSite=<cfg>[; Secure]
    logout → same cookie name, empty value, already expired
"""

import logging

from fastapi import APIRouter, Response

from inkpress.config import settings
from inkpress.dependencies import CurrentClaims, DBSession
from inkpress.schemas.common import ErrorResponse, MessageResponse
from inkpress.schemas.user import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    SessionClaims,
)
from inkpress.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    responses={
        400: {"description": "Missing field or username taken", "model": ErrorResponse},
    },
    summary="Register a new user",
)
async def register(data: RegisterRequest, db: DBSession) -> RegisterResponse:
    return await auth_service.register(db, data)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "User not found or invalid credentials", "model": ErrorResponse},
    },
    summary="Log in and receive the session cookie",
)
async def login(data: LoginRequest, response: Response, db: DBSession) -> LoginResponse:
    """
    Verify credentials and set the HTTP-only `token` cookie.

    The cookie is only attached on success; a failed login raises before
    set_cookie() runs.
    """
    result, token = await auth_service.login(db, data)
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
        max_age=settings.token_expire_minutes * 60,
    )
    return result


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Clear the session cookie",
)
async def logout(response: Response) -> MessageResponse:
    """
    Overwrite `token` with an expired, empty cookie.

    Tokens are stateless: this ends the browser session, it does not revoke
    a copy of the token held elsewhere.
    """
    response.delete_cookie(
        key=settings.cookie_name,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )
    return MessageResponse(message="Logged out")


@router.get(
    "/profile",
    response_model=SessionClaims,
    responses={
        401: {"description": "No session cookie", "model": ErrorResponse},
        403: {"description": "Invalid or expired session token", "model": ErrorResponse},
    },
    summary="Decoded claims of the current session",
)
async def profile(claims: CurrentClaims) -> SessionClaims:
    return claims
