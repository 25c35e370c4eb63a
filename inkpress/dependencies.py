"""
Inkpress Backend - Shared Route Dependencies
=============================================

What:  Session verification for protected routes.
How:   Reads the HTTP-only `token` cookie and verifies it with TokenService.

    no cookie            → AuthenticationError (401)
    bad / expired token  → InvalidTokenError   (403)
    valid token          → SessionClaims

Verification is stateless, so calling it on every request costs one HMAC
check and no database round trip.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from inkpress.config import settings
from inkpress.database import get_db_session
from inkpress.exceptions import AuthenticationError
from inkpress.schemas.user import SessionClaims
from inkpress.services.token_service import token_service


def read_session_cookie(request: Request) -> Optional[str]:
    # Read by name from settings so COOKIE_NAME stays configurable
    return request.cookies.get(settings.cookie_name) or None


async def current_claims(
    token: Annotated[Optional[str], Depends(read_session_cookie)],
) -> SessionClaims:
    """Verified identity of the caller; raises instead of returning None."""
    if not token:
        raise AuthenticationError()
    return token_service.verify(token)


DBSession = Annotated[AsyncSession, Depends(get_db_session)]
CurrentClaims = Annotated[SessionClaims, Depends(current_claims)]
