"""
Inkpress Backend - Request ID Middleware
=========================================

What:  Tags each request with a short correlation ID, exposed to loggers and
       exception handlers and echoed in the X-Request-ID response header.
How:   A client-supplied X-Request-ID is reused only when it is a plain token
       (letters, digits, "-", "_", ".", at most 64 chars); anything else would
       end up verbatim in log lines, so it is replaced by 8 random hex chars.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

HEADER = "X-Request-ID"

_CLIENT_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")

# Per-task value; concurrent requests never see each other's ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def resolve_request_id(client_value: Optional[str]) -> str:
    if client_value and _CLIENT_ID.fullmatch(client_value):
        return client_value
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(HEADER))
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[HEADER] = rid
        return response
