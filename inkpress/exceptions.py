"""
Inkpress Backend - Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for every failure a request can hit.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services, stores and dependencies; caught by global handlers.

Exception Hierarchy:
    InkpressError (base)
    ├── ValidationError            → 400 Bad Request
    │   └── DuplicateError         → 400 (username or title already taken)
    ├── InvalidCredentialsError    → 400 (unknown user or wrong password)
    ├── AuthenticationError        → 401 (no session cookie)
    ├── OwnershipError             → 401 (authenticated, but not the post's author)
    ├── InvalidTokenError          → 403 (bad signature, malformed token)
    │   └── TokenExpiredError      → 403
    ├── NotFoundError              → 404
    ├── RateLimitExceededError     → 429
    ├── FileStorageError           → 500
    └── DatabaseError              → 500

Client-caused failures always map to 4xx. A 500 means something unexpected
happened on our side.
"""

from typing import Any, Dict, Optional


class InkpressError(Exception):
    """
    Base exception for all Inkpress application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only by 4xx handlers)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(InkpressError):
    """
    Raised when client input fails validation.

    When:    Missing required field, empty upload, file too large.
    HTTP:    400 Bad Request

    FastAPI's own RequestValidationError is mapped to the same response
    shape, so a missing form field and a business-rule failure look alike
    to the client.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class DuplicateError(ValidationError):
    """
    Raised when a unique field collides with an existing record.

    When:    Registering a taken username; creating or renaming a post to a
             title that already exists.
    HTTP:    400 Bad Request

    The stores raise this from the database's IntegrityError, never from a
    read-before-write check.
    """

    def __init__(
        self,
        field: str,
        value: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"A record with this {field} already exists"
        if value is not None:
            message = f"{field.capitalize()} '{value}' is already taken"
        super().__init__(message=message, field=field, context=context)
        self.value = value


class InvalidCredentialsError(InkpressError):
    """
    Raised by login when the username is unknown or the password is wrong.

    HTTP:    400 Bad Request
    No cookie is ever set when this is raised.
    """

    def __init__(
        self,
        message: str = "Invalid credentials",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthenticationError(InkpressError):
    """
    Raised when a protected route is called without a session cookie.

    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class OwnershipError(InkpressError):
    """
    Raised when a valid session tries to edit a post it does not own.

    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        post_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if post_id:
            ctx["post_id"] = post_id
        super().__init__(message="Unauthorized: only the author can edit this post", context=ctx)


class InvalidTokenError(InkpressError):
    """
    Raised when a session token fails verification.

    When:    Bad signature, tampered payload, malformed token, missing claims.
    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "Forbidden: invalid session token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class TokenExpiredError(InvalidTokenError):
    """Raised when a correctly signed token is past its `exp` claim (403)."""

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Forbidden: session token has expired", context=context)


class NotFoundError(InkpressError):
    """
    Raised when a requested resource does not exist.

    When:    GET /post/{id} with an unknown (or malformed) id, PUT /post for a
             post that is not there.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource.capitalize()} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class FileStorageError(InkpressError):
    """
    Raised when file system operations fail.

    When:    Disk full, permission denied, upload directory not writable.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(InkpressError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the context is
    logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(InkpressError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests (with Retry-After header)
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
