"""
Inkpress Backend - FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn inkpress.main:app).
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌─────────────────────────────────────────────────────────┐
    │                      FastAPI App                        │
    │                                                         │
    │  Middleware Chain:                                      │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────────┐  │
    │  │  Rate Limit  │→│ Req ID   │→│  Logging            │  │
    │  └──────────────┘ └──────────┘ └─────────────────────┘  │
    │                                                         │
    │  Routes:                                                │
    │  ┌──────────────────┐ ┌───────────────┐ ┌───────────┐   │
    │  │ /register /login │ │ /post         │ │ /health   │   │
    │  │ /logout /profile │ │ /post/{id}    │ │ /uploads  │   │
    │  └──────────────────┘ └───────────────┘ └───────────┘   │
    │                                                         │
    │  Exception Handlers:                                    │
    │  ┌───────────────────────────────────────────────────┐  │
    │  │ Validation→400 │ Auth→401 │ Token→403 │ 404 │ 500 │  │
    │  └───────────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (logged, not fatal)
    3. Create the upload directory
    4. Create tables when DB_CREATE_TABLES is set (local/dev only)

    Shutdown:
    1. Dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from inkpress import __version__
from inkpress.config import settings
from inkpress.database import create_tables, dispose_engine
from inkpress.exceptions import (
    AuthenticationError,
    DatabaseError,
    DuplicateError,
    FileStorageError,
    InkpressError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    OwnershipError,
    ValidationError,
)
from inkpress.middleware.logging import RequestLoggingMiddleware
from inkpress.middleware.rate_limit import RateLimitMiddleware
from inkpress.middleware.request_id import RequestIDMiddleware, request_id_var
from inkpress.routes import auth, health, posts

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Level:  LOG_LEVEL (default INFO), written to stdout.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-request noise from libraries; our own access log covers it
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)


def ensure_upload_dir() -> Path:
    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    return upload_dir


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Code before yield runs on startup, code after yield on shutdown."""
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Inkpress Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: a dev box without SECRET_KEY should still boot
        logger.error("Configuration error: %s", str(e))

    upload_dir = ensure_upload_dir()
    logger.info("Upload directory: %s", upload_dir.resolve())

    if settings.db_create_tables:
        await create_tables()
        logger.info("Database tables ensured (DB_CREATE_TABLES=true)")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Inkpress Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details=None) -> dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and one error body shape:
    {"error", "message", "details"?, "request_id"}.

    Handler hierarchy:
        ValidationError / DuplicateError → 400
        RequestValidationError           → 400 (missing or malformed fields)
        InvalidCredentialsError          → 400
        AuthenticationError              → 401 (no session cookie)
        OwnershipError                   → 401 (not the post's author)
        InvalidTokenError                → 403 (bad or expired token)
        NotFoundError                    → 404
        FileStorageError / DatabaseError → 500
        InkpressError / Exception        → 500

    Internal details (stack traces, SQL, file paths) are logged, never returned.
    Rate limiting answers 429 from its middleware.
    """

    @app.exception_handler(DuplicateError)
    async def handle_duplicate(request: Request, exc: DuplicateError):
        logger.info("Duplicate %s rejected: %s", exc.field, exc.value)
        return JSONResponse(
            status_code=400,
            content=_error_body("duplicate", exc.message, exc.context),
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Missing or malformed JSON/form fields, reported as 400 rather than 422."""
        fields = []
        for err in exc.errors():
            loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query")]
            fields.append({"field": ".".join(loc), "message": err.get("msg", "")})
        return JSONResponse(
            status_code=400,
            content=_error_body(
                "validation_error", "Request validation failed", {"fields": fields}
            ),
        )

    @app.exception_handler(InvalidCredentialsError)
    async def handle_invalid_credentials(request: Request, exc: InvalidCredentialsError):
        return JSONResponse(
            status_code=400,
            content=_error_body("invalid_credentials", exc.message),
        )

    @app.exception_handler(AuthenticationError)
    async def handle_unauthenticated(request: Request, exc: AuthenticationError):
        return JSONResponse(
            status_code=401,
            content=_error_body("unauthorized", exc.message),
        )

    @app.exception_handler(OwnershipError)
    async def handle_not_author(request: Request, exc: OwnershipError):
        return JSONResponse(
            status_code=401,
            content=_error_body("unauthorized", exc.message),
        )

    @app.exception_handler(InvalidTokenError)
    async def handle_invalid_token(request: Request, exc: InvalidTokenError):
        logger.info("[%s] Rejected session token: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=403,
            content=_error_body("forbidden", exc.message),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=_error_body("not_found", exc.message),
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "server_error", "An internal error occurred. Please try again later."
            ),
        )

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        rid = request_id_var.get("")
        logger.error("[%s] File storage error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", exc.message),
        )

    @app.exception_handler(InkpressError)
    async def handle_app_error(request: Request, exc: InkpressError):
        logger.error("[%s] Unhandled application error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", "An internal error occurred."),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again later.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Assemble middleware, exception handlers, routers and the /uploads mount.

    Tests call this directly to get an app bound to the current settings.
    """
    app = FastAPI(
        title="Inkpress API",
        description=(
            "Minimal blogging backend: cookie sessions, posts with cover "
            "images, and author-only editing."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in reverse order of addition:
    # RateLimit → RequestID → Logging → GZip → CORS

    # Credentials on: the browser must send the `token` cookie cross-origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(posts.router)
    app.include_router(health.router)

    # StaticFiles checks the directory at construction time
    app.mount(
        settings.upload_url_prefix,
        StaticFiles(directory=str(ensure_upload_dir())),
        name="uploads",
    )

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
