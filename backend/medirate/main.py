"""
MediRate Admin Backend — FastAPI Application Factory
======================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn medirate.main:app).
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Middleware: RequestID → AccessLog → RateLimit → CORS    │
    │                                                          │
    │  Routes:                                                 │
    │    /api/admin/*        /api/documents/*     /health      │
    │    /api/update-user-role  /api/user-role                 │
    │    /api/landing-redirect  /api/send-email                │
    │    /api/test-email-verification  /api/stripe/test        │
    │                                                          │
    │  Exception Handlers:                                     │
    │    Validation→400  Auth→401  Admin→403  NotFound→404     │
    │    Method→405  Collaborator failures→500                 │
    │    (429 is answered by RateLimitMiddleware itself)       │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, report missing configuration (non-fatal)
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from medirate import __version__
from medirate.config import settings
from medirate.database import dispose_engine
from medirate.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BlobStorageError,
    DatabaseError,
    DriveServiceError,
    EmailDeliveryError,
    MediRateError,
    MethodNotAllowedError,
    NotFoundError,
    UpstreamServiceError,
    ValidationError,
)
from medirate.middleware.logging import RequestLoggingMiddleware
from medirate.middleware.rate_limit import RateLimitMiddleware
from medirate.middleware.request_id import RequestIDMiddleware, request_id_var
from medirate.routes import admin, contact, diagnostics, documents, health, users

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s on stdout,
    which the hosting platform collects.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    for noisy in (
        "uvicorn.access",
        "sqlalchemy.engine",
        "httpcore",
        "httpx",
        "googleapiclient.discovery_cache",
        "stripe",
    ):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("MediRate admin backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # The service still starts: health checks and unaffected routes keep working
        logger.error("Configuration error: %s", str(e))

    logger.info(
        "Admin policy: %d allow-listed email(s), role claim '%s'",
        len(settings.admin_email_set),
        settings.admin_role,
    )
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("MediRate admin backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_body(code: str, message: str, details: dict | None = None) -> dict:
    body = {"error": code, "message": message, "request_id": request_id_var.get("")}
    if details:
        body["details"] = details
    return body


# 500-class application errors: their message is safe to show, context is not
SERVER_ERRORS = {
    DatabaseError: "database_error",
    BlobStorageError: "storage_error",
    DriveServiceError: "drive_error",
    EmailDeliveryError: "email_error",
    UpstreamServiceError: "upstream_error",
}


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the shared error body.

    Handler hierarchy:
        ValidationError, RequestValidationError  → 400
        AuthenticationError                      → 401 (+ WWW-Authenticate)
        AuthorizationError                       → 403
        NotFoundError                            → 404
        MethodNotAllowedError                    → 405 (+ Allow)
        Database/Blob/Drive/Email/Upstream       → 500, context logged only
        MediRateError, Exception                 → 500 generic
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Malformed JSON or wrongly typed fields; answered as 400 like our own checks."""
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ())[1:]) or None
        message = first.get("msg", "Invalid request body")
        logger.warning("[%s] Request validation error: %s", request_id_var.get(""), message)
        return JSONResponse(
            status_code=400,
            content=error_body(
                "validation_error",
                message,
                {"field": field, "error_count": len(errors)},
            ),
        )

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return JSONResponse(
            status_code=401,
            content=error_body("authentication_error", exc.message),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(AuthorizationError)
    async def handle_authorization_error(request: Request, exc: AuthorizationError):
        return JSONResponse(
            status_code=403,
            content=error_body("authorization_error", exc.message),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=error_body("not_found", exc.message),
        )

    @app.exception_handler(MethodNotAllowedError)
    async def handle_method_not_allowed(request: Request, exc: MethodNotAllowedError):
        return JSONResponse(
            status_code=405,
            content=error_body("method_not_allowed", exc.message),
            headers={"Allow": exc.allowed},
        )

    @app.exception_handler(MediRateError)
    async def handle_application_error(request: Request, exc: MediRateError):
        """Collaborator failures: generic message out, full context to the log."""
        rid = request_id_var.get("")
        code = SERVER_ERRORS.get(type(exc), "server_error")
        logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        return JSONResponse(status_code=500, content=error_body(code, exc.message))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="MediRate Admin API",
        description=(
            "Admin dashboard backend: rate development record curation, the document "
            "library, user roles and the public contact form."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → RateLimit → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(admin.router)
    app.include_router(documents.router)
    app.include_router(users.router)
    app.include_router(contact.router)
    app.include_router(diagnostics.router)
    app.include_router(health.router)

    return app


app = create_app()
