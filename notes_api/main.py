"""
Notes API - FastAPI Application Factory
=======================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds every collaborator from Settings, stores them on
       app.state, registers middleware, exception handlers and routers.
Who:   uvicorn (notes_api.main:app) and the test-suite, which calls
       create_app() with its own Settings.

Application Architecture:
    ┌─────────────────────────────────────────────────────────┐
    │                      FastAPI App                        │
    │                                                         │
    │  Middleware:  Request ID → Access Log → CORS            │
    │                                                         │
    │  Routes:      /api/v1/auth/*   /api/v1/notes*           │
    │               /uploads/{path}  /health                  │
    │                                                         │
    │  app.state:   settings, database, file_service,         │
    │               token_service, mail_service,              │
    │               auth_service, note_service                │
    │                                                         │
    │  Errors:      NotesAPIError → its status/error_code     │
    │               RequestValidationError → 400              │
    │               anything else → 500                       │
    └─────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check (logged, never fatal), upload dir
    Shutdown: dispose the database engine
"""

import logging
import sys
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from notes_api import __version__
from notes_api.config import Settings
from notes_api.database import Database
from notes_api.exceptions import NotesAPIError
from notes_api.middleware.logging import RequestLoggingMiddleware
from notes_api.middleware.request_id import RequestIDMiddleware, request_id_var
from notes_api.routes import auth, files, health, notes
from notes_api.services.auth_service import AuthService
from notes_api.services.file_service import FileService
from notes_api.services.mail_service import MailService
from notes_api.services.note_service import NoteService
from notes_api.services.token_service import TokenService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure the root logger once for the whole application.

    Format: 2024-01-15T12:00:00 [INFO] notes_api.services.note_service: Note created: ...
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Our access log replaces uvicorn's; the rest log every query/connection
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosmtplib").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings.log_level)
    logger.info("=" * 60)
    logger.info("Notes API %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: health checks and unaffected endpoints still work
        logger.error("Configuration error: %s", str(e))

    file_service: FileService = app.state.file_service
    file_service.ensure_upload_dir()
    logger.info("Upload directory: %s", file_service.upload_path)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Notes API shutting down...")
    await app.state.database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_body(error: str, message: str, details: Optional[dict] = None) -> dict:
    body = {"error": error, "message": message}
    if details:
        body["details"] = details
    body["request_id"] = request_id_var.get("")
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to JSON error responses.

    Handler hierarchy:
        NotesAPIError (and subclasses) → exc.status_code / exc.error_code
        RequestValidationError         → 400 validation_error
        Exception (fallback)           → 500 internal_server_error

    Responses never include exception context, stack traces or SQL; those
    are logged server-side with the request id.
    """

    @app.exception_handler(NotesAPIError)
    async def handle_app_error(request: Request, exc: NotesAPIError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error(
                "[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context
            )
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)

        details = None
        field = exc.context.get("field") if exc.status_code == 400 else None
        if field:
            details = {"field": field}

        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.error_code, exc.message, details),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Malformed request bodies (e.g. invalid JSON) use the same 400 format."""
        errors = [
            {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), errors)
        return JSONResponse(
            status_code=400,
            content=error_body("validation_error", "Invalid request", {"errors": errors}),
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
            content=error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again later.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    *,
    mail_service: Optional[MailService] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings:     configuration; the environment-loaded default when None
        mail_service: replacement mail transport (tests pass a fake)

    No I/O happens here: the engine connects lazily and the upload directory
    is created on startup or on first write.
    """
    if settings is None:
        from notes_api.config import settings as default_settings
        settings = default_settings

    app = FastAPI(
        title="Notes API",
        description="Notes with optional images, behind cookie-based JWT authentication.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Collaborators ─────────────────────────────────────────────────────
    file_service = FileService(
        storage_root=settings.storage_root,
        upload_dir=settings.upload_dir,
        max_file_size=settings.max_file_size,
    )
    token_service = TokenService(settings)
    mail_service = mail_service or MailService(settings)

    app.state.settings = settings
    app.state.started_at = time.time()
    app.state.database = Database(settings)
    app.state.file_service = file_service
    app.state.token_service = token_service
    app.state.mail_service = mail_service
    app.state.auth_service = AuthService(token_service, mail_service)
    app.state.note_service = NoteService(file_service)

    # ── Middleware ────────────────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(notes.router)
    app.include_router(files.router)
    app.include_router(health.router)

    return app


# uvicorn notes_api.main:app
app = create_app()
