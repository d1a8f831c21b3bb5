"""
Notebox — FastAPI Application Factory
=======================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes configuration, dependency wiring, middleware registration,
       route mounting and lifecycle management in one place.
How:   create_app(settings) builds Database → NoteStore, stores them on
       app.state, and returns a configured FastAPI instance.
Who:   uvicorn (`uvicorn notebox.main:app`), the `notebox` console script, tests.

Application Architecture:
    Middleware Chain:   RequestID → Logging → GZip → CORS → route
    Routes:             /note (CRUD), /health
    Exception Handlers: NoteboxError → envelope with its (code, status)
                        RequestValidationError → 422 envelope
                        HTTPException → envelope with the framework status
                        Exception → 500 envelope, traceback logged

Lifecycle:
    Startup:
    1. Initialize logging
    2. Create missing tables (fatal on failure: the service cannot run without them)
    Shutdown:
    1. Dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from notebox import __version__
from notebox.config import Settings, settings as default_settings
from notebox.database import Database
from notebox.exceptions import ErrorKind, NoteboxError
from notebox.middleware.logging import RequestLoggingMiddleware
from notebox.middleware.request_id import RequestIDMiddleware, request_id_var
from notebox.routes import health, notes
from notebox.schemas.note import Envelope
from notebox.services.note_store import NoteStore

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging, then schema creation. A database that cannot be
    reached or initialised aborts startup; there is nothing to serve without it.
    Shutdown: dispose the engine.
    """
    app_settings: Settings = app.state.settings
    database: Database = app.state.database

    setup_logging(app_settings.log_level)
    logger.info("Notebox %s starting up...", __version__)

    try:
        await database.create_schema()
    except Exception:
        logger.critical(
            "%s (code %d): could not initialise the database schema",
            ErrorKind.CREATE_DB.message,
            ErrorKind.CREATE_DB.code,
            exc_info=True,
        )
        await database.dispose()
        raise

    logger.info("Server ready at http://%s:%d", app_settings.backend_host, app_settings.backend_port)

    yield

    logger.info("Notebox shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _envelope_error(status_code: int, kind: ErrorKind, data=None, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=Envelope.of(kind, data).to_json(),
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers so every error leaves as an envelope.

    Handler hierarchy:
        NoteboxError           → exc.status_code, exc.kind
        RequestValidationError → 422, UNRECOGNIZED
        HTTPException          → exc.status_code, UNRECOGNIZED
        Exception (fallback)   → 500, UNRECOGNIZED

    Exception handlers never expose internal details (stack traces, SQL) in
    the response. Details are logged server-side with the request ID.
    """

    @app.exception_handler(NoteboxError)
    async def handle_notebox_error(request: Request, exc: NoteboxError):
        rid = request_id_var.get("")
        log_level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
        logger.log(
            log_level,
            "[%s] %s %s failed with code %d: %s | Context: %s",
            rid,
            request.method,
            request.url.path,
            exc.kind.code,
            exc.message,
            exc.context,
        )
        return _envelope_error(exc.status_code, exc.kind, data=getattr(exc, "data", None))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Request validation error on %s: %s", rid, request.url.path, exc.errors())
        return _envelope_error(422, ErrorKind.UNRECOGNIZED)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return _envelope_error(exc.status_code, ErrorKind.UNRECOGNIZED)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        # Runs in ServerErrorMiddleware, outside RequestIDMiddleware: the header
        # has to be set here. request.state shares the scope with the middleware.
        rid = getattr(request.state, "request_id", "") or request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        headers = {"X-Request-ID": rid} if rid else None
        return _envelope_error(500, ErrorKind.UNRECOGNIZED, headers=headers)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    The Database and NoteStore are built here from `app_settings` and kept on
    app.state; handlers reach them through dependencies, so two apps built
    with different settings never share a connection pool.
    """
    app_settings = app_settings or default_settings

    app = FastAPI(
        title="Notebox API",
        description="Minimal CRUD service for notes with a uniform {code, data, message} envelope.",
        version=__version__,
        lifespan=lifespan,
    )

    database = Database(app_settings)
    app.state.settings = app_settings
    app.state.database = database
    app.state.note_store = NoteStore(database)

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(notes.router)
    app.include_router(health.router)

    return app


def run() -> None:
    """Console entry point: serve the default app with uvicorn."""
    uvicorn.run(
        "notebox.main:app",
        host=default_settings.backend_host,
        port=default_settings.backend_port,
        log_level=default_settings.log_level.lower(),
    )


# uvicorn expects `notebox.main:app` to be importable
app = create_app()
