"""
Snippety — FastAPI Application Factory
========================================

What:  Creates and configures the FastAPI application instance.
Why:   Everything the handlers share (engine, snippet store, template cache)
       is built here and attached to `app.state`; there is no module-level
       app or registry.
How:   create_app(settings) returns a configured FastAPI instance.
Who:   Called by the CLI (python -m snippety) or by uvicorn with
       `uvicorn --factory snippety.main:create_app`.

Lifecycle:
    create_app():
    1. Build the template cache (any template error aborts startup)
    2. Create the engine, session factory and snippet store

    Startup (lifespan):
    1. Configure logging
    2. Ping the database (unreachable database aborts startup)
    3. Optionally create the schema

    Shutdown:
    1. Dispose the engine (close pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles

from snippety import __version__
from snippety.config import Settings, settings as default_settings
from snippety.database import (
    create_engine,
    create_schema,
    create_session_factory,
    dispose_engine,
    ping,
)
from snippety.exceptions import (
    DatabaseError,
    NotFoundError,
    SnippetyError,
    UnknownTemplateError,
)
from snippety.middleware.logging import RequestLoggingMiddleware
from snippety.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware, request_id_var
from snippety.routes import health, snippets
from snippety.services.snippet_store import Clock, SnippetStore
from snippety.templates import new_template_cache

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] snippety.access: GET / 200 3.1ms ...
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that are noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging, database ping, optional schema creation.
    Shutdown: dispose the engine.
    """
    app_settings: Settings = app.state.settings
    engine = app.state.engine

    setup_logging(app_settings.log_level)
    logger.info("Snippety starting up...")
    logger.info("Template cache: %d page(s)", len(app.state.templates))

    try:
        await ping(engine)
    except Exception as e:
        logger.error("Database unreachable: %s", str(e))
        await dispose_engine(engine)
        raise

    if app_settings.db_create_schema:
        await create_schema(engine)
        logger.info("Database schema ensured")

    logger.info("starting server on %s:%d", app_settings.backend_host, app_settings.backend_port)

    yield

    logger.info("Snippety shutting down...")
    await dispose_engine(engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to plain-text HTTP responses.

        NotFoundError         → 404 Not Found
        DatabaseError         → 500 (details logged, never returned)
        UnknownTemplateError  → 500
        SnippetyError (base)  → 500
        Exception (fallback)  → 500
    """

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return PlainTextResponse("Not Found", status_code=404)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error(
            "[%s] Database error on %s %s: %s | Context: %s",
            rid, request.method, request.url.path, exc.message, exc.context,
        )
        return PlainTextResponse("Internal Server Error", status_code=500)

    @app.exception_handler(UnknownTemplateError)
    async def handle_unknown_template(request: Request, exc: UnknownTemplateError):
        rid = request_id_var.get("")
        logger.error("[%s] %s", rid, exc.message)
        return PlainTextResponse("Internal Server Error", status_code=500)

    @app.exception_handler(SnippetyError)
    async def handle_app_error(request: Request, exc: SnippetyError):
        rid = request_id_var.get("")
        logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        return PlainTextResponse("Internal Server Error", status_code=500)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        # Runs outside RequestIDMiddleware, so the ContextVar is already reset;
        # request.state shares the ASGI scope and still holds the ID
        rid = getattr(request.state, "request_id", None) or request.headers.get(REQUEST_ID_HEADER, "")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=exc)
        return PlainTextResponse("Internal Server Error", status_code=500)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(app_settings: Optional[Settings] = None, clock: Optional[Clock] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use; defaults to the environment-loaded singleton
        clock: Time source for the snippet store (tests move it forward)

    Raises:
        TemplateCacheError: a template failed to compile; no app is returned
    """
    app_settings = app_settings or default_settings

    # Fatal to startup if any page fails to compile
    templates = new_template_cache(app_settings.template_dir)

    engine = create_engine(app_settings)
    session_factory = create_session_factory(engine)

    app = FastAPI(
        title="Snippety",
        description="Paste and share text snippets that expire.",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = app_settings
    app.state.engine = engine
    app.state.templates = templates
    app.state.snippets = SnippetStore(session_factory, clock=clock)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = first to execute: RequestID → Logging → GZip
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(snippets.router)
    app.include_router(health.router)
    app.mount("/static", StaticFiles(directory=str(app_settings.static_dir)), name="static")

    return app
