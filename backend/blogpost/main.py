"""
Blog Post API - FastAPI Application Factory
=============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() returns a configured FastAPI instance; the module-level
       `app` is what uvicorn serves (uvicorn blogpost.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌─────────────┐ ┌──────────────┐  │
    │  │  Req ID      │→│  Logging    │→│  CORS        │  │
    │  └──────────────┘ └─────────────┘ └──────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌─────────────┐ ┌──────────────┐  │
    │  │ POST /post   │ │ GET /posts  │ │ /post/{id}   │  │
    │  └──────────────┘ └─────────────┘ └──────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→400 │ NotFound→404 │ DB→500 │ 501 │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Connect to MongoDB and ping it (abort startup if unreachable)
    3. Build the PostService for the configured id strategy

    Shutdown:
    1. Close the MongoDB client

A storage handle passed to create_app() is used as-is and never closed by
the app; that is how the tests run without a MongoDB server.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from blogpost import __version__
from blogpost.config import Settings, settings
from blogpost.database import PostStorage, close_storage, connect_storage
from blogpost.exceptions import (
    BlogPostError,
    DatabaseError,
    MethodNotImplementedError,
    NotFoundError,
    ValidationError,
)
from blogpost.middleware.logging import RequestLoggingMiddleware
from blogpost.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware, request_id_var
from blogpost.routes import health, posts
from blogpost.services.base import build_post_service

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(config: Settings = settings) -> None:
    """
    Configure the root logger for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Third-party loggers that are noisy at INFO/DEBUG
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Own the MongoDB connection for the lifetime of the app.

    StorageUnavailableError from connect_storage() is not caught: uvicorn
    treats a failing lifespan startup as fatal and exits before serving.
    """
    config: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(config)
    logger.info("=" * 60)
    logger.info("Blog Post API %s starting up (id strategy: %s)", __version__, config.post_id_strategy)

    owns_storage = app.state.storage is None
    if owns_storage:
        app.state.storage = await connect_storage(config)
        app.state.post_service = build_post_service(config, app.state.storage.collection)

    logger.info("Listening on %s:%d", config.backend_host, config.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Blog Post API shutting down...")
    if owns_storage:
        await close_storage(app.state.storage)
        app.state.storage = None
        app.state.post_service = None
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details: Optional[dict] = None) -> dict:
    body = {
        "error": error,
        "message": message,
        "request_id": request_id_var.get(""),
    }
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the ErrorResponse format.

    Handler hierarchy:
        RequestValidationError     → 400 Bad Request (FastAPI's 422 remapped)
        ValidationError            → 400 Bad Request
        NotFoundError              → 404 Not Found
        MethodNotImplementedError  → 501 Not Implemented
        DatabaseError              → 500 Internal Server Error (driver text)
        BlogPostError (base)       → 500 Internal Server Error
        Exception (fallback)       → 500 Internal Server Error (generic text)
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Body was not JSON, or a field had the wrong type."""
        errors = [
            {
                "loc": [str(part) for part in err.get("loc", ())],
                "msg": err.get("msg", ""),
                "type": err.get("type", ""),
            }
            for err in exc.errors()
        ]
        message = errors[0]["msg"] if errors else "Invalid request"
        logger.warning("[%s] Request validation error: %s", request_id_var.get(""), message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", message, {"errors": errors}),
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=_error_body("not_found", exc.message),
        )

    @app.exception_handler(MethodNotImplementedError)
    async def handle_not_implemented(request: Request, exc: MethodNotImplementedError):
        return JSONResponse(
            status_code=501,
            content=_error_body("not_implemented", exc.message),
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        """Driver error text goes back to the caller; context stays in the log."""
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body("storage_error", exc.message),
        )

    @app.exception_handler(BlogPostError)
    async def handle_app_error(request: Request, exc: BlogPostError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", exc.message),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all; the stack trace is logged, never returned."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
            # Answered outside the middleware stack, so the header is set here
            headers={REQUEST_ID_HEADER: rid},
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    config: Optional[Settings] = None,
    storage: Optional[PostStorage] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config:  Settings to use; defaults to the module singleton.
        storage: Pre-built storage handle. When given, the lifespan does not
                 connect to (or close) MongoDB and the PostService is built
                 immediately, so the app can serve without a lifespan run.
    """
    config = config or settings

    app = FastAPI(
        title="Blog Post API",
        description="CRUD over blog posts stored in MongoDB.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = config
    app.state.storage = storage
    app.state.post_service = (
        build_post_service(config, storage.collection) if storage is not None else None
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added executes first: RequestID → Logging → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(posts.router)
    app.include_router(health.router)

    return app


app = create_app()
