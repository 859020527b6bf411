"""
CloudMemo Backend - FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn cloudmemo.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌─────────┐ ┌────────┐  │
    │  │   CORS   │→│  Req ID  │→│ Logging │→│  GZip  │  │
    │  └──────────┘ └──────────┘ └─────────┘ └────────┘  │
    │                                                     │
    │  Routes (under API_PREFIX, default /api):           │
    │  ┌──────────────┐ ┌──────────────┐ ┌────────────┐  │
    │  │ POST /login  │ │ /memos[/id]  │ │ /clip      │  │
    │  └──────────────┘ └──────────────┘ └────────────┘  │
    │  GET /health (unprefixed)                           │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐  │
    │  │ {"error": <code>} envelope for every failure │  │
    │  └──────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:   logging, configuration check, startup banner
    Shutdown:  dispose database engine, close key-value connection pool
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cloudmemo import __version__
from cloudmemo.config import settings
from cloudmemo.database import dispose_engine
from cloudmemo.exceptions import CloudMemoError
from cloudmemo.middleware.logging import RequestLoggingMiddleware
from cloudmemo.middleware.request_id import RequestIDMiddleware, request_id_var
from cloudmemo.routes import auth, clip, health, memos
from cloudmemo.services.kv_store import kv_store

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s

    Called once during startup, before anything else logs.
    """
    log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries that log every operation at INFO/DEBUG
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:   logging, configuration check, banner.
    Shutdown:  close both store connections.

    A missing APP_PASSWORD is logged, not fatal: the server still answers
    health checks, and every login is rejected until it is set.
    """
    setup_logging()
    logger.info("=" * 60)
    logger.info("CloudMemo Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    logger.info(
        "Server ready at http://%s:%d%s",
        settings.backend_host,
        settings.backend_port,
        settings.api_prefix,
    )
    logger.info("=" * 60)

    yield

    logger.info("CloudMemo Backend shutting down...")
    await dispose_engine()
    await kv_store.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int,
    error: str,
    message: Optional[str] = None,
    details: Any = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    content = {"error": error}
    if message:
        content["message"] = message
    if details:
        content["details"] = details
    content["request_id"] = request_id_var.get("")
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for the error envelope.

    Every failure body is {"error": <code>, "message"?, "details"?, "request_id"}.

    Handler mapping:
        CloudMemoError (and subclasses) → exc.status_code / exc.error_code
        RequestValidationError          → 400 invalid_payload
        Unknown route or method         → 404 not_found
        Exception (fallback)            → 500 server_error

    Internal details (SQL, driver messages, stack traces) are logged only.
    """

    @app.exception_handler(CloudMemoError)
    async def handle_cloudmemo_error(request: Request, exc: CloudMemoError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error(
                "[%s] %s: %s | Context: %s",
                rid, type(exc).__name__, exc.message, exc.context,
            )
        else:
            logger.info("[%s] %s: %s", rid, exc.error_code, exc.message)

        headers = None
        if exc.status_code == 401:
            headers = {"WWW-Authenticate": "Bearer"}
        return _error_response(
            exc.status_code, exc.error_code, exc.message, headers=headers
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Malformed JSON, missing fields and wrong types all map to one code."""
        details = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ())[1:]),
                "message": err.get("msg", ""),
            }
            for err in exc.errors()
        ]
        return _error_response(
            400, "invalid_payload", "Request payload is invalid", details=details
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405):
            return _error_response(404, "not_found", "No such route")
        return _error_response(
            exc.status_code,
            "request_failed",
            str(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return _error_response(
            500, "server_error", "An unexpected error occurred. Please try again."
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="CloudMemo API",
        description=(
            "Single-user memo store with a shared cloud clipboard. "
            "Log in with the shared password, then send the returned token "
            "as a Bearer credential."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition: CORS runs first.
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
        max_age=86400,
    )

    register_exception_handlers(app)

    app.include_router(auth.router, prefix=settings.api_prefix)
    app.include_router(memos.router, prefix=settings.api_prefix)
    app.include_router(clip.router, prefix=settings.api_prefix)
    app.include_router(health.router)

    return app


app = create_app()
