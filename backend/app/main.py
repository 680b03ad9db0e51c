"""
Product API — FastAPI Application Factory
===========================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Imported by an ASGI server (uvicorn app.main:app, or a serverless
       host in production), or started directly through run().

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:  Request ID → Logging → GZip → CORS    │
    │                                                     │
    │  Routes:                                            │
    │   GET/POST          /api/products                   │
    │   GET/PUT/DELETE    /api/products/{id}              │
    │   GET               /health                         │
    │   (optional)        /  static files from PUBLIC_DIR │
    │                                                     │
    │  Exception Handlers:                                │
    │   Validation→400 │ NotFound/HTTP→4xx │ DB/other→500 │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate credentials (ConfigurationError aborts startup)
    3. Connect to the database (DatabaseConnectionError aborts startup)

    Shutdown:
    1. Dispose the shared engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import __version__
from app.config import settings
from app.database import connect_database, dispose_engine
from app.exceptions import (
    ConfigurationError,
    DatabaseConnectionError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import (
    REQUEST_ID_HEADER,
    RequestIDMiddleware,
    current_request_id,
)
from app.routes import health, products

logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    404: "not_found",
    405: "method_not_allowed",
}


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output: stdout (captured by the container runtime or serverless host)
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
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
    Startup: validate credentials, then open the shared database engine.

    Both failures are logged and re-raised. The ASGI server treats an
    exception during lifespan startup as fatal, so a misconfigured or
    disconnected process never accepts a request.
    """
    setup_logging()
    logger.info("Product API starting up...")

    try:
        settings.validate_required()
    except ConfigurationError as e:
        logger.critical("Configuration error: %s", e.message)
        raise

    try:
        await connect_database()
    except DatabaseConnectionError as e:
        logger.critical("%s %s", e.message, e.context.get("error", ""))
        raise

    logger.info("Server ready (environment=%s)", settings.environment)

    yield

    logger.info("Product API shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and a uniform error body.

    Handler hierarchy:
        ValidationError        → 400 Bad Request
        NotFoundError          → 404 Not Found
        HTTPException          → its own status (unknown path, wrong method)
        DatabaseError          → 500 (generic message)
        Exception (fallback)   → 500 (generic message)

    Internal details (stack traces, SQL) are logged, never returned.
    """

    def error_response(request: Request, status_code: int, content: dict, headers=None):
        rid = current_request_id(request)
        response_headers = dict(headers or {})
        if rid:
            response_headers[REQUEST_ID_HEADER] = rid
        return JSONResponse(
            status_code=status_code,
            content={**content, "request_id": rid},
            headers=response_headers,
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        """Missing name, negative price, malformed body..."""
        logger.warning("[%s] Validation error: %s", current_request_id(request), exc.message)
        return error_response(
            request,
            400,
            {"error": "validation_error", "message": exc.message, "details": exc.context},
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(
            request,
            404,
            {"error": "not_found", "message": exc.message, "details": exc.context},
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        """Routing errors raised by Starlette itself or by the static files mount."""
        code = HTTP_ERROR_CODES.get(exc.status_code, "http_error")
        return error_response(
            request,
            exc.status_code,
            {"error": code, "message": str(exc.detail)},
            headers=exc.headers,
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            current_request_id(request), exc.message, exc.context,
        )
        return error_response(
            request,
            500,
            {"error": "server_error", "message": "An internal error occurred. Please try again later."},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        # Runs in ServerErrorMiddleware, outside RequestIDMiddleware, so the
        # ID and header come from request.state
        logger.error("[%s] Unexpected error: %s", current_request_id(request), str(exc), exc_info=True)
        return error_response(
            request,
            500,
            {
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Creating the app has no side effects: credentials are checked and the
    database is opened only when the ASGI server runs the lifespan.
    """
    app = FastAPI(
        title="Product API",
        description="CRUD REST API for product records.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(products.router)
    app.include_router(health.router)

    # Static site last so API routes always win
    if settings.public_dir:
        public = Path(settings.public_dir)
        if public.is_dir():
            app.mount("/", StaticFiles(directory=str(public), html=True), name="public")
        else:
            logger.warning("PUBLIC_DIR %s does not exist; static files disabled", public)

    return app


# uvicorn / the serverless host import `app.main:app`
app = create_app()


def run() -> None:
    """
    Start a local server on BACKEND_HOST:BACKEND_PORT.

    In production the port is not bound here; the exported `app` is invoked
    by the external host instead. Missing credentials exit with status 1
    before anything is bound.
    """
    import uvicorn

    setup_logging()
    try:
        settings.validate_required()
    except ConfigurationError as e:
        logger.critical("Configuration error: %s", e.message)
        sys.exit(1)

    if settings.is_production:
        logger.info("ENVIRONMENT=production: not binding a port; serve app.main:app from the host")
        return

    logger.info("Server is running on port %d", settings.backend_port)
    uvicorn.run(app, host=settings.backend_host, port=settings.backend_port)


if __name__ == "__main__":
    run()
