"""
FastAPI application for the Derby Stats API.

Serves teams, skaters, games with their rosters, the jam ledger and
per-game jam statistics with:
- msgspec JSON serialization
- GZip compression and CORS
- A uniform error envelope for domain, database and unexpected errors
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

import msgspec
import psycopg
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from ..core.config import get_settings
from ..core.errors import EntityNotFoundError, InvalidReferenceError, InvalidSelectionError
from .errors import (
    APIError,
    ServiceUnavailableError,
    ValidationError,
    api_error_handler,
    domain_error_handler,
)
from .routers import games, skaters, stats, teams

logger = logging.getLogger(__name__)


class MSGSpecResponse(Response):
    """Custom response class using msgspec for JSON serialization."""

    media_type = "application/json"

    def render(self, content: Any) -> bytes:
        if content is None:
            return b""
        return msgspec.json.encode(content)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle.

    Startup opens the database connection pool; shutdown closes it.
    """
    logger.info("Starting Derby Stats API...")

    try:
        from .dependencies import get_db

        db = get_db()
        db.open()
        logger.info(
            f"Database connection pool opened (min_size={db._min_pool_size}, max_size={db._max_pool_size})"
        )
    except (ValueError, psycopg.Error) as e:
        logger.error(f"Failed to initialize database: {e}")
        # Don't fail startup, let requests handle connection errors

    yield

    logger.info("Shutting down Derby Stats API...")
    try:
        from .dependencies import close_db

        close_db()
    except psycopg.Error as e:
        logger.warning(f"Error closing database connections: {e}")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        description="Roller derby game, jam ledger and jam statistics API",
        version=settings.app_version,
        default_response_class=MSGSpecResponse,
        docs_url=settings.api_docs_url,
        redoc_url=settings.api_redoc_url,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        allow_credentials=settings.cors_allow_credentials,
        expose_headers=settings.cors_expose_headers,
    )

    # GZip compression middleware - compresses responses > 1KB
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    @app.middleware("http")
    async def add_timing_header(request: Request, call_next):
        """Add processing time header to all responses."""
        start_time = time.time()
        response = await call_next(request)
        process_time = (time.time() - start_time) * 1000
        response.headers["X-Process-Time"] = f"{process_time:.2f}ms"
        return response

    app.add_exception_handler(APIError, api_error_handler)
    for exc_class in (EntityNotFoundError, InvalidSelectionError, InvalidReferenceError):
        app.add_exception_handler(exc_class, domain_error_handler)

    @app.exception_handler(psycopg.Error)
    async def database_error_handler(request: Request, exc: psycopg.Error):
        """Database failures surface as 503 before any aggregation runs."""
        logger.error(f"Database error: {exc}")
        return await api_error_handler(request, ServiceUnavailableError("Database"))

    @app.exception_handler(psycopg.errors.ForeignKeyViolation)
    async def reference_error_handler(request: Request, exc: psycopg.Error):
        """Writes naming a missing record, or deleting one still in use, are bad input."""
        logger.info(f"Rejected write: {exc}")
        return await api_error_handler(
            request, ValidationError("Referenced record does not exist or is still in use")
        )

    @app.exception_handler(psycopg.DataError)
    async def data_error_handler(request: Request, exc: psycopg.Error):
        """Values the database cannot store, such as malformed IDs, are bad input."""
        logger.info(f"Rejected value: {exc}")
        return await api_error_handler(request, ValidationError("Invalid value for a stored field"))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions with consistent format."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        # Never leak exception details in production, regardless of DEBUG flag
        show_detail = settings.debug and settings.environment != "production"
        return JSONResponse(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An internal error occurred",
                    "detail": str(exc) if show_detail else None,
                }
            },
        )

    @app.get("/health", tags=["health"])
    async def health_check():
        """Basic health check endpoint."""
        return {"status": "healthy", "timestamp": datetime.now(tz=timezone.utc).isoformat()}

    @app.get("/health/db", tags=["health"])
    def health_check_db():
        """Database connectivity health check."""
        from .dependencies import get_db

        try:
            get_db().fetchone("SELECT 1 as test")
            return {
                "status": "healthy",
                "database": "connected",
                "timestamp": datetime.now(tz=timezone.utc).isoformat(),
            }
        except (ValueError, psycopg.Error) as e:
            logger.error(f"Database health check failed: {e}")
            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "database": "disconnected",
                    "error": "Database connection check failed",
                    "timestamp": datetime.now(tz=timezone.utc).isoformat(),
                },
            )

    @app.get("/", tags=["root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "status": "running",
            "docs": settings.api_docs_url,
        }

    # Team and skater registries
    app.include_router(teams.router, prefix=f"{settings.api_prefix}/teams", tags=["teams"])
    app.include_router(skaters.router, prefix=f"{settings.api_prefix}/skaters", tags=["skaters"])
    # Games, rosters and jam ledger
    app.include_router(games.router, prefix=f"{settings.api_prefix}/games", tags=["games"])
    # Per-game statistics and chart series
    app.include_router(stats.router, prefix=f"{settings.api_prefix}/games", tags=["stats"])

    return app


# Create app instance
app = create_app()
