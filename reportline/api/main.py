"""
FastAPI application for Reportline.

This module creates and configures the FastAPI application,
including middleware, error handlers, and route registration.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from reportline.api.routes import health, metrics, reports
from reportline.api.routes.health import API_VERSION
from reportline.core.config import settings
from reportline.core.logging_setup import configure_logging
from reportline.storage.database import async_session_maker, engine

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = structlog.get_logger(__name__)

OPENAPI_TAGS = [
    {
        "name": "Health",
        "description": "Liveness/readiness and database health checks.",
    },
    {
        "name": "Reports",
        "description": "List submitted incident reports, filtered by status and type.",
    },
]


# =============================================================================
# Lifespan Management
# =============================================================================


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Manage application lifespan events.

    Startup verifies the database connection on long-lived hosts; serverless
    hosts connect lazily per request. Shutdown disposes the engine.
    """
    logger.info(
        "Starting Reportline API",
        environment=settings.ENVIRONMENT,
        api_version=API_VERSION,
        serverless=settings.SERVERLESS,
    )

    if not settings.SERVERLESS:
        try:
            async with async_session_maker() as session:
                await session.execute(text("SELECT 1"))
            logger.info("Database connection verified")
        except Exception as e:
            logger.error("Database connection failed", error=str(e))
            raise

    yield

    logger.info("Shutting down application")
    await engine.dispose()


# =============================================================================
# Application Factory
# =============================================================================


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    configure_logging()

    app = FastAPI(
        title="Reportline",
        description=(
            "Read API for community incident reports.\n\n"
            "Authentication: a signed session token in the "
            f"`{settings.SESSION_COOKIE_NAME}` cookie or an "
            "`Authorization: Bearer <token>` header."
        ),
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    register_routes(app)

    return app


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers."""

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle uncaught exceptions."""
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred",
            },
        )


def register_routes(app: FastAPI) -> None:
    """Register API route handlers."""

    # Health check and metrics (no prefix)
    app.include_router(health.router, tags=["Health"])
    app.include_router(metrics.router, tags=["Health"])

    app.include_router(
        reports.router,
        prefix="/api/v1/reports",
        tags=["Reports"],
    )


# =============================================================================
# Application Instance
# =============================================================================

app = create_app()


# =============================================================================
# Development Server
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "reportline.api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.API_RELOAD,
    )
