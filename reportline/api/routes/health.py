"""
Health check endpoints.

Liveness and readiness probes plus a database connectivity check.
"""

from __future__ import annotations

import time
from datetime import UTC, datetime
from typing import Any

import structlog
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from reportline.api.deps import DBSession
from reportline.storage.errors import classify_store_error

logger = structlog.get_logger(__name__)

router = APIRouter()

API_VERSION = "1.0.0"


# =============================================================================
# Response Models
# =============================================================================


class HealthStatus(BaseModel):
    """Health check response."""

    status: str
    timestamp: str
    version: str
    checks: dict[str, Any]

    model_config = {
        "json_schema_extra": {
            "example": {
                "status": "healthy",
                "timestamp": "2026-01-18T09:30:00+00:00",
                "version": API_VERSION,
                "checks": {"database": {"status": "healthy", "latency_ms": 1.42}},
            }
        }
    }


# =============================================================================
# Endpoints
# =============================================================================


@router.get("/health", response_model=HealthStatus)
async def health_check(session: DBSession) -> HealthStatus:
    """
    Check application health.

    Reports database connectivity and latency. The service is unhealthy
    whenever the database is.
    """
    db_check = await check_database(session)
    overall_status = "healthy" if db_check["status"] == "healthy" else "unhealthy"

    return HealthStatus(
        status=overall_status,
        timestamp=datetime.now(tz=UTC).isoformat(),
        version=API_VERSION,
        checks={"database": db_check},
    )


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """
    Liveness probe.

    Does not check dependencies.
    """
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(session: DBSession) -> JSONResponse:
    """Readiness probe: 200 once the database answers, 503 otherwise."""
    db_check = await check_database(session)
    if db_check["status"] == "healthy":
        return JSONResponse(status_code=200, content={"status": "ready"})
    return JSONResponse(
        status_code=503,
        content={"status": "not_ready", "reason": db_check.get("message", "")},
    )


# =============================================================================
# Health Check Functions
# =============================================================================


async def check_database(session: AsyncSession) -> dict[str, Any]:
    """Check database connectivity and latency."""
    try:
        start = time.perf_counter()
        await session.execute(text("SELECT 1"))
        latency = (time.perf_counter() - start) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(latency, 2),
        }
    except Exception as e:
        logger.error(
            "Database health check failed",
            error=str(e),
            condition=classify_store_error(e).value,
        )
        return {
            "status": "unhealthy",
            "condition": classify_store_error(e).value,
            "message": str(e),
        }
