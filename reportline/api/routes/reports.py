"""
Reports API endpoints.

Read-only listing of submitted incident reports.
"""

from __future__ import annotations

from datetime import datetime
from http import HTTPStatus
from uuid import UUID

import structlog
from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from reportline.api.deps import CurrentSession, DBSession
from reportline.core.config import settings
from reportline.core.observability import record_report_list_outcome
from reportline.core.report_listing import (
    UNAUTHORIZED_MESSAGE,
    InvalidReportFilterError,
    build_report_filter,
    fetch_reports,
    map_report_failure,
)
from reportline.storage.models import ReportStatus, ReportType

logger = structlog.get_logger(__name__)

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================


class ReportResponse(BaseModel):
    """Report projection returned by listings."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "7a1c8f7e-3c1b-4c52-9a53-2d7f1a0f6b11",
                "reportId": "RPT-20260118-4F2A",
                "type": "EMERGENCY",
                "title": "Downed power line",
                "description": "Power line down across the road near the school.",
                "location": "Elm St & 3rd Ave",
                "latitude": 40.7128,
                "longitude": -74.006,
                "image": "https://cdn.example.com/reports/4f2a.jpg",
                "status": "PENDING",
                "createdAt": "2026-01-18T09:30:00Z",
                "updatedAt": "2026-01-18T09:30:00Z",
            }
        },
    )

    id: UUID
    report_id: str
    type: ReportType
    title: str
    description: str
    location: str | None
    latitude: float | None
    longitude: float | None
    image: str | None
    status: ReportStatus
    created_at: datetime
    updated_at: datetime


class ErrorResponse(BaseModel):
    """Error payload for report endpoints."""

    error: str


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# =============================================================================
# Endpoints
# =============================================================================


@router.get(
    "",
    response_model=list[ReportResponse],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
)
async def list_reports(
    current_session: CurrentSession,
    session: DBSession,
    status: str | None = Query(None, description="Only reports with this status"),
    type: str | None = Query(None, description="Only reports of this type"),
) -> list[ReportResponse] | JSONResponse:
    """
    List reports, newest first.

    Requires a session. `status` and `type` narrow the listing; when both
    are given a report must match both.
    """
    if current_session is None:
        record_report_list_outcome("unauthorized")
        return _error_response(HTTPStatus.UNAUTHORIZED, UNAUTHORIZED_MESSAGE)

    try:
        report_filter = build_report_filter(status=status, report_type=type)
    except InvalidReportFilterError as exc:
        logger.info("Rejected report filter", field=exc.field, value=exc.value)
        record_report_list_outcome("invalid_filter")
        return _error_response(HTTPStatus.BAD_REQUEST, str(exc))

    try:
        rows = await fetch_reports(
            session,
            report_filter,
            timeout_seconds=settings.REPORTS_QUERY_TIMEOUT_SECONDS,
        )
    except Exception as exc:
        failure = map_report_failure(exc)
        logger.error(
            "Failed to fetch reports",
            outcome=failure.outcome,
            status_code=failure.status_code,
            filter={key: value.value for key, value in report_filter.items()},
            error=str(exc),
            exc_info=True,
        )
        record_report_list_outcome(failure.outcome)
        return _error_response(failure.status_code, failure.message)

    record_report_list_outcome("ok")
    return [ReportResponse.model_validate(row) for row in rows]
