"""
Report listing: filter construction, the projected query, the deadline-bound
fetch, and mapping of failures onto HTTP responses.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from http import HTTPStatus
from typing import Any

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from reportline.core.observability import record_report_list_query_latency
from reportline.storage.errors import StoreErrorKind, classify_store_error
from reportline.storage.models import Report, ReportStatus, ReportType

# Columns returned to callers, in response order.
REPORT_PROJECTION = (
    Report.id,
    Report.report_id,
    Report.type,
    Report.title,
    Report.description,
    Report.location,
    Report.latitude,
    Report.longitude,
    Report.image,
    Report.status,
    Report.created_at,
    Report.updated_at,
)

UNAUTHORIZED_MESSAGE = "Unauthorized"
STORE_UNREACHABLE_MESSAGE = "Cannot connect to database. Please try again later."
STORE_TIMEOUT_MESSAGE = "Database connection timeout. Please try again."
GENERIC_FAILURE_MESSAGE = "Failed to fetch reports"


class InvalidReportFilterError(ValueError):
    """A filter value is not a member of its enumeration."""

    def __init__(self, field: str, value: str) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Invalid {field} filter: {value}")


class ReportQueryTimeoutError(Exception):
    """The listing query did not finish before its deadline."""

    def __init__(self, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Report query exceeded {timeout_seconds:g}s deadline")


@dataclass(frozen=True, slots=True)
class ReportFailure:
    """HTTP rendering of a failed listing."""

    status_code: int
    message: str
    outcome: str


def _parse_enum_value(field: str, raw: str | None, enum_cls: type[Enum]) -> Enum | None:
    if raw is None or raw == "":
        return None
    try:
        return enum_cls(raw)
    except ValueError:
        raise InvalidReportFilterError(field, raw) from None


def build_report_filter(
    status: str | None = None,
    report_type: str | None = None,
) -> dict[str, Enum]:
    """
    Build the equality filter for a listing.

    Only supplied values become keys: an omitted parameter never shows up
    as a key, not even with a None value.

    Raises:
        InvalidReportFilterError: If a value is not a known status or type.
    """
    report_filter: dict[str, Enum] = {}

    parsed_status = _parse_enum_value("status", status, ReportStatus)
    if parsed_status is not None:
        report_filter["status"] = parsed_status

    parsed_type = _parse_enum_value("type", report_type, ReportType)
    if parsed_type is not None:
        report_filter["type"] = parsed_type

    return report_filter


def build_list_reports_query(report_filter: Mapping[str, Enum]) -> Select[Any]:
    """Select the report projection, AND-ing filters, newest first."""
    return (
        select(*REPORT_PROJECTION)
        .filter_by(**report_filter)
        .order_by(Report.created_at.desc())
    )


async def fetch_reports(
    session: AsyncSession,
    report_filter: Mapping[str, Enum],
    *,
    timeout_seconds: float,
) -> list[dict[str, Any]]:
    """
    Run the listing query, cancelling it if it outlives ``timeout_seconds``.

    Raises:
        ReportQueryTimeoutError: If the deadline fires first.
    """
    query = build_list_reports_query(report_filter)
    deadline = asyncio.timeout(timeout_seconds)
    started = time.perf_counter()
    try:
        async with deadline:
            result = await session.execute(query)
    except Exception as exc:
        # A failed or cancelled execute leaves the transaction needing rollback
        # before the request session can commit or close.
        await session.rollback()
        if isinstance(exc, TimeoutError) and deadline.expired():
            raise ReportQueryTimeoutError(timeout_seconds) from exc
        raise
    finally:
        record_report_list_query_latency(time.perf_counter() - started)

    rows: Sequence[Mapping[str, Any]] = result.mappings().all()
    return [dict(row) for row in rows]


def map_report_failure(exc: BaseException) -> ReportFailure:
    """Translate a listing failure into status code, message and metric outcome."""
    if isinstance(exc, ReportQueryTimeoutError):
        return ReportFailure(
            status_code=int(HTTPStatus.INTERNAL_SERVER_ERROR),
            message=GENERIC_FAILURE_MESSAGE,
            outcome="query_timeout",
        )

    kind = classify_store_error(exc)
    if kind is StoreErrorKind.UNREACHABLE:
        return ReportFailure(
            status_code=int(HTTPStatus.SERVICE_UNAVAILABLE),
            message=STORE_UNREACHABLE_MESSAGE,
            outcome="store_unreachable",
        )
    if kind is StoreErrorKind.TIMEOUT:
        return ReportFailure(
            status_code=int(HTTPStatus.GATEWAY_TIMEOUT),
            message=STORE_TIMEOUT_MESSAGE,
            outcome="store_timeout",
        )
    return ReportFailure(
        status_code=int(HTTPStatus.INTERNAL_SERVER_ERROR),
        message=GENERIC_FAILURE_MESSAGE,
        outcome="error",
    )
