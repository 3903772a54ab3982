"""
Database models for Reportline.

Reports are owned by the reporting front-end; this service reads a fixed
projection of them. Uses async SQLAlchemy 2.0 patterns.
"""

from __future__ import annotations

import enum
from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Enum, Float, Index, String, Text, func
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# =============================================================================
# Base Configuration
# =============================================================================


class Base(DeclarativeBase):
    """Base class for all models."""

    type_annotation_map = {
        UUID: PGUUID(as_uuid=True),
    }


# =============================================================================
# Enums
# =============================================================================


class ReportType(str, enum.Enum):
    """Kind of incident a report describes."""

    EMERGENCY = "EMERGENCY"
    NON_EMERGENCY = "NON_EMERGENCY"


class ReportStatus(str, enum.Enum):
    """Review status of a report."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    DISMISSED = "DISMISSED"


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


# =============================================================================
# Report
# =============================================================================


class Report(Base):
    """
    A submitted incident report.

    Attributes:
        id: Unique identifier
        report_id: Public reference handed to the reporter
        type: Emergency classification
        title: Short headline
        description: Full report text
        location: Free-text location
        latitude: Optional WGS84 latitude
        longitude: Optional WGS84 longitude
        image: Optional image reference (URL or storage key)
        status: Review status
        created_at: Submission time
        updated_at: Last modification time
    """

    __tablename__ = "reports"

    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=uuid4,
        server_default=func.gen_random_uuid(),
    )
    report_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    type: Mapped[ReportType] = mapped_column(
        Enum(ReportType, name="report_type", values_callable=_enum_values),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[str | None] = mapped_column(Text)
    latitude: Mapped[float | None] = mapped_column(Float)
    longitude: Mapped[float | None] = mapped_column(Float)
    image: Mapped[str | None] = mapped_column(Text)
    status: Mapped[ReportStatus] = mapped_column(
        Enum(ReportStatus, name="report_status", values_callable=_enum_values),
        nullable=False,
        default=ReportStatus.PENDING,
        server_default=ReportStatus.PENDING.value,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    __table_args__ = (
        Index("idx_reports_created_at", "created_at"),
        Index("idx_reports_status", "status"),
        Index("idx_reports_type", "type"),
    )

    def __repr__(self) -> str:
        return f"<Report(report_id='{self.report_id}', status='{self.status}')>"
