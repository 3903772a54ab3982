"""Create reports table.

Revision ID: 0001_create_reports
Revises: None
Create Date: 2026-01-18
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_create_reports"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    report_type_enum = postgresql.ENUM(
        "EMERGENCY",
        "NON_EMERGENCY",
        name="report_type",
    )
    report_status_enum = postgresql.ENUM(
        "PENDING",
        "IN_PROGRESS",
        "RESOLVED",
        "DISMISSED",
        name="report_status",
    )
    report_type_enum.create(op.get_bind(), checkfirst=True)
    report_status_enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "reports",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            primary_key=True,
            nullable=False,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("report_id", sa.String(length=64), nullable=False),
        sa.Column(
            "type",
            postgresql.ENUM(name="report_type", create_type=False),
            nullable=False,
        ),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column(
            "status",
            postgresql.ENUM(name="report_status", create_type=False),
            nullable=False,
            server_default="PENDING",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.UniqueConstraint("report_id", name="uq_reports_report_id"),
    )
    op.create_index("idx_reports_created_at", "reports", ["created_at"])
    op.create_index("idx_reports_status", "reports", ["status"])
    op.create_index("idx_reports_type", "reports", ["type"])


def downgrade() -> None:
    op.drop_index("idx_reports_type", table_name="reports")
    op.drop_index("idx_reports_status", table_name="reports")
    op.drop_index("idx_reports_created_at", table_name="reports")
    op.drop_table("reports")
    postgresql.ENUM(name="report_status").drop(op.get_bind(), checkfirst=True)
    postgresql.ENUM(name="report_type").drop(op.get_bind(), checkfirst=True)
