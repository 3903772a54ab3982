"""
Pytest configuration and shared fixtures.

This module provides:
- Mock fixtures for unit tests
- Sample report rows
- Session token helpers
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from reportline.core.sessions import SessionManager, UserSession
from reportline.storage.models import ReportStatus, ReportType

TEST_SECRET_KEY = "test-secret-key"  # pragma: allowlist secret

# =============================================================================
# Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_db_session() -> AsyncMock:
    """Create a mock database session for unit tests."""
    session = AsyncMock()
    session.add = MagicMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.execute = AsyncMock()

    return session


# =============================================================================
# Sample Data Fixtures
# =============================================================================


@pytest.fixture
def make_report_row() -> Callable[..., dict[str, Any]]:
    """Factory for projected report rows as the store returns them."""

    def _make(
        *,
        created_at: datetime | None = None,
        status: ReportStatus = ReportStatus.PENDING,
        report_type: ReportType = ReportType.EMERGENCY,
        title: str = "Downed power line",
    ) -> dict[str, Any]:
        created = created_at or datetime.now(tz=UTC)
        return {
            "id": uuid4(),
            "report_id": f"RPT-{uuid4().hex[:8].upper()}",
            "type": report_type,
            "title": title,
            "description": "Power line down across the road near the school.",
            "location": "Elm St & 3rd Ave",
            "latitude": 40.7128,
            "longitude": -74.006,
            "image": None,
            "status": status,
            "created_at": created,
            "updated_at": created + timedelta(minutes=5),
        }

    return _make


# =============================================================================
# Session Fixtures
# =============================================================================


@pytest.fixture
def session_manager() -> SessionManager:
    return SessionManager(secret_key=TEST_SECRET_KEY, default_ttl_seconds=3600)


@pytest.fixture
def user_session() -> UserSession:
    return UserSession(
        subject="user-123",
        email="reporter@example.com",
        expires_at=datetime.now(tz=UTC) + timedelta(hours=1),
    )


# =============================================================================
# Markers
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers",
        "unit: Unit tests (fast, no external dependencies)",
    )
    config.addinivalue_line(
        "markers",
        "integration: Integration tests (require PostgreSQL)",
    )
