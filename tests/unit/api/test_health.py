from __future__ import annotations

import json

import pytest
from sqlalchemy.exc import OperationalError

import reportline.api.routes.health as health_module

pytestmark = pytest.mark.unit


@pytest.mark.asyncio
async def test_health_check_reports_database_latency(mock_db_session) -> None:
    result = await health_module.health_check(session=mock_db_session)

    assert result.status == "healthy"
    assert result.version == health_module.API_VERSION
    assert result.checks["database"]["status"] == "healthy"
    assert "latency_ms" in result.checks["database"]
    mock_db_session.execute.assert_awaited_once()


@pytest.mark.asyncio
async def test_health_check_is_unhealthy_when_database_down(mock_db_session) -> None:
    mock_db_session.execute.side_effect = OperationalError(
        "SELECT 1",
        {},
        ConnectionRefusedError(111, "Connection refused"),
    )

    result = await health_module.health_check(session=mock_db_session)

    assert result.status == "unhealthy"
    assert result.checks["database"]["status"] == "unhealthy"
    assert result.checks["database"]["condition"] == "unreachable"


@pytest.mark.asyncio
async def test_liveness_check_does_not_touch_dependencies() -> None:
    assert await health_module.liveness_check() == {"status": "alive"}


@pytest.mark.asyncio
async def test_readiness_check_returns_ready(mock_db_session) -> None:
    response = await health_module.readiness_check(session=mock_db_session)

    assert response.status_code == 200
    assert json.loads(response.body) == {"status": "ready"}


@pytest.mark.asyncio
async def test_readiness_check_returns_503_when_database_fails(
    mock_db_session,
    monkeypatch,
) -> None:
    async def fake_db(_session):
        return {"status": "unhealthy", "condition": "timeout", "message": "timed out"}

    monkeypatch.setattr(health_module, "check_database", fake_db)

    response = await health_module.readiness_check(session=mock_db_session)

    assert response.status_code == 503
    assert json.loads(response.body) == {"status": "not_ready", "reason": "timed out"}
