from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.engine import make_url

from reportline.core.config import settings
from reportline.storage.database import async_session_maker, init_db
from reportline.storage.errors import StoreErrorKind, classify_store_error

_LOCAL_DB_HOSTS = {"localhost", "127.0.0.1", "::1"}


@dataclass(frozen=True, slots=True)
class IntegrationTruncateTarget:
    rendered_url: str
    database: str | None
    host: str | None


def _is_explicit_test_database(database_name: str | None) -> bool:
    if not database_name:
        return False
    normalized = database_name.strip().lower()
    return normalized.endswith("_test") or normalized.startswith("test_") or normalized == "test"


def _resolve_integration_truncate_target() -> IntegrationTruncateTarget:
    parsed = make_url(settings.DATABASE_URL.strip())
    return IntegrationTruncateTarget(
        rendered_url=parsed.render_as_string(hide_password=True),
        database=parsed.database,
        host=parsed.host,
    )


def _assert_safe_integration_truncate_target() -> IntegrationTruncateTarget:
    target = _resolve_integration_truncate_target()
    if not _is_explicit_test_database(target.database) and not settings.INTEGRATION_DB_TRUNCATE_ALLOWED:
        msg = (
            "Refusing integration DB truncation for non-test database target. "
            f"Resolved target={target.rendered_url} (database={target.database!r}). "
            "Use a test database name (for example *_test) or set "
            "INTEGRATION_DB_TRUNCATE_ALLOWED=true to override."
        )
        raise RuntimeError(msg)

    normalized_host = (target.host or "").strip().lower()
    is_local_host = normalized_host in _LOCAL_DB_HOSTS or normalized_host == ""
    if not is_local_host and not settings.INTEGRATION_DB_TRUNCATE_ALLOW_REMOTE:
        msg = (
            "Refusing integration DB truncation for non-local host target. "
            f"Resolved target={target.rendered_url} (host={target.host!r}). "
            "Use localhost/127.0.0.1/::1 or set INTEGRATION_DB_TRUNCATE_ALLOW_REMOTE=true to override."
        )
        raise RuntimeError(msg)

    return target


async def _skip_unless_database_reachable() -> None:
    try:
        async with async_session_maker() as session:
            await session.execute(text("SELECT 1"))
    except Exception as exc:
        if classify_store_error(exc) is StoreErrorKind.UNKNOWN:
            raise
        pytest.skip(f"PostgreSQL not reachable for integration tests: {exc}")


async def _truncate_reports() -> None:
    _assert_safe_integration_truncate_target()
    async with async_session_maker() as session:
        await session.execute(text("TRUNCATE TABLE reports"))
        await session.commit()


@pytest_asyncio.fixture(autouse=True)
async def reset_integration_database() -> AsyncIterator[None]:
    await _skip_unless_database_reachable()
    _assert_safe_integration_truncate_target()
    await init_db()
    await _truncate_reports()
    yield
    await _truncate_reports()
