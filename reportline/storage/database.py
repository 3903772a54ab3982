"""
Database connection and session management.

This module provides:
- Async SQLAlchemy engine configuration
- Request-scoped session dependency
- Connection release for short-lived (serverless) hosts
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from reportline.core.config import settings

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = structlog.get_logger(__name__)


# =============================================================================
# Engine Configuration
# =============================================================================


def _connect_args() -> dict[str, Any]:
    connect_args: dict[str, Any] = {"timeout": settings.DATABASE_CONNECT_TIMEOUT_SECONDS}
    if settings.DATABASE_STATEMENT_TIMEOUT_MS > 0:
        connect_args["server_settings"] = {
            "statement_timeout": str(settings.DATABASE_STATEMENT_TIMEOUT_MS),
        }
    return connect_args


def create_engine() -> AsyncEngine:
    """
    Create async SQLAlchemy engine.

    Uses connection pooling for long-lived hosts. Development and serverless
    hosts get NullPool so every connection is closed when its session ends.
    """
    if settings.is_development or settings.SERVERLESS:
        return create_async_engine(
            settings.DATABASE_URL,
            echo=settings.SQL_ECHO,
            poolclass=NullPool,
            connect_args=_connect_args(),
        )

    return create_async_engine(
        settings.DATABASE_URL,
        echo=settings.SQL_ECHO,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_timeout=settings.DATABASE_POOL_TIMEOUT_SECONDS,
        # Connection health check
        pool_pre_ping=True,
        connect_args=_connect_args(),
    )


# Create engine instance
engine = create_engine()

# Create session factory
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


# =============================================================================
# Session Dependency
# =============================================================================


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting database sessions.

    Usage:
        @router.get("/items")
        async def list_items(session: AsyncSession = Depends(get_session)):
            result = await session.execute(select(Item))
            return result.scalars().all()

    Sessions are committed on success, rolled back on error and always
    closed. In serverless mode the engine's connections are released as well.
    """
    try:
        async with async_session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
    finally:
        if settings.SERVERLESS:
            await release_connections()


async def release_connections() -> None:
    """Close every pooled connection held by the engine."""
    await engine.dispose()
    logger.debug("Store connections released")


# =============================================================================
# Utility Functions
# =============================================================================


async def init_db() -> None:
    """
    Initialize database tables.

    Note: In production, use Alembic migrations instead.
    This is useful for testing or quick setup.
    """
    from reportline.storage.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db() -> None:
    """
    Drop all database tables.

    WARNING: This will delete all data. Use only in testing.
    """
    from reportline.storage.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
