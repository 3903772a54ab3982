"""
Shared FastAPI dependencies.

Centralizes dependency aliases to keep route signatures concise.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from reportline.core.sessions import UserSession, get_current_session
from reportline.storage.database import get_session

# Reusable dependency alias for async DB sessions in API routes.
DBSession = Annotated[AsyncSession, Depends(get_session)]

# Caller session, or None when the request is unauthenticated.
CurrentSession = Annotated[UserSession | None, Depends(get_current_session)]
