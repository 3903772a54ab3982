"""
Session resolution for authenticated callers.

Sessions are HS256 JWTs signed with SECRET_KEY and carried either in the
session cookie or as an ``Authorization: Bearer`` header. Anything that does
not verify resolves to "no session"; callers decide what that means.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import UTC, datetime
from functools import lru_cache

import jwt
import structlog
from fastapi import Request

from reportline.core.config import settings

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class UserSession:
    """Verified caller session."""

    subject: str
    expires_at: datetime
    email: str | None = None


class SessionManager:
    """Issue and verify signed session tokens."""

    _ALGORITHM = "HS256"

    def __init__(self, *, secret_key: str, default_ttl_seconds: int) -> None:
        self._secret_key = secret_key
        self._default_ttl_seconds = max(1, default_ttl_seconds)

    def issue(
        self,
        subject: str,
        *,
        email: str | None = None,
        ttl_seconds: int | None = None,
    ) -> str:
        """Mint a session token for ``subject``."""
        normalized_subject = subject.strip()
        if not normalized_subject:
            msg = "Session subject must not be empty"
            raise ValueError(msg)

        issued_at = int(time.time())
        ttl = self._default_ttl_seconds if ttl_seconds is None else ttl_seconds
        claims: dict[str, object] = {
            "sub": normalized_subject,
            "iat": issued_at,
            "exp": issued_at + ttl,
        }
        if email:
            claims["email"] = email
        return jwt.encode(claims, self._secret_key, algorithm=self._ALGORITHM)

    def resolve(self, token: str | None) -> UserSession | None:
        """Return the session for ``token``, or None if it does not verify."""
        if not token or not token.strip():
            return None

        try:
            payload = jwt.decode(
                token.strip(),
                self._secret_key,
                algorithms=[self._ALGORITHM],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            logger.info("Session token expired")
            return None
        except jwt.InvalidTokenError as exc:
            logger.warning("Session token rejected", error=str(exc))
            return None

        subject = str(payload.get("sub") or "").strip()
        if not subject:
            return None

        email = payload.get("email")
        return UserSession(
            subject=subject,
            expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=UTC),
            email=str(email) if email else None,
        )


@lru_cache
def get_session_manager() -> SessionManager:
    """Get the process-wide session manager."""
    return SessionManager(
        secret_key=settings.SECRET_KEY,
        default_ttl_seconds=settings.SESSION_TTL_SECONDS,
    )


def extract_session_token(request: Request) -> str | None:
    """Read the session token from the cookie, falling back to a bearer header."""
    cookie_token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if cookie_token:
        return cookie_token

    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


async def get_current_session(request: Request) -> UserSession | None:
    """FastAPI dependency: the caller's session, or None."""
    return get_session_manager().resolve(extract_session_token(request))
