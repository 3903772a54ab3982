"""
Classification of store failures.

Maps driver and pool exceptions onto the small set of conditions the API
distinguishes: the database could not be reached, the database timed out,
or something else went wrong.
"""

from __future__ import annotations

import enum
from collections.abc import Iterator

from asyncpg.exceptions import (
    CannotConnectNowError,
    ConnectionDoesNotExistError,
    QueryCanceledError,
)
from sqlalchemy.exc import DBAPIError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError


class StoreErrorKind(str, enum.Enum):
    """Store failure conditions surfaced to callers."""

    UNREACHABLE = "unreachable"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


_MAX_CHAIN_DEPTH = 16


def _iter_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    pending: list[BaseException] = [exc]
    while pending and len(seen) < _MAX_CHAIN_DEPTH:
        current = pending.pop(0)
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current

        orig = getattr(current, "orig", None)
        if isinstance(orig, BaseException):
            pending.append(orig)
        if current.__cause__ is not None:
            pending.append(current.__cause__)


def _classify_single(exc: BaseException) -> StoreErrorKind | None:
    # Pool checkout timeout, connect timeout, server-side statement_timeout.
    if isinstance(exc, PoolTimeoutError | QueryCanceledError | TimeoutError):
        return StoreErrorKind.TIMEOUT
    if isinstance(exc, CannotConnectNowError | ConnectionDoesNotExistError | OSError):
        return StoreErrorKind.UNREACHABLE
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return StoreErrorKind.UNREACHABLE
    return None


def classify_store_error(exc: BaseException) -> StoreErrorKind:
    """
    Classify an exception raised while talking to the store.

    The explicit chain (SQLAlchemy ``orig`` and ``__cause__``)
    is inspected; the first recognised link wins.
    """
    for link in _iter_exception_chain(exc):
        kind = _classify_single(link)
        if kind is not None:
            return kind
    return StoreErrorKind.UNKNOWN
