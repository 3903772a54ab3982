"""
Reportline command-line interface.
"""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Mapping, Sequence
from typing import Any

from reportline.core.config import settings
from reportline.core.report_listing import (
    InvalidReportFilterError,
    build_report_filter,
    fetch_reports,
    map_report_failure,
)
from reportline.core.sessions import get_session_manager
from reportline.storage.database import async_session_maker, engine


def _format_coordinates(latitude: float | None, longitude: float | None) -> str:
    if latitude is None or longitude is None:
        return "-"
    return f"{latitude:.5f},{longitude:.5f}"


def _format_report_line(row: Mapping[str, Any]) -> str:
    created_at = row["created_at"]
    created_text = created_at.isoformat() if created_at is not None else "-"
    return (
        f"{row['report_id']}  {row['status'].value:<11}  {row['type'].value:<13}  "
        f"{created_text}  {_format_coordinates(row['latitude'], row['longitude'])}  "
        f"{row['title']}"
    )


async def _run_list_reports(
    *,
    status: str | None,
    report_type: str | None,
    limit: int,
) -> int:
    try:
        report_filter = build_report_filter(status=status, report_type=report_type)
    except InvalidReportFilterError as exc:
        print(str(exc))
        return 2

    try:
        async with async_session_maker() as session:
            rows = await fetch_reports(
                session,
                report_filter,
                timeout_seconds=settings.REPORTS_QUERY_TIMEOUT_SECONDS,
            )
    except Exception as exc:
        failure = map_report_failure(exc)
        print(f"{failure.message} ({exc})")
        return 2
    finally:
        await engine.dispose()

    if not rows:
        print("No reports found.")
        return 0

    for row in rows[:limit]:
        print(_format_report_line(row))
    if len(rows) > limit:
        print(f"... {len(rows) - limit} more")
    return 0


def _run_issue_session(
    *,
    subject: str,
    email: str | None,
    ttl_seconds: int | None,
) -> int:
    try:
        token = get_session_manager().issue(subject, email=email, ttl_seconds=ttl_seconds)
    except ValueError as exc:
        print(str(exc))
        return 2
    print(token)
    return 0


def _run_serve() -> int:
    import uvicorn

    uvicorn.run(
        "reportline.api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.API_RELOAD,
    )
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="reportline")
    subparsers = parser.add_subparsers(dest="command")

    list_parser = subparsers.add_parser(
        "list-reports",
        help="List reports newest first",
    )
    list_parser.add_argument("--status", default=None, help="Only reports with this status")
    list_parser.add_argument(
        "--type",
        dest="report_type",
        default=None,
        help="Only reports of this type",
    )
    list_parser.add_argument("--limit", type=int, default=50)

    session_parser = subparsers.add_parser(
        "issue-session",
        help="Print a signed session token",
    )
    session_parser.add_argument("--subject", required=True, help="User identifier (sub claim)")
    session_parser.add_argument("--email", default=None)
    session_parser.add_argument(
        "--ttl-seconds",
        type=int,
        default=None,
        help=f"Token lifetime (default: {settings.SESSION_TTL_SECONDS})",
    )

    subparsers.add_parser("serve", help="Run the API server")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "list-reports":
        return asyncio.run(
            _run_list_reports(
                status=args.status,
                report_type=args.report_type,
                limit=max(args.limit, 1),
            )
        )
    if args.command == "issue-session":
        return _run_issue_session(
            subject=args.subject,
            email=args.email,
            ttl_seconds=args.ttl_seconds,
        )
    if args.command == "serve":
        return _run_serve()

    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
