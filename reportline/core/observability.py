"""
Prometheus metrics registry and helper recorders.
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REPORT_LIST_OUTCOMES = (
    "ok",
    "unauthorized",
    "invalid_filter",
    "store_unreachable",
    "store_timeout",
    "query_timeout",
    "error",
)

REPORT_LIST_REQUESTS_TOTAL = Counter(
    "report_list_requests_total",
    "Report listing requests by outcome.",
    ["outcome"],
)
REPORT_LIST_QUERY_SECONDS = Histogram(
    "report_list_query_seconds",
    "Latency of the report listing store query in seconds.",
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 15.0, 30.0),
)

for _outcome in REPORT_LIST_OUTCOMES:
    # Pre-create label sets so every outcome is exported from startup.
    REPORT_LIST_REQUESTS_TOTAL.labels(outcome=_outcome)


def record_report_list_outcome(outcome: str) -> None:
    REPORT_LIST_REQUESTS_TOTAL.labels(outcome=outcome).inc()


def record_report_list_query_latency(seconds: float) -> None:
    REPORT_LIST_QUERY_SECONDS.observe(max(0.0, seconds))
