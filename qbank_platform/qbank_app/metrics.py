"""Prometheus metrics helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

REQUEST_COUNT = Counter(
    "qbank_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "qbank_request_latency_seconds",
    "Latency of HTTP requests in seconds",
    ["endpoint"],
)
INGESTED_QUESTIONS = Counter(
    "qbank_ingested_questions_total",
    "Questions persisted from CSV uploads",
    ["mode"],
)
BEST_EFFORT_FAILURES = Counter(
    "qbank_best_effort_failures_total",
    "Non-fatal side operations that failed and were skipped",
    ["action"],
)
BRIDGE_REQUESTS = Counter(
    "qbank_bridge_requests_total",
    "External bridge requests",
    ["method", "route", "status"],
)


def record_request(method: str, endpoint: str, status: int, latency: float) -> None:
    REQUEST_COUNT.labels(method=method, endpoint=endpoint, status=status).inc()
    REQUEST_LATENCY.labels(endpoint=endpoint).observe(latency)


def record_ingest(mode: str, count: int) -> None:
    if count > 0:
        INGESTED_QUESTIONS.labels(mode=mode).inc(count)


def record_best_effort_failure(action: str) -> None:
    BEST_EFFORT_FAILURES.labels(action=action).inc()


def record_bridge_request(method: str, route: str | None, status: int) -> None:
    BRIDGE_REQUESTS.labels(method=method, route=route or "-", status=status).inc()


def latest_metrics() -> tuple[bytes, str]:
    data = generate_latest()
    return data, CONTENT_TYPE_LATEST
