# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest

REQUEST_LATENCY = Histogram(
    "treasury_request_latency_seconds",
    "Request latency",
    labelnames=("endpoint",),
    buckets=(0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1, 2, 5),
)
REQUEST_COUNTER = Counter(
    "treasury_requests_total",
    "Number of processed requests",
    labelnames=("endpoint", "status"),
)
AUTH_EVENTS = Counter(
    "treasury_auth_events_total",
    "Claim, login and logout outcomes",
    labelnames=("event", "outcome"),
)
ACTIVE_SESSIONS = Gauge("treasury_active_sessions", "Live sessions")


def record_request(endpoint: str, status: int, duration: float) -> None:
    REQUEST_LATENCY.labels(endpoint=endpoint).observe(duration)
    REQUEST_COUNTER.labels(endpoint=endpoint, status=str(status)).inc()


def record_auth_event(event: str, outcome: str) -> None:
    AUTH_EVENTS.labels(event=event, outcome=outcome).inc()


def render_metrics(active_sessions: int) -> tuple[bytes, str]:
    ACTIVE_SESSIONS.set(active_sessions)
    return generate_latest(), CONTENT_TYPE_LATEST


__all__ = [
    "ACTIVE_SESSIONS",
    "AUTH_EVENTS",
    "REQUEST_COUNTER",
    "REQUEST_LATENCY",
    "record_auth_event",
    "record_request",
    "render_metrics",
]
