# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from prometheus_client import Counter, Gauge, Histogram

from pos_session.shared.config import load_config

REQUEST_LATENCY = Histogram(
    "pos_api_request_latency_seconds",
    "Backend call latency including retries",
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10, 30),
)
REQUEST_COUNTER = Counter(
    "pos_api_requests_total",
    "Number of backend calls by final outcome",
    labelnames=("method", "outcome"),
)
RETRY_COUNTER = Counter(
    "pos_api_retries_total",
    "Number of retried backend attempts",
    labelnames=("kind",),
)
ACTIVE_SESSION_GAUGE = Gauge("pos_active_session", "1 while a session is live")


def metrics_enabled() -> bool:
    return load_config().observability.metrics_enabled


@contextmanager
def track_request(method: str, outcome_getter: Callable[[], str]) -> Iterator[None]:
    if not metrics_enabled():
        yield
        return

    start = time.perf_counter()
    try:
        yield
    finally:
        REQUEST_LATENCY.observe(time.perf_counter() - start)
        REQUEST_COUNTER.labels(method=method, outcome=outcome_getter()).inc()


def record_retry(kind: str) -> None:
    if metrics_enabled():
        RETRY_COUNTER.labels(kind=kind).inc()


def set_session_active(active: bool) -> None:
    if metrics_enabled():
        ACTIVE_SESSION_GAUGE.set(1 if active else 0)


__all__ = [
    "ACTIVE_SESSION_GAUGE",
    "REQUEST_COUNTER",
    "REQUEST_LATENCY",
    "RETRY_COUNTER",
    "record_retry",
    "set_session_active",
    "track_request",
]
