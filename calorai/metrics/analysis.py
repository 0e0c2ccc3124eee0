"""Instrumentation helpers for the analysis relay.

Metrics (all tagged with ``provider``):
* Counter analysis_requests_total{status}
* Counter analysis_errors_total{kind}
* Histogram analysis_latency_ms
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator

from .core import registry, RegistrySnapshot


def record_request(status: str, *, provider: str) -> None:
    registry.counter("analysis_requests_total", status=status, provider=provider).inc()


def record_error(kind: str, *, provider: str) -> None:
    registry.counter("analysis_errors_total", kind=kind, provider=provider).inc()


def record_latency_ms(ms: float, *, provider: str) -> None:
    registry.histogram("analysis_latency_ms", provider=provider).observe(ms)


@contextmanager
def time_analysis(*, provider: str) -> Iterator[None]:
    """Count the request as completed/failed and observe its latency."""
    start = time.perf_counter()
    try:
        yield
        record_request("completed", provider=provider)
    except Exception:
        record_request("failed", provider=provider)
        raise
    finally:
        record_latency_ms((time.perf_counter() - start) * 1000.0, provider=provider)


def snapshot() -> RegistrySnapshot:  # pragma: no cover - passthrough
    return registry.snapshot()


def reset_all() -> None:
    """Reset every metric (test utility)."""
    registry.reset()
