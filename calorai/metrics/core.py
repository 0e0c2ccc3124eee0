"""In-memory metrics for the analysis relay.

Labelled counters and latency histograms kept in process memory,
readable through ``snapshot()`` (tests, debugging). Nothing is exported
over HTTP.
"""

from __future__ import annotations

import time
from collections import deque
from threading import Lock
from typing import Deque, Dict, FrozenSet, List, Tuple, TypedDict

Labels = FrozenSet[Tuple[str, str]]

DEFAULT_HISTOGRAM_WINDOW = 2000


class Counter:
    """Monotonic integer series for one label set."""

    def __init__(self, name: str, labels: Dict[str, str]) -> None:
        self.name = name
        self.labels = labels
        self._count = 0
        self._lock = Lock()

    def inc(self, amount: int = 1) -> None:
        with self._lock:
            self._count += amount

    def value(self) -> int:
        with self._lock:
            return self._count


class HistogramStats(TypedDict):
    count: int
    avg: float
    p50: float
    p95: float
    min: float
    max: float


class Histogram:
    """Latest ``window`` observations of one label set."""

    def __init__(self, name: str, labels: Dict[str, str], window: int) -> None:
        self.name = name
        self.labels = labels
        self._samples: Deque[float] = deque(maxlen=window)
        self._lock = Lock()

    def observe(self, value: float) -> None:
        with self._lock:
            self._samples.append(value)

    def snapshot(self) -> HistogramStats:
        with self._lock:
            ordered = sorted(self._samples)
        if not ordered:
            return {"count": 0, "avg": 0.0, "p50": 0.0, "p95": 0.0, "min": 0.0, "max": 0.0}
        last = len(ordered) - 1
        return {
            "count": len(ordered),
            "avg": sum(ordered) / len(ordered),
            "p50": ordered[last // 2],
            "p95": ordered[int(last * 0.95)],
            "min": ordered[0],
            "max": ordered[-1],
        }


class CounterEntry(TypedDict):
    name: str
    tags: Dict[str, str]
    value: int


class HistogramEntry(TypedDict):
    name: str
    tags: Dict[str, str]
    stats: HistogramStats


class RegistrySnapshot(TypedDict):
    counters: List[CounterEntry]
    histograms: List[HistogramEntry]
    generatedAt: float


class MetricsRegistry:
    """Get-or-create store of counters and histograms keyed by name and labels."""

    def __init__(self, histogram_window: int = DEFAULT_HISTOGRAM_WINDOW) -> None:
        self.histogram_window = histogram_window
        self._counters: Dict[Tuple[str, Labels], Counter] = {}
        self._histograms: Dict[Tuple[str, Labels], Histogram] = {}
        self._lock = Lock()

    def counter(self, name: str, **labels: str) -> Counter:
        key = (name, frozenset(labels.items()))
        with self._lock:
            if key not in self._counters:
                self._counters[key] = Counter(name, labels)
            return self._counters[key]

    def histogram(self, name: str, **labels: str) -> Histogram:
        key = (name, frozenset(labels.items()))
        with self._lock:
            if key not in self._histograms:
                self._histograms[key] = Histogram(name, labels, self.histogram_window)
            return self._histograms[key]

    def counter_value(self, name: str, **labels: str) -> int:
        """Current value of a counter, 0 if never incremented."""
        with self._lock:
            found = self._counters.get((name, frozenset(labels.items())))
        return found.value() if found is not None else 0

    def snapshot(self) -> RegistrySnapshot:
        with self._lock:
            counters = list(self._counters.values())
            histograms = list(self._histograms.values())
        return {
            "counters": [{"name": c.name, "tags": c.labels, "value": c.value()} for c in counters],
            "histograms": [
                {"name": h.name, "tags": h.labels, "stats": h.snapshot()} for h in histograms
            ],
            "generatedAt": time.time(),
        }

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._histograms.clear()


registry = MetricsRegistry()
