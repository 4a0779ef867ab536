"""In-process metrics for the scheduler, the registry and the log stream."""

from collections import deque
from threading import Lock
from typing import Any

# Samples kept per histogram for percentile estimates.
SAMPLE_WINDOW = 512


class Histogram:
    """Running totals plus a sliding window of recent samples."""

    def __init__(self, window: int = SAMPLE_WINDOW) -> None:
        self.count = 0
        self.total = 0.0
        self.maximum = 0.0
        self._recent: deque[float] = deque(maxlen=window)

    def observe(self, value: float) -> None:
        self.count += 1
        self.total += value
        self.maximum = max(self.maximum, value)
        self._recent.append(value)

    def percentile(self, fraction: float) -> float:
        """Nearest-rank percentile over the recent window (0.0 when empty)."""
        if not self._recent:
            return 0.0
        ordered = sorted(self._recent)
        rank = min(len(ordered) - 1, max(0, round(fraction * len(ordered)) - 1))
        return ordered[rank]

    def snapshot(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "avg": self.total / self.count if self.count else 0.0,
            "max": self.maximum,
            "p50": self.percentile(0.5),
            "p95": self.percentile(0.95),
        }


class MetricsRegistry:
    """Counters, gauges and histograms keyed by dotted name.

    Guarded by a lock because engine calls and log records can arrive from
    worker threads.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._counters: dict[str, float] = {}
        self._gauges: dict[str, float] = {}
        self._histograms: dict[str, Histogram] = {}

    def inc_counter(self, name: str, amount: float = 1.0) -> None:
        with self._lock:
            self._counters[name] = self._counters.get(name, 0.0) + amount

    def set_gauge(self, name: str, value: float) -> None:
        with self._lock:
            self._gauges[name] = float(value)

    def observe(self, name: str, value: float) -> None:
        with self._lock:
            if name not in self._histograms:
                self._histograms[name] = Histogram()
            self._histograms[name].observe(value)

    def counter_value(self, name: str) -> float:
        with self._lock:
            return self._counters.get(name, 0.0)

    def snapshot(self) -> dict[str, Any]:
        """Point-in-time copy, shaped for the metrics endpoint."""
        with self._lock:
            return {
                "counters": dict(self._counters),
                "gauges": dict(self._gauges),
                "histograms": {name: h.snapshot() for name, h in self._histograms.items()},
            }


metrics = MetricsRegistry()
