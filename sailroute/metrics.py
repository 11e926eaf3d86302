"""
Search Metrics Module.

Collects timings and counters for route searches:
- Wall-clock timing of each search
- Counters for expanded paths and found / failed routes
- Gauges for the largest frontier seen

Usage:
    from sailroute.metrics import metrics, timed

    @timed("minimum_time_route")
    def route(problem):
        ...

    with metrics.timer("load_polar"):
        polar = load_polar(path)

    metrics.increment("frontier_paths_expanded", 120)
    summary = metrics.get_summary()
"""

import logging
import time
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from functools import wraps
from threading import Lock
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class TimingStats:
    """Statistics for a timed operation."""
    name: str
    count: int = 0
    total_ms: float = 0.0
    min_ms: float = float('inf')
    max_ms: float = 0.0
    recent_ms: deque = field(default_factory=lambda: deque(maxlen=100))

    @property
    def avg_ms(self) -> float:
        return self.total_ms / self.count if self.count > 0 else 0.0

    def record(self, duration_ms: float):
        """Record a timing measurement."""
        self.count += 1
        self.total_ms += duration_ms
        self.min_ms = min(self.min_ms, duration_ms)
        self.max_ms = max(self.max_ms, duration_ms)
        self.recent_ms.append(duration_ms)

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "avg_ms": round(self.avg_ms, 3),
            "min_ms": round(self.min_ms, 3) if self.min_ms != float('inf') else 0,
            "max_ms": round(self.max_ms, 3),
        }


class PerformanceMetrics:
    """
    Thread-safe metrics collector.

    Searches run in worker threads under the API, so every mutation
    happens under a single lock.
    """

    # Searches slower than this are logged as warnings (ms)
    SLOW_THRESHOLD_MS = 5_000.0

    def __init__(self, slow_threshold_ms: Optional[float] = None):
        self._timings: Dict[str, TimingStats] = {}
        self._counters: Dict[str, int] = {}
        self._gauges: Dict[str, float] = {}
        self._lock = Lock()
        self._start_time = datetime.now()
        if slow_threshold_ms is not None:
            self.SLOW_THRESHOLD_MS = slow_threshold_ms

    @contextmanager
    def timer(self, name: str):
        """
        Context manager for timing a block of code.

        Usage:
            with metrics.timer("operation_name"):
                do_something()
        """
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            self._record_timing(name, elapsed_ms)

    def _record_timing(self, name: str, elapsed_ms: float):
        with self._lock:
            if name not in self._timings:
                self._timings[name] = TimingStats(name=name)
            self._timings[name].record(elapsed_ms)

        if elapsed_ms > self.SLOW_THRESHOLD_MS:
            logger.warning(
                f"Slow operation: {name} took {elapsed_ms:.1f}ms "
                f"(threshold: {self.SLOW_THRESHOLD_MS}ms)"
            )

    def increment(self, name: str, amount: int = 1):
        """Increment a counter."""
        with self._lock:
            self._counters[name] = self._counters.get(name, 0) + amount

    def set_gauge(self, name: str, value: float):
        """Set a gauge value."""
        with self._lock:
            self._gauges[name] = value

    def max_gauge(self, name: str, value: float):
        """Raise a gauge to *value* if it is higher than the stored one."""
        with self._lock:
            self._gauges[name] = max(self._gauges.get(name, value), value)

    def get_counter(self, name: str) -> int:
        with self._lock:
            return self._counters.get(name, 0)

    def get_gauge(self, name: str) -> float:
        with self._lock:
            return self._gauges.get(name, 0.0)

    def get_timing(self, name: str) -> Optional[TimingStats]:
        with self._lock:
            return self._timings.get(name)

    def get_summary(self) -> dict:
        """Get complete metrics summary."""
        with self._lock:
            uptime = (datetime.now() - self._start_time).total_seconds()
            return {
                "uptime_seconds": round(uptime, 1),
                "timings": {
                    name: stats.to_dict()
                    for name, stats in self._timings.items()
                },
                "counters": self._counters.copy(),
                "gauges": {k: round(v, 4) for k, v in self._gauges.items()},
            }

    def reset(self):
        """Reset all metrics."""
        with self._lock:
            self._timings.clear()
            self._counters.clear()
            self._gauges.clear()
            self._start_time = datetime.now()


# Global metrics instance
metrics = PerformanceMetrics()


def timed(name: str):
    """
    Decorator to time a function.

    Usage:
        @timed("my_function")
        def my_function():
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            with metrics.timer(name):
                return func(*args, **kwargs)
        return wrapper
    return decorator


def get_metrics() -> PerformanceMetrics:
    """Get the global metrics instance."""
    return metrics
