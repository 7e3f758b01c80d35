"""Metrics collection for optimizer runs."""

import time
from typing import Any, Dict, Iterator
from collections import defaultdict
from contextlib import contextmanager


class MetricsCollector:
    """
    Collects named timers, counters and metric series for one optimizer run.

    Timers use the monotonic ``perf_counter`` clock and report milliseconds.
    """

    def __init__(self):
        self._start_time = time.perf_counter()
        self._timers: Dict[str, float] = {}
        self._metrics: Dict[str, Any] = defaultdict(list)
        self._counters: Dict[str, int] = defaultdict(int)

    def start_timer(self, name: str) -> None:
        """Start a named timer."""
        self._timers[name] = time.perf_counter()

    def stop_timer(self, name: str) -> float:
        """
        Stop a named timer and return elapsed time.

        Args:
            name: Timer name

        Returns:
            Elapsed time in milliseconds

        Raises:
            KeyError: If timer was not started
        """
        if name not in self._timers:
            raise KeyError(f"Timer '{name}' was not started")

        elapsed = (time.perf_counter() - self._timers.pop(name)) * 1000
        self.record_metric(f"{name}_ms", elapsed)
        return elapsed

    @contextmanager
    def timed(self, name: str) -> Iterator[None]:
        """Time the enclosed block as ``name``, also when it raises."""
        self.start_timer(name)
        try:
            yield
        finally:
            self.stop_timer(name)

    def record_metric(self, name: str, value: Any) -> None:
        """Record a metric value."""
        self._metrics[name].append(value)

    def increment_counter(self, name: str, amount: int = 1) -> None:
        """Increment a counter."""
        self._counters[name] += amount

    def get_counter(self, name: str) -> int:
        return self._counters.get(name, 0)

    def get_metric(self, name: str) -> list:
        return self._metrics.get(name, [])

    def get_summary(self) -> Dict[str, Any]:
        """
        Get summary of all metrics.

        Returns:
            Dictionary with metric summaries
        """
        summary = {
            "total_elapsed_ms": self.elapsed_time(),
            "counters": dict(self._counters),
            "metrics": {}
        }

        for name, values in self._metrics.items():
            if not values:
                continue
            if all(isinstance(v, (int, float)) for v in values):
                summary["metrics"][name] = {
                    "count": len(values),
                    "sum": sum(values),
                    "avg": sum(values) / len(values),
                    "min": min(values),
                    "max": max(values),
                }
            else:
                summary["metrics"][name] = {
                    "count": len(values),
                    "values": values
                }

        return summary

    def elapsed_time(self) -> float:
        """Milliseconds since initialization or the last reset."""
        return (time.perf_counter() - self._start_time) * 1000

    def reset(self) -> None:
        """Reset all metrics and timers."""
        self._start_time = time.perf_counter()
        self._timers.clear()
        self._metrics.clear()
        self._counters.clear()
