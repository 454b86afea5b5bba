"""
Performance monitoring utilities.

Times engine operations and logs the ones that run longer than the
configured threshold.
"""

import functools
import logging
import time
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_SLOW_THRESHOLD = 1.0


class PerformanceMonitor:
    """
    Collects operation durations.

    Attributes:
        slow_threshold: Seconds after which an operation is logged as slow
        metrics: Recorded durations per operation name
    """

    def __init__(self, slow_threshold: float = DEFAULT_SLOW_THRESHOLD):
        self.slow_threshold = slow_threshold
        self.metrics: Dict[str, List[float]] = {}

    def record(self, operation: str, duration: float):
        """Record one run of an operation, warning if it was slow."""
        self.metrics.setdefault(operation, []).append(duration)
        if self.slow_threshold and duration > self.slow_threshold:
            logger.warning(
                "Operation '%s' took %.2fs (threshold: %.2fs)",
                operation, duration, self.slow_threshold,
            )

    def get_stats(self, operation: str) -> Dict[str, float]:
        """
        Summarize the recorded runs of an operation.

        Returns:
            Dictionary with count, total, avg and max (all zero if never run)
        """
        durations = self.metrics.get(operation) or []
        if not durations:
            return {"count": 0, "total": 0.0, "avg": 0.0, "max": 0.0}
        total = sum(durations)
        return {
            "count": len(durations),
            "total": total,
            "avg": total / len(durations),
            "max": max(durations),
        }

    def clear(self):
        self.metrics.clear()


_global_monitor = PerformanceMonitor()


def get_monitor() -> PerformanceMonitor:
    """Get the process-wide performance monitor."""
    return _global_monitor


def configure_monitor(slow_threshold: float):
    """Apply the slow-operation threshold from the engine settings."""
    _global_monitor.slow_threshold = slow_threshold


def monitor_performance(operation_name: Optional[str] = None):
    """
    Decorator recording how long the wrapped call takes.

    Example:
        @monitor_performance("compute_word_diff")
        def compute_word_diff(self, original, proposed):
            ...
    """
    def decorator(func: Callable) -> Callable:
        op_name = operation_name or func.__name__

        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            start_time = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                _global_monitor.record(op_name, time.perf_counter() - start_time)

        return wrapper
    return decorator
