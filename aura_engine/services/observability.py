"""
Observability for the aura detection pipeline.

Times pipeline stages, samples process memory, and keeps a bounded in-process
history of stage metrics.
"""
import threading
import time
from collections import defaultdict, deque
from contextlib import contextmanager
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

import numpy as np
import psutil
from loguru import logger

from aura_engine.config import config


@dataclass
class PerformanceMetrics:
    """Performance metrics for one pipeline stage."""
    operation_name: str
    duration_ms: float
    memory_usage_mb: float
    sample_count: int
    cluster_count: int
    timestamp: float
    error: Optional[str] = None


class MetricsCollector:
    """Thread-safe metrics collector for detection stages."""
    
    def __init__(self, max_history: int = 1000):
        self.max_history = max_history
        self._lock = threading.Lock()
        self._metrics_history: deque = deque(maxlen=max_history)
        self._operation_counts = defaultdict(int)
        self._error_counts = defaultdict(int)
        self._durations = defaultdict(lambda: deque(maxlen=100))
    
    def record_performance(self, metrics: PerformanceMetrics) -> None:
        """Record performance metrics for an operation."""
        with self._lock:
            self._metrics_history.append(metrics)
            self._operation_counts[metrics.operation_name] += 1
            if metrics.error:
                self._error_counts[metrics.operation_name] += 1
            self._durations[metrics.operation_name].append(metrics.duration_ms)
    
    def get_operation_stats(self, operation_name: str) -> Dict[str, Any]:
        """Get aggregated statistics for a specific operation."""
        with self._lock:
            durations = list(self._durations.get(operation_name, []))
            if not durations:
                return {}
            calls = self._operation_counts[operation_name]
            errors = self._error_counts[operation_name]
            return {
                'operation_name': operation_name,
                'total_calls': calls,
                'error_count': errors,
                'error_rate': errors / max(1, calls),
                'duration_stats': {
                    'mean_ms': float(np.mean(durations)),
                    'median_ms': float(np.median(durations)),
                    'p95_ms': float(np.percentile(durations, 95)),
                    'max_ms': float(np.max(durations)),
                },
            }
    
    def get_recent_metrics(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Get the most recent performance metrics."""
        with self._lock:
            recent = list(self._metrics_history)[-limit:]
            return [asdict(metric) for metric in recent]
    
    def reset(self) -> None:
        with self._lock:
            self._metrics_history.clear()
            self._operation_counts.clear()
            self._error_counts.clear()
            self._durations.clear()


# Global metrics collector instance
_metrics_collector = MetricsCollector()


def get_metrics_collector() -> MetricsCollector:
    """Get the global metrics collector instance."""
    return _metrics_collector


def reset_metrics() -> None:
    """Clear collected metrics (used by tests)."""
    _metrics_collector.reset()


def _rss_mb() -> float:
    return psutil.Process().memory_info().rss / 1024 / 1024


@contextmanager
def performance_monitor(operation_name: str, sample_count: int = 0, cluster_count: int = 0):
    """Context manager for monitoring performance of a pipeline stage."""
    start_time = time.perf_counter()
    start_memory = _rss_mb()
    error_msg = None
    
    try:
        yield
    except Exception as e:
        error_msg = str(e)
        raise
    finally:
        duration_ms = (time.perf_counter() - start_time) * 1000
        memory_mb = max(_rss_mb(), start_memory)
        
        if config.METRICS_ENABLED:
            _metrics_collector.record_performance(PerformanceMetrics(
                operation_name=operation_name,
                duration_ms=duration_ms,
                memory_usage_mb=memory_mb,
                sample_count=sample_count,
                cluster_count=cluster_count,
                timestamp=time.time(),
                error=error_msg
            ))
        
        if error_msg:
            logger.warning(f"Operation {operation_name} failed after {duration_ms:.1f}ms: {error_msg}")
        else:
            logger.debug(f"Operation {operation_name} completed in {duration_ms:.1f}ms "
                         f"(memory: {memory_mb:.1f}MB)")
