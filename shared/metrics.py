"""
Shared metrics configuration for the portfolio cache layer.
"""

from prometheus_client import Counter, Histogram, CollectorRegistry, REGISTRY
from typing import Dict, Any, Optional
import threading


class CacheMetrics:
    """Prometheus metrics for cache store operations."""

    def __init__(self, service_name: str = "cache", registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry if registry is not None else REGISTRY
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up cache metrics."""
        self._metrics["cache_operations_total"] = Counter(
            "cache_operations_total",
            "Total cache store operations",
            ["operation", "status"],
            registry=self.registry
        )

        self._metrics["cache_operation_duration_seconds"] = Histogram(
            "cache_operation_duration_seconds",
            "Cache store operation duration in seconds",
            ["operation"],
            registry=self.registry
        )

        self._metrics["cache_hits_total"] = Counter(
            "cache_hits_total",
            "Total cache hits",
            registry=self.registry
        )

        self._metrics["cache_misses_total"] = Counter(
            "cache_misses_total",
            "Total cache misses",
            registry=self.registry
        )

        self._metrics["cache_scan_truncations_total"] = Counter(
            "cache_scan_truncations_total",
            "Key scans that ended early on a store error",
            registry=self.registry
        )

        self._metrics["cache_health_checks_total"] = Counter(
            "cache_health_checks_total",
            "Total cache health checks",
            ["status"],
            registry=self.registry
        )

    def record_operation(self, operation: str, status: str, duration: float):
        """Record a store operation."""
        self._metrics["cache_operations_total"].labels(operation=operation, status=status).inc()
        self._metrics["cache_operation_duration_seconds"].labels(operation=operation).observe(duration)

    def record_lookup(self, hit: bool):
        """Record a cache hit or miss."""
        if hit:
            self._metrics["cache_hits_total"].inc()
        else:
            self._metrics["cache_misses_total"].inc()

    def record_scan_truncation(self):
        """Record a truncated key scan."""
        self._metrics["cache_scan_truncations_total"].inc()

    def record_health_check(self, status: str):
        """Record health check metrics."""
        self._metrics["cache_health_checks_total"].labels(status=status).inc()


_default_collector: Optional[CacheMetrics] = None
_default_collector_lock = threading.Lock()


def get_metrics_collector(service_name: str = "cache", registry: Optional[CollectorRegistry] = None) -> CacheMetrics:
    """Get a metrics collector for a service.

    The collector on the default registry is created once per process, since
    prometheus_client refuses duplicate registrations.
    """
    global _default_collector

    if registry is not None:
        return CacheMetrics(service_name, registry)

    with _default_collector_lock:
        if _default_collector is None:
            _default_collector = CacheMetrics(service_name)
        return _default_collector
