"""Metrics collection for the archive search service.

Provides a thin convenience wrapper around ``prometheus_client`` so the
service consistently records HTTP, search, upstream and re-ranking metrics.

Design notes
- Metrics and labels are predeclared to avoid cardinality explosions
- A single registry is kept per collector (can be injected for tests)
- Counters are process-local; nothing here persists samples
"""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest
import structlog

logger = structlog.get_logger("metrics")


class MetricsCollector:
    """Centralized metrics collection for the search service.

    Parameters
    - service_name: Logical name used for scoping
    - registry: Optional custom ``CollectorRegistry`` (e.g. for testing)
    """

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry or CollectorRegistry()

        self.request_count = Counter(
            'http_requests_total',
            'Total HTTP requests',
            ['method', 'endpoint', 'status'],
            registry=self.registry
        )

        self.request_duration = Histogram(
            'http_request_duration_seconds',
            'HTTP request duration',
            ['method', 'endpoint'],
            registry=self.registry
        )

        self.search_requests = Counter(
            'archive_search_requests_total',
            'Total search requests',
            ['reranked'],
            registry=self.registry
        )

        self.search_duration = Histogram(
            'archive_search_duration_seconds',
            'Search duration including the upstream fetch',
            ['reranked'],
            registry=self.registry
        )

        self.upstream_requests = Counter(
            'archive_upstream_requests_total',
            'Upstream archive API requests partitioned by outcome',
            ['operation', 'outcome'],
            registry=self.registry
        )

        self.rerank_candidates = Histogram(
            'archive_rerank_candidates',
            'Number of candidates scored per re-ranked search',
            buckets=(0, 5, 10, 20, 30, 50, 75, 100),
            registry=self.registry
        )

    def record_http_request(
        self,
        method: str,
        endpoint: str,
        status: int,
        duration: float
    ) -> None:
        """Record HTTP request metrics.

        duration is expected in seconds to match Prometheus histogram units.
        """
        self.request_count.labels(method=method, endpoint=endpoint, status=status).inc()
        self.request_duration.labels(method=method, endpoint=endpoint).observe(duration)

    def record_search(self, reranked: bool, duration: float) -> None:
        """Record search metrics."""
        label = "true" if reranked else "false"
        self.search_requests.labels(reranked=label).inc()
        self.search_duration.labels(reranked=label).observe(duration)

    def record_upstream_request(self, operation: str, outcome: str) -> None:
        """Record one upstream call (``outcome`` is ``ok`` or ``error``)."""
        self.upstream_requests.labels(operation=operation, outcome=outcome).inc()

    def record_rerank(self, candidate_count: int) -> None:
        """Record the size of a re-ranked candidate batch."""
        self.rerank_candidates.observe(candidate_count)

    def get_metrics(self) -> str:
        """Get metrics in Prometheus exposition format for scraping."""
        return generate_latest(self.registry).decode('utf-8')


# Global metrics collector instance
_metrics_collector: Optional[MetricsCollector] = None


def get_metrics_collector(service_name: str) -> MetricsCollector:
    """Get or create metrics collector for a service.

    Returns a process-wide singleton to avoid duplicate collectors/labels.
    """
    global _metrics_collector
    if _metrics_collector is None:
        _metrics_collector = MetricsCollector(service_name)
        logger.debug("Metrics collector created", service_name=service_name)
    return _metrics_collector
