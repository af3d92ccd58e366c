"""
Prometheus metrics collection.
"""

from prometheus_client import (
    Counter,
    Histogram,
    CollectorRegistry,
    generate_latest,
    CONTENT_TYPE_LATEST,
    REGISTRY,
)

from jobqueue.constants import (
    METRIC_API_LATENCY,
    METRIC_API_REQUESTS,
    METRIC_CLAIM_ATTEMPTS,
    METRIC_CLAIM_LATENCY,
    METRIC_JOBS_CREATED,
)

# Global metrics instance
_metrics: "MetricsCollector | None" = None


class MetricsCollector:
    """
    Prometheus metrics collector for the job queue.

    Collects metrics for:
    - Job creation
    - Claim attempts by mode and outcome
    - Claim latency
    - API requests
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        """
        Initialize the metrics collector.

        Args:
            registry: Optional custom registry. Uses default if not provided.
        """
        self._registry = registry or REGISTRY

        # Jobs created counter
        self.jobs_created = Counter(
            METRIC_JOBS_CREATED,
            "Total number of jobs created",
            ["status"],
            registry=self._registry,
        )

        # Claim attempts counter (outcome: claimed, conflict, error)
        self.claim_attempts = Counter(
            METRIC_CLAIM_ATTEMPTS,
            "Total number of claim attempts",
            ["mode", "outcome"],
            registry=self._registry,
        )

        # Claim latency histogram, including row-lock waits
        self.claim_latency = Histogram(
            METRIC_CLAIM_LATENCY,
            "Claim transaction latency in seconds",
            ["mode"],
            buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 5.0),
            registry=self._registry,
        )

        # API requests counter
        self.api_requests = Counter(
            METRIC_API_REQUESTS,
            "Total number of API requests",
            ["method", "endpoint", "status"],
            registry=self._registry,
        )

        # API latency histogram
        self.api_latency = Histogram(
            METRIC_API_LATENCY,
            "API request latency in seconds",
            ["method", "endpoint"],
            buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
            registry=self._registry,
        )

    def record_job_created(self, status: str) -> None:
        """Record a job creation."""
        self.jobs_created.labels(status=status).inc()

    def record_claim(
        self,
        mode: str,
        outcome: str,
        duration_seconds: float,
    ) -> None:
        """Record a claim attempt and its latency."""
        self.claim_attempts.labels(mode=mode, outcome=outcome).inc()
        self.claim_latency.labels(mode=mode).observe(duration_seconds)

    def record_api_request(
        self,
        method: str,
        endpoint: str,
        status: int,
        duration_seconds: float,
    ) -> None:
        """Record an API request."""
        self.api_requests.labels(
            method=method,
            endpoint=endpoint,
            status=str(status),
        ).inc()
        self.api_latency.labels(method=method, endpoint=endpoint).observe(
            duration_seconds
        )

    def get_metrics(self) -> bytes:
        """Get all metrics in Prometheus format."""
        return generate_latest(self._registry)

    def get_content_type(self) -> str:
        """Get the content type for metrics response."""
        return CONTENT_TYPE_LATEST


def setup_metrics() -> MetricsCollector:
    """
    Set up and return the metrics collector.

    Returns:
        MetricsCollector: The metrics collector instance.
    """
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics


def get_metrics() -> MetricsCollector:
    """
    Get the metrics collector instance, creating it on first use.

    Returns:
        MetricsCollector: The metrics collector instance.
    """
    if _metrics is None:
        return setup_metrics()
    return _metrics
