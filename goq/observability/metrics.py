"""
Prometheus metrics collection.
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

from goq.constants import (
    METRIC_BUFFER_SIZE,
    METRIC_DISPATCHER_ERRORS,
    METRIC_JOB_DURATION,
    METRIC_JOBS_ENQUEUED,
    METRIC_JOBS_PROCESSED,
    METRIC_QUEUE_DEPTH,
)

# Global metrics instance
_metrics: "MetricsCollector | None" = None


class MetricsCollector:
    """
    Prometheus metrics collector for the queue client.

    Collects metrics for:
    - Broker queue depth
    - Job enqueues and processing outcomes
    - Processor duration
    - Dispatcher pop errors
    - In-process buffer occupancy
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        """
        Initialize the metrics collector.

        Args:
            registry: Optional custom registry. Uses default if not provided.
        """
        self._registry = registry or REGISTRY

        self.queue_depth = Gauge(
            METRIC_QUEUE_DEPTH,
            "Number of payloads waiting in the broker list",
            ["queue"],
            registry=self._registry,
        )

        self.jobs_enqueued = Counter(
            METRIC_JOBS_ENQUEUED,
            "Total number of jobs enqueued",
            ["queue"],
            registry=self._registry,
        )

        self.jobs_processed = Counter(
            METRIC_JOBS_PROCESSED,
            "Total number of dequeued jobs by outcome",
            ["queue", "outcome"],
            registry=self._registry,
        )

        self.job_duration = Histogram(
            METRIC_JOB_DURATION,
            "Processor duration in seconds",
            ["queue", "outcome"],
            buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
            registry=self._registry,
        )

        self.dispatcher_errors = Counter(
            METRIC_DISPATCHER_ERRORS,
            "Total number of failed blocking pops",
            ["queue"],
            registry=self._registry,
        )

        self.buffer_size = Gauge(
            METRIC_BUFFER_SIZE,
            "Payloads waiting in the in-process buffer",
            ["queue"],
            registry=self._registry,
        )

    def record_job_enqueued(self, queue: str) -> None:
        """Record a job enqueue."""
        self.jobs_enqueued.labels(queue=queue).inc()

    def record_job_processed(
        self,
        queue: str,
        outcome: str,
        duration_seconds: float | None = None,
    ) -> None:
        """Record the outcome of one dequeued job."""
        self.jobs_processed.labels(queue=queue, outcome=outcome).inc()
        if duration_seconds is not None:
            self.job_duration.labels(queue=queue, outcome=outcome).observe(
                duration_seconds
            )

    def record_dispatcher_error(self, queue: str) -> None:
        """Record a failed blocking pop."""
        self.dispatcher_errors.labels(queue=queue).inc()

    def update_queue_depth(self, queue: str, depth: int) -> None:
        """Update broker queue depth."""
        self.queue_depth.labels(queue=queue).set(depth)

    def update_buffer_size(self, queue: str, size: int) -> None:
        """Update in-process buffer occupancy."""
        self.buffer_size.labels(queue=queue).set(size)

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
