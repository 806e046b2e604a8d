"""
Observability module.
Contains logging, metrics, and tracing setup.
"""

from goq.observability.logging import bind_queue_context, setup_logging
from goq.observability.metrics import (
    MetricsCollector,
    get_metrics,
    setup_metrics,
)
from goq.observability.tracing import get_tracer, setup_tracing

__all__ = [
    "setup_logging",
    "bind_queue_context",
    "setup_metrics",
    "get_metrics",
    "MetricsCollector",
    "setup_tracing",
    "get_tracer",
]
