"""
Type definitions for the queue client.
Contains input/output type definitions grouped by module.
"""

from goq.types.api import (
    EnqueueRequest,
    EnqueueResponse,
    HealthResponse,
    JobStatusResponse,
    QueueDepthResponse,
)
from goq.types.job import (
    Job,
    QueueStatus,
    Status,
    job_id_for,
)
from goq.types.options import (
    BackoffPolicy,
    ConnectionOptions,
    ErrorHandler,
    Processor,
    QueueOptions,
)

__all__ = [
    # API types
    "EnqueueRequest",
    "EnqueueResponse",
    "JobStatusResponse",
    "QueueDepthResponse",
    "HealthResponse",
    # Job types
    "Job",
    "Status",
    "QueueStatus",
    "job_id_for",
    # Options
    "ConnectionOptions",
    "QueueOptions",
    "BackoffPolicy",
    "Processor",
    "ErrorHandler",
]
