"""
Application constants.
Centralized location for all constant values used across the application.
"""

from enum import StrEnum


class JobOutcome(StrEnum):
    """
    Result of handing one dequeued payload to the worker pool.

    - SUCCEEDED: the processor returned normally
    - FAILED: the processor raised
    - SKIPPED: the status record could not be loaded, processor not called
    """

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


# Redis key namespace for status records: <prefix><job id>
JOB_STATUS_PREFIX = "goq:queue:job:status:"

# Default values
DEFAULT_QUEUE_NAME = "goq:queue"
DEFAULT_BUFFER_SIZE = 1000
MAX_CONCURRENCY = 255
STATUS_MIN = 0
STATUS_MAX = 255

# API constants
API_V1_PREFIX = "/v1"

# Metrics names
METRIC_QUEUE_DEPTH = "goq_queue_depth"
METRIC_JOBS_ENQUEUED = "goq_jobs_enqueued_total"
METRIC_JOBS_PROCESSED = "goq_jobs_processed_total"
METRIC_JOB_DURATION = "goq_job_duration_seconds"
METRIC_DISPATCHER_ERRORS = "goq_dispatcher_errors_total"
METRIC_BUFFER_SIZE = "goq_buffer_size"

# Trace span names
SPAN_ENQUEUE_JOB = "enqueue_job"
SPAN_EXECUTE_JOB = "execute_job"
