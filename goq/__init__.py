"""
goq - Redis-backed job queue client

Producers push serialized jobs onto a Redis list. A consumer runs one
dispatcher loop that blocking-pops jobs into a bounded in-process buffer,
drained by a fixed pool of workers that call a user-supplied processor.
Each job has a {code, progress} status record stored next to the list.
"""

__version__ = "1.0.0"

from goq.broker.connection import BrokerConnection, close_connection, get_connection
from goq.errors import (
    BrokerError,
    GoqError,
    InvalidPayloadError,
    JobProcessingError,
    JobStatusError,
    NoClientError,
    StatusDecodeError,
    StatusNotFoundError,
)
from goq.queue import Queue
from goq.types.job import Job, QueueStatus, Status, job_id_for
from goq.types.options import BackoffPolicy, ConnectionOptions, QueueOptions

__all__ = [
    "Queue",
    "QueueOptions",
    "ConnectionOptions",
    "BackoffPolicy",
    "BrokerConnection",
    "get_connection",
    "close_connection",
    "Job",
    "Status",
    "QueueStatus",
    "job_id_for",
    "GoqError",
    "NoClientError",
    "BrokerError",
    "StatusNotFoundError",
    "StatusDecodeError",
    "JobStatusError",
    "InvalidPayloadError",
    "JobProcessingError",
    "__version__",
]
