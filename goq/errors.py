"""
Exception types raised by the queue client.

Errors from enqueue, queue_status and the Job status methods are raised to
the caller. Errors inside the dispatcher and worker loops are passed to the
configured error handler instead.
"""


class GoqError(Exception):
    """Base class for all queue client errors."""


class NoClientError(GoqError):
    """The broker connection was never established or has been closed."""

    def __init__(self, message: str = "no initialized client"):
        super().__init__(message)


class BrokerError(GoqError):
    """A Redis command failed (network, timeout or protocol error)."""


class StatusNotFoundError(GoqError):
    """No status record exists for the job id."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"status of job {job_id} not found")


class StatusDecodeError(GoqError):
    """The stored status record is not a valid status JSON object."""

    def __init__(self, job_id: str, reason: str):
        self.job_id = job_id
        super().__init__(f"malformed status of job {job_id}: {reason}")


class JobStatusError(GoqError):
    """A worker could not load the status of a dequeued job."""

    def __init__(self, job_id: str, cause: Exception):
        self.job_id = job_id
        self.cause = cause
        super().__init__(f"Failed to get status of job {job_id} : {cause}")


class JobProcessingError(GoqError):
    """The processor raised while handling a job."""

    def __init__(self, job_id: str, cause: BaseException):
        self.job_id = job_id
        self.cause = cause
        super().__init__(f"Failed to process job {job_id} : {cause!r}")


class InvalidPayloadError(GoqError, ValueError):
    """A payload is not valid UTF-8 text."""
