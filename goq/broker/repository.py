"""
Status repository for broker operations.
Maps job ids to status records stored as JSON strings in Redis.
"""

import logging

from pydantic import ValidationError
from redis.asyncio import Redis
from redis.exceptions import RedisError

from goq.constants import JOB_STATUS_PREFIX
from goq.errors import BrokerError, StatusDecodeError, StatusNotFoundError
from goq.types.job import Status

logger = logging.getLogger(__name__)


class StatusRepository:
    """
    Repository for job status records.

    Records live under goq:queue:job:status:<id> with no expiry. Writes
    are plain SETs, so the last writer wins.
    """

    def __init__(self, client: Redis):
        """
        Initialize the repository with a Redis client.

        Args:
            client: The async Redis client.
        """
        self._client = client

    @staticmethod
    def key_for(job_id: str) -> str:
        """Get the Redis key holding the status of a job."""
        return JOB_STATUS_PREFIX + job_id

    async def initialize(self, job_id: str) -> Status:
        """
        Store the initial status (code 0, progress 0) of a job.

        Args:
            job_id: The job id.

        Returns:
            The stored status.
        """
        status = Status()
        await self.set(job_id, status)
        return status

    async def set(self, job_id: str, status: Status) -> None:
        """
        Write the status of a job, overwriting any previous record.

        Raises:
            BrokerError: If the write fails.
        """
        try:
            await self._client.set(self.key_for(job_id), status.to_json())
        except RedisError as e:
            raise BrokerError(f"Failed to set status of job {job_id}: {e}") from e

        logger.debug(
            "Stored job status",
            extra={"job_id": job_id, "code": status.code, "progress": status.progress},
        )

    async def get(self, job_id: str) -> Status:
        """
        Read and decode the status of a job.

        Raises:
            StatusNotFoundError: If no record exists.
            StatusDecodeError: If the record is not a valid status object.
            BrokerError: If the read fails.
        """
        try:
            raw = await self._client.get(self.key_for(job_id))
        except RedisError as e:
            raise BrokerError(f"Failed to get status of job {job_id}: {e}") from e

        if raw is None:
            raise StatusNotFoundError(job_id)

        try:
            return Status.from_json(raw)
        except ValidationError as e:
            raise StatusDecodeError(job_id, str(e)) from e
