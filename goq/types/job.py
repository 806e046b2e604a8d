"""
Job-related type definitions.
"""

import base64
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from goq.constants import STATUS_MAX, STATUS_MIN

if TYPE_CHECKING:
    from goq.broker.repository import StatusRepository


def job_id_for(payload: str | bytes) -> str:
    """
    Derive the job id from the raw payload.

    The id is the standard base32 encoding of the payload bytes, so
    byte-identical payloads always map to the same id and status record.
    """
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    return base64.b32encode(payload).decode("ascii")


class Status(BaseModel):
    """
    Processing state of a job.
    Serialized as {"Code": <0-255>, "Progress": <0-255>}.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=True,
        strict=True,
    )

    code: int = Field(default=0, ge=STATUS_MIN, le=STATUS_MAX, alias="Code")
    progress: int = Field(default=0, ge=STATUS_MIN, le=STATUS_MAX, alias="Progress")

    def to_json(self) -> str:
        """Serialize to the stored wire format."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str | bytes) -> "Status":
        """Parse the stored wire format."""
        return cls.model_validate_json(raw)


class QueueStatus(BaseModel):
    """Snapshot of the broker list backing a queue."""

    queue_length: int


@dataclass
class Job:
    """
    A dequeued job handed to the processor.

    Holds the id, the raw payload and the status loaded when the job was
    dequeued. Status changes go through set_status so they are persisted.
    """

    id: str
    payload: str
    status: Status
    store: "StatusRepository" = field(repr=False, compare=False)

    async def set_status(self, code: int, progress: int) -> None:
        """
        Update the status in memory and persist it.

        Last writer wins: concurrent updates for the same id overwrite
        each other.

        Raises:
            pydantic.ValidationError: If code or progress is outside 0-255.
            BrokerError: If the write fails.
        """
        updated = Status(code=code, progress=progress)
        self.status.code = updated.code
        self.status.progress = updated.progress
        await self.store.set(self.id, self.status)

    async def get_status(self) -> Status:
        """
        Reload the status from the store, replacing the in-memory copy.

        Raises:
            StatusNotFoundError: If no record exists.
            StatusDecodeError: If the record is malformed.
            BrokerError: If the read fails.
        """
        self.status = await self.store.get(self.id)
        return self.status
