"""
API request and response type definitions.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class EnqueueRequest(BaseModel):
    """Request body for enqueuing a job."""

    payload: dict[str, Any] = Field(..., description="Job payload data")


class JobStatusResponse(BaseModel):
    """Status record of a job."""

    id: str
    code: int
    progress: int


class EnqueueResponse(BaseModel):
    """Response body after enqueuing a job."""

    id: str
    status: JobStatusResponse
    message: str = "Job enqueued successfully"


class QueueDepthResponse(BaseModel):
    """Number of payloads waiting in the broker list."""

    queue_name: str
    queue_length: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    broker: str
    timestamp: datetime


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    detail: str | None = None
