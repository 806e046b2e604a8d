"""
Job and queue routes.
"""

import json
import logging

from fastapi import APIRouter, HTTPException, status

from goq.api.deps import QueueDep
from goq.constants import API_V1_PREFIX
from goq.errors import BrokerError, NoClientError, StatusDecodeError, StatusNotFoundError
from goq.types.api import (
    EnqueueRequest,
    EnqueueResponse,
    ErrorResponse,
    JobStatusResponse,
    QueueDepthResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix=API_V1_PREFIX, tags=["Jobs"])


@router.post(
    "/jobs",
    response_model=EnqueueResponse,
    status_code=status.HTTP_201_CREATED,
    responses={503: {"model": ErrorResponse}},
    summary="Enqueue a job",
    description="Push a job onto the queue and initialize its status to code 0, progress 0.",
)
async def enqueue_job(request: EnqueueRequest, queue: QueueDep) -> EnqueueResponse:
    """
    Enqueue a job.

    The payload is serialized as compact JSON. Identical payloads map to
    the same job id and share one status record.

    Args:
        request: Job payload.
        queue: The served queue.

    Returns:
        EnqueueResponse with the job id and initial status.
    """
    payload = json.dumps(request.payload, separators=(",", ":"))

    try:
        job_id = await queue.enqueue(payload)
    except (BrokerError, NoClientError) as e:
        logger.error("Enqueue failed", extra={"error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )

    return EnqueueResponse(
        id=job_id,
        status=JobStatusResponse(id=job_id, code=0, progress=0),
    )


@router.get(
    "/jobs/{job_id}/status",
    response_model=JobStatusResponse,
    responses={404: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Get job status",
    description="Read the stored {code, progress} record of a job.",
)
async def get_job_status(job_id: str, queue: QueueDep) -> JobStatusResponse:
    """
    Get the status of a job by id.

    Raises:
        HTTPException: 404 if absent, 500 if malformed, 503 on broker failure.
    """
    try:
        job_status = await queue.job_status(job_id)
    except StatusNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Job status not found",
        )
    except StatusDecodeError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )
    except (BrokerError, NoClientError) as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )

    return JobStatusResponse(
        id=job_id,
        code=job_status.code,
        progress=job_status.progress,
    )


@router.get(
    "/queue",
    response_model=QueueDepthResponse,
    responses={503: {"model": ErrorResponse}},
    summary="Get queue depth",
    description="Number of jobs waiting in the broker list.",
)
async def get_queue_depth(queue: QueueDep) -> QueueDepthResponse:
    """Get the broker list length of the served queue."""
    try:
        queue_status = await queue.queue_status()
    except (BrokerError, NoClientError) as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )

    return QueueDepthResponse(
        queue_name=queue.name,
        queue_length=queue_status.queue_length,
    )
