"""
Job handlers registry and the processor used by the worker process.

The worker process expects JSON payloads of the form
{"job_type": "<name>", "data": {...}} and routes each job to the handler
registered for its job_type.
"""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from goq.types.job import Job

logger = logging.getLogger(__name__)

# Type alias for job handler functions
JobHandler = Callable[[Job, dict[str, Any]], Awaitable[None]]

# Handler registry
_handlers: dict[str, JobHandler] = {}

# Status codes set by the built-in handlers
STATUS_RUNNING = 1
STATUS_DONE = 2


class UnknownJobTypeError(LookupError):
    """No handler is registered for the payload's job_type."""


def register_handler(job_type: str) -> Callable[[JobHandler], JobHandler]:
    """
    Decorator to register a job handler.

    Args:
        job_type: The job type this handler processes.

    Returns:
        Decorator function.

    Example:
        @register_handler("resize")
        async def handle_resize(job: Job, data: dict) -> None:
            ...
    """
    def decorator(handler: JobHandler) -> JobHandler:
        _handlers[job_type] = handler
        logger.info(f"Registered handler for job type: {job_type}")
        return handler
    return decorator


def get_handler(job_type: str) -> JobHandler | None:
    """Get the handler for a job type, or None if not registered."""
    return _handlers.get(job_type)


def list_handlers() -> list[str]:
    """List all registered job types."""
    return list(_handlers.keys())


# ============================================================================
# Built-in job handlers
# ============================================================================


@register_handler("echo")
async def handle_echo(job: Job, data: dict[str, Any]) -> None:
    """Log the payload data and mark the job done."""
    logger.info(
        "Echo job executing",
        extra={"job_id": job.id, "data": data},
    )
    await job.set_status(STATUS_DONE, 100)


@register_handler("sleep")
async def handle_sleep(job: Job, data: dict[str, Any]) -> None:
    """
    Sleep for a while, reporting progress along the way.

    Data fields:
    - duration_seconds: Total sleep time
    - steps: Number of progress updates
    """
    duration = float(data.get("duration_seconds", 1))
    steps = max(1, int(data.get("steps", 4)))

    for step in range(1, steps + 1):
        await asyncio.sleep(duration / steps)
        progress = step * 100 // steps
        await job.set_status(STATUS_RUNNING if step < steps else STATUS_DONE, progress)

        logger.debug(
            "Sleep job progress",
            extra={"job_id": job.id, "progress": progress},
        )


async def process_job(job: Job) -> None:
    """
    Processor that dispatches a job to its registered handler.

    Raises:
        json.JSONDecodeError: If the payload is not JSON.
        UnknownJobTypeError: If no handler is registered for the job type.
    """
    body = json.loads(job.payload)
    if not isinstance(body, dict):
        raise ValueError(f"Payload of job {job.id} is not a JSON object")

    job_type = body.get("job_type", "echo")
    handler = get_handler(job_type)

    if handler is None:
        raise UnknownJobTypeError(f"No handler registered for job type: {job_type}")

    await handler(job, body.get("data") or {})
