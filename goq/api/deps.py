"""
FastAPI dependencies.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from goq.queue import Queue


def get_queue(request: Request) -> Queue:
    """Get the queue served by the application."""
    queue = getattr(request.app.state, "queue", None)
    if queue is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Queue not initialized",
        )
    return queue


QueueDep = Annotated[Queue, Depends(get_queue)]
