"""
Health check routes.
"""

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import Response

from goq import __version__
from goq.api.deps import QueueDep
from goq.observability.metrics import get_metrics
from goq.queue import Queue
from goq.types.api import HealthResponse

router = APIRouter(tags=["Health"])


async def _broker_healthy(queue: Queue) -> bool:
    try:
        return await queue.connection.ping()
    except Exception:
        return False


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check the health of the API and the Redis connection.",
)
async def health_check(queue: QueueDep) -> HealthResponse:
    """
    Perform a health check.

    Pings Redis and returns service status.
    """
    broker_status = "healthy" if await _broker_healthy(queue) else "unhealthy"

    return HealthResponse(
        status="healthy" if broker_status == "healthy" else "degraded",
        version=__version__,
        broker=broker_status,
        timestamp=datetime.now(timezone.utc),
    )


@router.get(
    "/ready",
    summary="Readiness check",
    description="Check if the service is ready to receive traffic.",
)
async def readiness_check(queue: QueueDep) -> dict:
    """Kubernetes readiness probe endpoint."""
    return {"ready": await _broker_healthy(queue)}


@router.get(
    "/live",
    summary="Liveness check",
    description="Check if the service is alive.",
)
async def liveness_check() -> dict:
    """Kubernetes liveness probe endpoint."""
    return {"alive": True}


@router.get(
    "/metrics",
    summary="Prometheus metrics",
    description="Expose Prometheus metrics.",
)
async def metrics() -> Response:
    """Expose Prometheus metrics."""
    metrics_collector = get_metrics()
    return Response(
        content=metrics_collector.get_metrics(),
        media_type=metrics_collector.get_content_type(),
    )
