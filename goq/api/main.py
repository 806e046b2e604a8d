"""
FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from goq import __version__
from goq.api.routes import health_router, jobs_router
from goq.broker.connection import close_connection, get_connection
from goq.config import get_settings
from goq.observability.logging import setup_logging
from goq.observability.metrics import setup_metrics
from goq.observability.tracing import instrument_fastapi, setup_tracing
from goq.queue import Queue
from goq.types.options import QueueOptions
from goq.worker.main import log_error

logger = logging.getLogger(__name__)


def _reject_processing(job) -> None:
    raise RuntimeError("The API queue only produces jobs")


def build_producer_queue() -> Queue:
    """Create a queue used only for enqueue and introspection."""
    options = QueueOptions.from_settings(
        get_settings(),
        processor=_reject_processing,
        error_handler=log_error,
    )
    return Queue(options, connection=get_connection(options.connection))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    setup_logging()
    setup_metrics()
    setup_tracing()

    owns_queue = getattr(app.state, "queue", None) is None
    if owns_queue:
        app.state.queue = build_producer_queue()

    logger.info("Application started", extra={"queue": app.state.queue.name})

    yield

    if owns_queue:
        await close_connection()
    logger.info("Application shutdown")


def create_app(queue: Queue | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        queue: Queue to serve. Built from settings at startup when omitted.

    Returns:
        FastAPI: The configured application instance.
    """
    app = FastAPI(
        title="goq API",
        description="Enqueue jobs and inspect job status on a Redis-backed queue",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.queue = queue

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(jobs_router)

    instrument_fastapi(app)

    return app


def run() -> None:
    """Run the API server."""
    settings = get_settings()

    uvicorn.run(
        create_app(),
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
