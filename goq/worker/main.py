"""
Worker process for executing jobs.

Builds a queue from the application settings and runs its dispatcher and
worker pool until SIGTERM or SIGINT.
"""

import asyncio
import logging
import signal

from goq.broker.connection import close_connection, get_connection
from goq.config import get_settings
from goq.observability.logging import bind_queue_context, setup_logging
from goq.observability.metrics import setup_metrics
from goq.observability.tracing import setup_tracing
from goq.queue import Queue
from goq.types.options import QueueOptions
from goq.worker.handlers import process_job

logger = logging.getLogger(__name__)


def log_error(error: Exception) -> None:
    """Error handler that logs dispatcher and worker errors."""
    logger.error(
        "Queue error",
        extra={"error": str(error), "error_type": type(error).__name__},
    )


def build_queue() -> Queue:
    """Create the worker's queue from settings."""
    settings = get_settings()
    options = QueueOptions.from_settings(
        settings,
        processor=process_job,
        error_handler=log_error,
    )
    return Queue(options, connection=get_connection(options.connection))


async def run_async() -> None:
    """Run the worker asynchronously."""
    setup_logging()
    setup_metrics()
    setup_tracing()

    queue = build_queue()
    bind_queue_context(queue.name)

    # Handle shutdown signals
    loop = asyncio.get_running_loop()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(
            sig,
            lambda: asyncio.create_task(queue.stop())
        )

    logger.info(
        "Worker starting",
        extra={"concurrency": queue.options.concurrency},
    )

    try:
        await queue.run()
    finally:
        await close_connection()


def run() -> None:
    """Run the worker."""
    asyncio.run(run_async())


if __name__ == "__main__":
    run()
