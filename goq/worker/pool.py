"""
Worker pool draining the in-process buffer.
"""

import asyncio
import logging
import time

from goq.broker.connection import BrokerConnection
from goq.broker.repository import StatusRepository
from goq.constants import SPAN_EXECUTE_JOB, JobOutcome
from goq.errors import JobProcessingError, JobStatusError
from goq.observability.metrics import get_metrics
from goq.observability.tracing import get_tracer
from goq.types.job import Job, job_id_for
from goq.types.options import ErrorHandler, Processor
from goq.worker.callbacks import invoke, report_error

logger = logging.getLogger(__name__)


class WorkerPool:
    """
    Fixed number of identical workers consuming the buffer.

    For each payload a worker derives the job id, loads its status and
    calls the processor. A payload whose status cannot be loaded is
    dropped; a processor failure is reported and the worker moves on.
    Processing order is not guaranteed with more than one worker.
    """

    def __init__(
        self,
        connection: BrokerConnection,
        queue_name: str,
        buffer: asyncio.Queue,
        processor: Processor,
        error_handler: ErrorHandler,
        concurrency: int,
        stopped: asyncio.Event,
    ):
        self._connection = connection
        self._queue_name = queue_name
        self._buffer = buffer
        self._processor = processor
        self._error_handler = error_handler
        self._concurrency = concurrency
        self._stopped = stopped
        self._tasks: list[asyncio.Task] = []
        self._metrics = get_metrics()

    @property
    def size(self) -> int:
        """Number of live worker tasks."""
        return sum(1 for task in self._tasks if not task.done())

    def start(self) -> None:
        """Start the worker tasks."""
        for index in range(self._concurrency):
            task = asyncio.create_task(self._work(index), name=f"goq-worker-{index}")
            self._tasks.append(task)

        logger.info(
            "Worker pool started",
            extra={"queue": self._queue_name, "concurrency": self._concurrency},
        )

    async def stop(self) -> None:
        """Cancel the workers and wait for them to exit."""
        current = asyncio.current_task()
        tasks = [task for task in self._tasks if task is not current]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks = []

    async def _work(self, index: int) -> None:
        while not self._stopped.is_set():
            payload = await self._buffer.get()
            try:
                await self.process(payload)
            finally:
                self._buffer.task_done()
                self._metrics.update_buffer_size(self._queue_name, self._buffer.qsize())

        logger.debug("Worker exiting", extra={"worker": index})

    async def process(self, payload: str) -> JobOutcome:
        """
        Handle one dequeued payload.

        Args:
            payload: The raw payload popped from the broker list.

        Returns:
            The outcome of the attempt.
        """
        job_id = job_id_for(payload)

        try:
            store = StatusRepository(self._connection.client)
            status = await store.get(job_id)
        except Exception as e:
            logger.warning(
                "Skipping job without readable status",
                extra={"job_id": job_id, "error": str(e)},
            )
            self._metrics.record_job_processed(self._queue_name, JobOutcome.SKIPPED)
            await report_error(self._error_handler, JobStatusError(job_id, e))
            return JobOutcome.SKIPPED

        job = Job(id=job_id, payload=payload, status=status, store=store)
        start_time = time.monotonic()

        try:
            with get_tracer().start_as_current_span(SPAN_EXECUTE_JOB) as span:
                span.set_attribute("job_id", job_id)
                span.set_attribute("queue", self._queue_name)
                await invoke(self._processor, job)
        except Exception as e:
            duration = time.monotonic() - start_time
            logger.exception(
                "Processor raised",
                extra={"job_id": job_id, "duration": f"{duration:.2f}s"},
            )
            self._metrics.record_job_processed(
                self._queue_name, JobOutcome.FAILED, duration
            )
            await report_error(self._error_handler, JobProcessingError(job_id, e))
            return JobOutcome.FAILED

        duration = time.monotonic() - start_time
        logger.debug(
            "Job processed",
            extra={"job_id": job_id, "duration": f"{duration:.2f}s"},
        )
        self._metrics.record_job_processed(
            self._queue_name, JobOutcome.SUCCEEDED, duration
        )
        return JobOutcome.SUCCEEDED
