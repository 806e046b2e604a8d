"""
Queue facade.

Producers call enqueue(); a consumer process calls run() to start the
dispatcher and the worker pool. Job status records are kept next to the
list in Redis.
"""

import asyncio
import logging

from redis.exceptions import RedisError

from goq.broker.connection import BrokerConnection, get_connection
from goq.broker.repository import StatusRepository
from goq.constants import SPAN_ENQUEUE_JOB
from goq.errors import BrokerError, InvalidPayloadError, NoClientError
from goq.observability.metrics import get_metrics
from goq.observability.tracing import get_tracer
from goq.types.job import QueueStatus, Status, job_id_for
from goq.types.options import QueueOptions
from goq.worker.dispatcher import Dispatcher
from goq.worker.pool import WorkerPool

logger = logging.getLogger(__name__)


class Queue:
    """
    A named job queue backed by a Redis list.

    Features:
    - enqueue pushes the payload and initializes its status record
    - run starts `concurrency` workers and the single dispatcher loop
    - stop ends the dispatcher and cancels the workers at their blocking points
    - queue_status reports the broker list length
    """

    def __init__(
        self,
        options: QueueOptions,
        connection: BrokerConnection | None = None,
    ):
        """
        Initialize the queue.

        Args:
            options: Queue configuration.
            connection: Broker connection to use. Defaults to the process-wide
                shared connection, created from options.connection by the
                first queue constructed in the process.
        """
        self.options = options
        self._connection = connection or get_connection(options.connection)

        self._buffer: asyncio.Queue[str] = asyncio.Queue(maxsize=options.buffer_size)
        self._stopped = asyncio.Event()
        self._running = False
        self._dispatcher_task: asyncio.Task | None = None
        self._metrics = get_metrics()

        self._dispatcher = Dispatcher(
            connection=self._connection,
            queue_name=options.queue_name,
            buffer=self._buffer,
            error_handler=options.error_handler,
            backoff=options.backoff,
            stopped=self._stopped,
            pop_timeout=options.pop_timeout,
        )
        self._pool = WorkerPool(
            connection=self._connection,
            queue_name=options.queue_name,
            buffer=self._buffer,
            processor=options.processor,
            error_handler=options.error_handler,
            concurrency=options.concurrency,
            stopped=self._stopped,
        )

    @property
    def name(self) -> str:
        return self.options.queue_name

    @property
    def connection(self) -> BrokerConnection:
        return self._connection

    @property
    def buffer(self) -> asyncio.Queue:
        """The in-process buffer between dispatcher and workers."""
        return self._buffer

    @property
    def is_running(self) -> bool:
        return self._running

    async def queue_status(self) -> QueueStatus:
        """
        Get the number of payloads waiting in the broker list.

        Raises:
            NoClientError: If the connection was never established or closed.
            BrokerError: If LLEN fails.
        """
        if not self._connection.is_connected:
            raise NoClientError("Failed to queue status: no initialized client")

        try:
            length = await self._connection.client.llen(self.name)
        except RedisError as e:
            raise BrokerError(f"Failed to queue status: {e}") from e

        self._metrics.update_queue_depth(self.name, length)
        return QueueStatus(queue_length=length)

    async def enqueue(self, payload: str | bytes) -> str:
        """
        Push a job onto the tail of the list and initialize its status.

        The push is not rolled back if writing the status fails.

        Args:
            payload: The serialized job. Bytes must be valid UTF-8.

        Returns:
            The job id derived from the payload bytes.

        Raises:
            InvalidPayloadError: If a bytes payload is not valid UTF-8.
            BrokerError: If the push or the status write fails.
        """
        if isinstance(payload, bytes):
            try:
                payload = payload.decode("utf-8")
            except UnicodeDecodeError as e:
                raise InvalidPayloadError(f"payload is not valid UTF-8: {e}") from e

        client = self._connection.client

        with get_tracer().start_as_current_span(SPAN_ENQUEUE_JOB) as span:
            span.set_attribute("queue", self.name)

            try:
                await client.rpush(self.name, payload)
            except RedisError as e:
                raise BrokerError(f"Failed to push job to {self.name}: {e}") from e

            job_id = job_id_for(payload)
            span.set_attribute("job_id", job_id)

            await StatusRepository(client).initialize(job_id)

        self._metrics.record_job_enqueued(self.name)
        logger.info("Job enqueued", extra={"job_id": job_id, "queue": self.name})

        return job_id

    async def job_status(self, job_id: str) -> Status:
        """
        Read the stored status of any job id.

        Raises:
            StatusNotFoundError: If no record exists.
            StatusDecodeError: If the record is malformed.
            BrokerError: If the read fails.
        """
        return await StatusRepository(self._connection.client).get(job_id)

    async def run(self) -> None:
        """
        Start the workers and run the dispatcher until stop() is called.

        Broker errors never end the loop; they are passed to the error
        handler and followed by the configured backoff.
        """
        if self._running:
            raise RuntimeError("Queue is already running")

        self._running = True
        self._stopped.clear()

        self._pool.start()
        self._dispatcher_task = asyncio.create_task(
            self._dispatcher.run(), name=f"goq-dispatcher-{self.name}"
        )

        try:
            await self._dispatcher_task
        except asyncio.CancelledError:
            if not self._stopped.is_set():
                raise
        finally:
            self._stopped.set()
            await self._pool.stop()
            self._running = False

            dropped = 0
            while not self._buffer.empty():
                self._buffer.get_nowait()
                self._buffer.task_done()
                dropped += 1
            if dropped:
                logger.warning(
                    "Dropping buffered payloads on shutdown",
                    extra={"queue": self.name, "count": dropped},
                )
            logger.info("Queue stopped", extra={"queue": self.name})

    async def stop(self) -> None:
        """
        Stop the dispatcher and the workers.

        A dispatcher waiting on a BLPOP with a finite pop_timeout is left to
        finish the pop, so stop() may take up to pop_timeout seconds.
        Otherwise the dispatcher is cancelled at its blocking point.
        """
        if not self._running:
            return

        logger.info("Queue stopping", extra={"queue": self.name})
        self._stopped.set()

        task = self._dispatcher_task
        if task is not None and not task.done():
            if not self._dispatcher.exits_on_stop:
                task.cancel()
            await asyncio.gather(task, return_exceptions=True)

        await self._pool.stop()
