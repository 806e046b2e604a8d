"""
Dispatcher loop.

A single coroutine blocking-pops raw payloads from the broker list and
forwards them into the in-process buffer shared with the worker pool.
Being the only producer into the buffer, it preserves list order.
"""

import asyncio
import logging

from goq.broker.connection import BrokerConnection
from goq.errors import BrokerError, GoqError, InvalidPayloadError
from goq.observability.metrics import get_metrics
from goq.types.options import BackoffPolicy, ErrorHandler
from goq.worker.callbacks import report_error

logger = logging.getLogger(__name__)


class Dispatcher:
    """
    Moves payloads from the broker list into the bounded buffer.

    - BLPOP with the configured timeout (0 blocks until data arrives)
    - Blocks on a full buffer, which throttles popping but not producers
    - Pop failures go to the error handler, followed by a backoff delay
    - A payload popped after stop is pushed back onto the head of the list
    """

    def __init__(
        self,
        connection: BrokerConnection,
        queue_name: str,
        buffer: asyncio.Queue,
        error_handler: ErrorHandler,
        backoff: BackoffPolicy,
        stopped: asyncio.Event,
        pop_timeout: int = 0,
    ):
        self._connection = connection
        self._queue_name = queue_name
        self._buffer = buffer
        self._error_handler = error_handler
        self._backoff = backoff
        self._stopped = stopped
        self._pop_timeout = pop_timeout
        self._popping = False
        self._metrics = get_metrics()
        self.consecutive_failures = 0

    @property
    def exits_on_stop(self) -> bool:
        """
        Whether the loop will notice stop without being cancelled.

        True while waiting on a BLPOP with a finite timeout. Cancelling such
        a pop can leave the blocked command registered on the server, where
        it would swallow the next pushed payload.
        """
        return self._popping and self._pop_timeout > 0

    async def run(self) -> None:
        """Run until stopped or cancelled."""
        logger.info(
            "Dispatcher starting",
            extra={"queue": self._queue_name, "pop_timeout": self._pop_timeout},
        )

        while not self._stopped.is_set():
            self._popping = True
            try:
                payload = await self._pop()
            finally:
                self._popping = False

            if payload is None:
                continue
            if self._stopped.is_set():
                await self._requeue(payload)
                break

            await self._buffer.put(payload)
            self._metrics.update_buffer_size(self._queue_name, self._buffer.qsize())

        logger.info("Dispatcher stopped", extra={"queue": self._queue_name})

    async def _pop(self) -> str | None:
        """
        Pop one payload.

        Returns:
            The payload, or None on a pop timeout or a handled failure.
        """
        try:
            result = await self._connection.client.blpop(
                [self._queue_name], timeout=self._pop_timeout
            )
        except UnicodeDecodeError as e:
            # The broker answered; the payload it removed was not UTF-8
            self.consecutive_failures = 0
            logger.error(
                "Dropping undecodable payload",
                extra={"queue": self._queue_name, "error": str(e)},
            )
            error = InvalidPayloadError(
                f"Dropped payload from {self._queue_name} that is not valid UTF-8: {e}"
            )
            error.__cause__ = e
            await report_error(self._error_handler, error)
            return None
        except Exception as e:
            await self._handle_failure(e)
            return None

        self.consecutive_failures = 0
        if result is None:
            return None

        # BLPOP replies with (list name, value)
        _, payload = result
        return payload

    async def _requeue(self, payload: str) -> None:
        """Push a payload popped after stop back onto the head of the list."""
        try:
            await self._connection.client.lpush(self._queue_name, payload)
        except Exception as e:
            error = BrokerError(f"Failed to requeue payload on {self._queue_name}: {e}")
            error.__cause__ = e
            await report_error(self._error_handler, error)
            return

        logger.info("Requeued payload popped during shutdown", extra={"queue": self._queue_name})

    async def _handle_failure(self, cause: Exception) -> None:
        self.consecutive_failures += 1
        self._metrics.record_dispatcher_error(self._queue_name)

        if isinstance(cause, GoqError):
            error: Exception = cause
        else:
            error = BrokerError(f"Failed to pop from {self._queue_name}: {cause}")
            error.__cause__ = cause

        logger.warning(
            "Blocking pop failed",
            extra={
                "queue": self._queue_name,
                "error": str(cause),
                "consecutive_failures": self.consecutive_failures,
            },
        )
        await report_error(self._error_handler, error)

        if self._backoff.is_open(self.consecutive_failures):
            logger.warning(
                "Dispatcher circuit open",
                extra={"queue": self._queue_name, "cooldown": self._backoff.cooldown},
            )
        await self._sleep(self._backoff.delay_for(self.consecutive_failures))

    async def _sleep(self, seconds: float) -> None:
        """Sleep, returning early when the queue is stopped."""
        if seconds <= 0:
            return
        try:
            await asyncio.wait_for(self._stopped.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass
