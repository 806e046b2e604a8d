"""
Pytest configuration and shared fixtures.

Tests run against fakeredis, an in-memory implementation of the Redis
protocol, so no Redis server is required.
"""

import asyncio
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any

import fakeredis
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from goq.api.main import create_app
from goq.broker.connection import BrokerConnection, set_connection
from goq.broker.repository import StatusRepository
from goq.queue import Queue
from goq.types.options import BackoffPolicy, ConnectionOptions, QueueOptions

TEST_QUEUE_NAME = "goq:test:queue"

# Fast backoff so error paths do not slow the suite down
TEST_BACKOFF = BackoffPolicy(
    initial_delay=0.001,
    max_delay=0.01,
    multiplier=2.0,
    failure_threshold=0,
    cooldown=0.01,
)


async def wait_until(
    predicate: Callable[[], Any],
    timeout: float = 5.0,
    interval: float = 0.01,
) -> None:
    """Poll a sync or async predicate until it is truthy."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while True:
        result = predicate()
        if asyncio.iscoroutine(result):
            result = await result
        if result:
            return
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(interval)


@pytest.fixture
def wait() -> Callable[..., Awaitable[None]]:
    """Expose wait_until to tests."""
    return wait_until


@pytest.fixture(autouse=True)
def reset_shared_connection():
    """Make sure no test leaks a process-wide connection into another."""
    set_connection(None)
    yield
    set_connection(None)


@pytest_asyncio.fixture
async def redis_client() -> AsyncGenerator[fakeredis.FakeAsyncRedis]:
    """Create an isolated in-memory Redis client."""
    client = fakeredis.FakeAsyncRedis(
        server=fakeredis.FakeServer(),
        decode_responses=True,
    )
    yield client
    await client.aclose()


@pytest.fixture
def connection(redis_client: fakeredis.FakeAsyncRedis) -> BrokerConnection:
    """Wrap the fake client in a broker connection."""
    return BrokerConnection.from_client(redis_client)


@pytest.fixture
def store(redis_client: fakeredis.FakeAsyncRedis) -> StatusRepository:
    """Create a status repository on the fake client."""
    return StatusRepository(redis_client)


@pytest.fixture
def errors() -> list[Exception]:
    """Errors collected by the test error handler."""
    return []


@pytest.fixture
def error_handler(errors: list[Exception]) -> Callable[[Exception], None]:
    """Error handler that records every error it receives."""
    return errors.append


@pytest.fixture
def make_queue(
    connection: BrokerConnection,
    error_handler: Callable[[Exception], None],
) -> Callable[..., Queue]:
    """Factory for queues bound to the fake connection."""

    def factory(processor: Callable, **overrides: Any) -> Queue:
        options = QueueOptions(
            connection=ConnectionOptions(),
            concurrency=overrides.pop("concurrency", 1),
            queue_name=overrides.pop("queue_name", TEST_QUEUE_NAME),
            processor=processor,
            error_handler=overrides.pop("error_handler", error_handler),
            buffer_size=overrides.pop("buffer_size", 1000),
            pop_timeout=overrides.pop("pop_timeout", 1),
            backoff=overrides.pop("backoff", TEST_BACKOFF),
        )
        return Queue(options, connection=connection)

    return factory


@pytest_asyncio.fixture
async def running(
    redis_client: fakeredis.FakeAsyncRedis,
) -> AsyncGenerator[Callable[[Queue], Awaitable[asyncio.Task]]]:
    """Start queues in background tasks and stop them after the test."""
    started: list[tuple[Queue, asyncio.Task]] = []

    async def start(queue: Queue) -> asyncio.Task:
        task = asyncio.create_task(queue.run())
        started.append((queue, task))
        await wait_until(lambda: queue.is_running)
        return task

    yield start

    for queue, task in started:
        await queue.stop()
        await asyncio.wait_for(task, timeout=5.0)


@pytest.fixture
def sample_payload() -> str:
    """A serialized job payload."""
    return '{"task":"resize"}'


@pytest_asyncio.fixture
async def api_queue(make_queue: Callable[..., Queue]) -> Queue:
    """A producer-only queue for API tests."""
    return make_queue(lambda job: None)


@pytest_asyncio.fixture
async def client(api_queue: Queue) -> AsyncGenerator[AsyncClient]:
    """Create an async HTTP client for testing."""
    app = create_app(queue=api_queue)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
