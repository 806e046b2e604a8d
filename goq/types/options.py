"""
Connection and queue option types.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, field_validator

from goq.config import Settings
from goq.constants import DEFAULT_BUFFER_SIZE, MAX_CONCURRENCY
from goq.types.job import Job

# Processors and error handlers may be plain functions or coroutine functions
Processor = Callable[[Job], Awaitable[None] | None]
ErrorHandler = Callable[[Exception], Awaitable[None] | None]


class ConnectionOptions(BaseModel):
    """
    Redis connection parameters.
    Timeouts are in seconds; None leaves the client default in place.
    """

    model_config = ConfigDict(frozen=True)

    addr: str = "localhost:6379"
    password: str | None = None
    db: int = 0
    max_retries: int = 0
    dial_timeout: float | None = None
    read_timeout: float | None = None
    write_timeout: float | None = None
    pool_size: int = 10
    pool_timeout: float | None = None
    idle_timeout: float | None = None

    @field_validator("addr")
    @classmethod
    def validate_addr(cls, addr: str) -> str:
        _, sep, port = addr.rpartition(":")
        if sep and not (port.isdigit() and 0 < int(port) < 65536):
            raise ValueError(f"invalid port in address {addr!r}")
        return addr

    @property
    def host(self) -> str:
        host, sep, _ = self.addr.rpartition(":")
        if not sep:
            return self.addr or "localhost"
        return host or "localhost"

    @property
    def port(self) -> int:
        _, sep, port = self.addr.rpartition(":")
        return int(port) if sep else 6379

    @classmethod
    def from_settings(cls, settings: Settings) -> "ConnectionOptions":
        """Build connection options from application settings."""
        return cls(
            addr=settings.redis_addr,
            password=settings.redis_password,
            db=settings.redis_db,
            max_retries=settings.redis_max_retries,
            dial_timeout=settings.redis_dial_timeout,
            read_timeout=settings.redis_read_timeout,
            write_timeout=settings.redis_write_timeout,
            pool_size=settings.redis_pool_size,
            pool_timeout=settings.redis_pool_timeout,
            idle_timeout=settings.redis_idle_timeout,
        )


@dataclass(frozen=True)
class BackoffPolicy:
    """
    Delay schedule applied by the dispatcher after consecutive pop failures.

    The n-th consecutive failure waits
    min(initial_delay * multiplier ** (n - 1), max_delay). Once n reaches
    failure_threshold the circuit is open and the dispatcher waits
    cooldown seconds before each further attempt. A threshold of 0
    disables the circuit.
    """

    initial_delay: float = 0.1
    max_delay: float = 5.0
    multiplier: float = 2.0
    failure_threshold: int = 10
    cooldown: float = 30.0

    def is_open(self, failures: int) -> bool:
        return self.failure_threshold > 0 and failures >= self.failure_threshold

    def delay_for(self, failures: int) -> float:
        """Seconds to wait after the given number of consecutive failures."""
        if failures <= 0:
            return 0.0
        if self.is_open(failures):
            return self.cooldown
        return min(self.initial_delay * self.multiplier ** (failures - 1), self.max_delay)

    @classmethod
    def from_settings(cls, settings: Settings) -> "BackoffPolicy":
        return cls(
            initial_delay=settings.dispatcher_backoff_initial_seconds,
            max_delay=settings.dispatcher_backoff_max_seconds,
            multiplier=settings.dispatcher_backoff_multiplier,
            failure_threshold=settings.dispatcher_failure_threshold,
            cooldown=settings.dispatcher_cooldown_seconds,
        )


@dataclass(frozen=True)
class QueueOptions:
    """
    Queue configuration.
    Immutable once the queue is constructed.
    """

    connection: ConnectionOptions
    concurrency: int
    queue_name: str
    processor: Processor
    error_handler: ErrorHandler
    buffer_size: int = DEFAULT_BUFFER_SIZE
    pop_timeout: int = 0  # 0 blocks forever
    backoff: BackoffPolicy = field(default_factory=BackoffPolicy)

    def __post_init__(self):
        """Validate the options after initialization."""
        if not 0 <= self.concurrency <= MAX_CONCURRENCY:
            raise ValueError(f"concurrency must be between 0 and {MAX_CONCURRENCY}")
        if self.buffer_size < 1:
            raise ValueError("buffer_size must be at least 1")
        if self.pop_timeout < 0:
            raise ValueError("pop_timeout cannot be negative")

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        processor: Processor,
        error_handler: ErrorHandler,
    ) -> "QueueOptions":
        """Build queue options from application settings."""
        return cls(
            connection=ConnectionOptions.from_settings(settings),
            concurrency=settings.queue_concurrency,
            queue_name=settings.queue_name,
            processor=processor,
            error_handler=error_handler,
            buffer_size=settings.queue_buffer_size,
            pop_timeout=settings.queue_pop_timeout_seconds,
            backoff=BackoffPolicy.from_settings(settings),
        )
