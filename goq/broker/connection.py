"""
Broker connection management.
Handles the async Redis client and the process-wide shared connection.
"""

import logging

from redis.asyncio import BlockingConnectionPool, Redis
from redis.asyncio.retry import Retry
from redis.backoff import ExponentialBackoff

from goq.config import get_settings
from goq.errors import NoClientError
from goq.types.options import ConnectionOptions

logger = logging.getLogger(__name__)

# Global shared connection
_connection: "BrokerConnection | None" = None


def create_client(options: ConnectionOptions) -> Redis:
    """
    Create an async Redis client from connection options.

    The pool blocks callers for up to pool_timeout seconds when all
    pool_size connections are in use.

    Args:
        options: The connection options.

    Returns:
        Redis: A client owning its connection pool. No socket is opened
        until the first command.
    """
    pool_kwargs: dict = {
        "host": options.host,
        "port": options.port,
        "db": options.db,
        "password": options.password,
        "max_connections": options.pool_size,
        "decode_responses": True,
    }
    if options.dial_timeout is not None:
        pool_kwargs["socket_connect_timeout"] = options.dial_timeout

    io_timeouts = [t for t in (options.read_timeout, options.write_timeout) if t is not None]
    if io_timeouts:
        pool_kwargs["socket_timeout"] = max(io_timeouts)

    if options.max_retries > 0:
        pool_kwargs["retry"] = Retry(ExponentialBackoff(), options.max_retries)
    if options.pool_timeout is not None:
        pool_kwargs["timeout"] = options.pool_timeout
    if options.idle_timeout is not None:
        pool_kwargs["health_check_interval"] = options.idle_timeout

    pool = BlockingConnectionPool(**pool_kwargs)
    return Redis.from_pool(pool)


class BrokerConnection:
    """
    Owner of one Redis client.

    A connection can be passed explicitly to each Queue, or obtained
    through get_connection() which returns one instance per process.
    """

    def __init__(
        self,
        options: ConnectionOptions | None = None,
        client: Redis | None = None,
    ):
        """
        Initialize the connection.

        Args:
            options: Connection options used to build the client.
            client: An already constructed client. Takes precedence over options.
        """
        self.options = options or ConnectionOptions()
        self._client: Redis | None = client if client is not None else create_client(self.options)

    @classmethod
    def from_client(cls, client: Redis) -> "BrokerConnection":
        """Wrap an existing client."""
        return cls(client=client)

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> Redis:
        """
        Get the Redis client.

        Raises:
            NoClientError: If the connection has been closed.
        """
        if self._client is None:
            raise NoClientError()
        return self._client

    async def ping(self) -> bool:
        """Check broker connectivity."""
        return bool(await self.client.ping())

    async def close(self) -> None:
        """Close the client and its pool. Later calls raise NoClientError."""
        if self._client is not None:
            client, self._client = self._client, None
            await client.aclose()


def get_connection(options: ConnectionOptions | None = None) -> BrokerConnection:
    """
    Get or create the process-wide shared connection.

    The first caller's options win; later calls return the same
    connection whatever options they pass.

    Args:
        options: Connection options. Defaults to the application settings.

    Returns:
        BrokerConnection: The shared connection.
    """
    global _connection
    if _connection is None:
        if options is None:
            options = ConnectionOptions.from_settings(get_settings())
        _connection = BrokerConnection(options)
        logger.info("Broker connection initialized", extra={"addr": options.addr})
    elif options is not None and options != _connection.options:
        logger.debug(
            "Reusing shared broker connection",
            extra={"addr": _connection.options.addr, "requested_addr": options.addr},
        )
    return _connection


def set_connection(connection: BrokerConnection | None) -> None:
    """Install a connection as the process-wide shared connection."""
    global _connection
    _connection = connection


async def close_connection() -> None:
    """
    Close the shared connection.
    Should be called on application shutdown.
    """
    global _connection
    if _connection is not None:
        await _connection.close()
        _connection = None
        logger.info("Broker connection closed")
