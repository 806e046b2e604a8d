"""
Broker module.
Contains the Redis connection and the status repository.
"""

from goq.broker.connection import (
    BrokerConnection,
    close_connection,
    create_client,
    get_connection,
    set_connection,
)
from goq.broker.repository import StatusRepository

__all__ = [
    "BrokerConnection",
    "get_connection",
    "set_connection",
    "close_connection",
    "create_client",
    "StatusRepository",
]
