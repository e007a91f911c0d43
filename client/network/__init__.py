"""
Network layer for the companion client.

Provides the game event stream, the event dispatcher, and the REST client.
"""

from client.network.api import (
    ApiClient,
    ApiError,
    BearerAuth,
    InvalidTransferError,
    SessionExpiredError,
)
from client.network.client import ConnectionState, GameEventStream, stream_url
from client.network.dispatcher import INVALIDATIONS, EventDispatcher


__all__ = [
    "ApiClient",
    "ApiError",
    "BearerAuth",
    "InvalidTransferError",
    "SessionExpiredError",
    "ConnectionState",
    "GameEventStream",
    "stream_url",
    "INVALIDATIONS",
    "EventDispatcher",
]
