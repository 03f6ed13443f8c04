"""tablerpc - correlated request/response client for a WebSocket table service.

Provides:
- RpcClient: call facade over a fixed-size connection pool
- ConnectionPool: eager, round-robin pool of persistent connections
- RequestCorrelator: matches inbound frames to in-flight calls
- MessageCodec: encodes requests, classifies responses and errors
"""

from .client import RowsAPI, RpcClient, create_client, create_test_client
from .config import ClientConfig
from .correlator import CallState, PendingCall, RequestCorrelator
from .errors import (
    CallError,
    DuplicateRequestIdError,
    PoolNotInitializedError,
    PoolOpenError,
    TableRpcError,
)
from .pool import ConnectionPool
from .protocol import CallResult, MessageCodec

__version__ = "0.1.0"

__all__ = [
    # Client
    "RpcClient",
    "RowsAPI",
    "ClientConfig",
    "create_client",
    "create_test_client",
    # Core
    "ConnectionPool",
    "RequestCorrelator",
    "PendingCall",
    "CallState",
    "MessageCodec",
    "CallResult",
    # Exceptions
    "TableRpcError",
    "PoolNotInitializedError",
    "PoolOpenError",
    "DuplicateRequestIdError",
    "CallError",
]
