"""Connection layer.

Provides a transport-agnostic connection interface so the pool and the
correlator work the same over WebSocket or the in-memory mock.
"""

from .base import BaseConnection, ConnectionFactory, ConnectionState
from .mock import MockConnection, mock_factory
from .websocket import WebSocketConnection, websocket_factory

__all__ = [
    # Base abstractions
    "BaseConnection",
    "ConnectionFactory",
    "ConnectionState",
    # WebSocket implementation
    "WebSocketConnection",
    "websocket_factory",
    # Mock implementation
    "MockConnection",
    "mock_factory",
]
