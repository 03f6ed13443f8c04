"""Fixed-size connection pool with round-robin selection.

All connections are opened eagerly and awaited together; the pool exists
only once every one of them is ready. Its size never changes afterwards:
a connection that closes stays in its slot, and calls routed to it fail
immediately with a ConnectionClosed result.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

from .errors import PoolNotInitializedError, PoolOpenError
from .transport.base import BaseConnection, ConnectionFactory
from .transport.websocket import websocket_factory

logger = logging.getLogger(__name__)


class ConnectionPool:
    """Owns an ordered set of connections and a rotating cursor.

    The cursor is only advanced by next_connection() and always indexes a
    valid slot.
    """

    def __init__(self, connections: Sequence[BaseConnection] = ()):
        self._connections: list[BaseConnection] = list(connections)
        self._cursor = 0
        self._closed = False

    @classmethod
    async def open(
        cls,
        url: str,
        connection_count: int,
        *,
        factory: ConnectionFactory | None = None,
        open_timeout: float | None = None,
    ) -> ConnectionPool:
        """Open `connection_count` connections to `url` and wait for all of them.

        Args:
            url: Peer URL
            connection_count: Number of connections (positive)
            factory: Builds the connection for each slot (default: WebSocket)
            open_timeout: Per-connection limit on the time to become ready

        Raises:
            ValueError: If connection_count is not positive
            PoolOpenError: If any connection fails to open (none are kept)
        """
        if connection_count < 1:
            raise ValueError(f"connection_count must be positive, got {connection_count}")

        factory = factory or websocket_factory()
        connections = [factory(url, slot) for slot in range(connection_count)]

        async def open_one(connection: BaseConnection) -> None:
            await asyncio.wait_for(connection.open(), timeout=open_timeout)

        results = await asyncio.gather(
            *(open_one(c) for c in connections),
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            logger.error(
                f"{len(failures)} of {connection_count} connection(s) to {url} failed to open"
            )
            await asyncio.gather(
                *(c.close("pool open failed") for c in connections),
                return_exceptions=True,
            )
            raise PoolOpenError(url, connection_count, failures[0]) from failures[0]

        logger.info(f"Opened pool of {connection_count} connection(s) to {url}")
        return cls(connections)

    @property
    def size(self) -> int:
        """Number of slots (fixed)."""
        return len(self._connections)

    @property
    def connections(self) -> tuple[BaseConnection, ...]:
        """Read-only view of the pooled connections, in slot order."""
        return tuple(self._connections)

    @property
    def cursor(self) -> int:
        """Slot that the next call to next_connection() will return."""
        return self._cursor

    @property
    def ready_count(self) -> int:
        """Number of connections still ready."""
        return sum(1 for c in self._connections if c.is_ready)

    @property
    def is_closed(self) -> bool:
        return self._closed

    def next_connection(self) -> BaseConnection:
        """Return the connection under the cursor and advance it, wrapping.

        Raises:
            PoolNotInitializedError: If the pool has no connections or is closed
        """
        if not self._connections or self._closed:
            raise PoolNotInitializedError()

        connection = self._connections[self._cursor]
        self._cursor = (self._cursor + 1) % len(self._connections)
        return connection

    async def close(self) -> None:
        """Close every connection. Closing twice is a no-op."""
        if self._closed:
            return
        self._closed = True
        results = await asyncio.gather(
            *(c.close() for c in self._connections),
            return_exceptions=True,
        )
        for connection, result in zip(self._connections, results, strict=True):
            if isinstance(result, Exception):
                logger.warning(
                    f"Error closing connection {connection.connection_id}: {result}"
                )
        logger.info(f"Closed pool of {len(self._connections)} connection(s)")

    def __len__(self) -> int:
        return len(self._connections)

    async def __aenter__(self) -> ConnectionPool:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
