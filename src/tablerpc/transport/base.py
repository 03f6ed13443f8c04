"""Connection abstraction for the client.

A connection is a duplex, text-framed channel to the peer:
- open(): establish the channel (OPENING -> READY)
- send(): transmit one complete frame
- frames(): iterate inbound frames until the channel closes
- close(): tear down (-> CLOSED, terminal)

Implementations only provide the _do_* hooks; state tracking and logging
live here so every transport reports lifecycle events the same way.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from enum import Enum

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    """Connection state machine."""

    OPENING = "opening"
    READY = "ready"
    CLOSED = "closed"


class BaseConnection(ABC):
    """Base class for connections with common lifecycle handling."""

    def __init__(self, url: str, connection_id: int = 0):
        self.url = url
        self.connection_id = connection_id
        self.close_reason: str | None = None
        self._state = ConnectionState.OPENING

    @property
    def state(self) -> ConnectionState:
        """Current connection state."""
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state == ConnectionState.READY

    @property
    def is_closed(self) -> bool:
        return self._state == ConnectionState.CLOSED

    async def open(self) -> None:
        """Establish the connection.

        Raises:
            ConnectionError: If the connection could not be opened
        """
        if self._state == ConnectionState.READY:
            return
        if self._state == ConnectionState.CLOSED:
            raise ConnectionError(f"Connection {self.connection_id} is already closed")

        try:
            await self._do_open()
        except Exception as e:
            self._mark_closed(f"open failed: {e}")
            raise ConnectionError(
                f"Failed to open connection {self.connection_id} to {self.url}: {e}"
            ) from e

        self._state = ConnectionState.READY
        logger.info(f"Connection {self.connection_id} ready ({self.url})")

    async def close(self, reason: str = "closed by client") -> None:
        """Close the connection. Closing twice is a no-op."""
        if self._state == ConnectionState.CLOSED:
            return
        self._mark_closed(reason)
        await self._do_close()

    async def send(self, frame: str) -> None:
        """Send one frame.

        Raises:
            ConnectionError: If the connection is not ready
        """
        if self._state != ConnectionState.READY:
            raise ConnectionError(
                f"Connection {self.connection_id} is {self._state.value}, cannot send"
            )
        await self._do_send(frame)

    async def frames(self) -> AsyncIterator[str | bytes]:
        """Yield inbound frames until the connection closes.

        Raises:
            ConnectionError: If receiving fails (the connection is closed first)
        """
        try:
            async for frame in self._receive_frames():
                yield frame
        except Exception as e:
            self._mark_closed(f"receive failed: {e}")
            raise ConnectionError(f"Connection {self.connection_id} failed: {e}") from e
        self._mark_closed("closed by peer")

    def _mark_closed(self, reason: str) -> None:
        if self._state == ConnectionState.CLOSED:
            return
        was_ready = self._state == ConnectionState.READY
        self._state = ConnectionState.CLOSED
        self.close_reason = reason
        if was_ready and reason != "closed by client":
            logger.warning(f"Connection {self.connection_id} closed: {reason}")
        else:
            logger.info(f"Connection {self.connection_id} closed: {reason}")

    # Abstract methods for subclasses
    @abstractmethod
    async def _do_open(self) -> None:
        """Implementation-specific open logic."""
        ...

    @abstractmethod
    async def _do_close(self) -> None:
        """Implementation-specific close logic."""
        ...

    @abstractmethod
    async def _do_send(self, frame: str) -> None:
        """Implementation-specific send logic."""
        ...

    @abstractmethod
    def _receive_frames(self) -> AsyncIterator[str | bytes]:
        """Implementation-specific receive logic. Must be an async generator."""
        ...

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(id={self.connection_id}, "
            f"url={self.url!r}, state={self._state.value})"
        )


# Builds the connection for slot `connection_id` of a pool opened against `url`
ConnectionFactory = Callable[[str, int], BaseConnection]

