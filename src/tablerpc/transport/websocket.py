"""WebSocket connection implementation.

Wire format:
- One JSON object per text frame, in both directions
- Requests: {type, table, ...fields, request_id}
- Responses: {type, table, ...result, request_id} or {type, ...error}
"""

from __future__ import annotations

import functools
import logging
from collections.abc import AsyncIterator
from typing import Any

import websockets

from .base import BaseConnection, ConnectionFactory

logger = logging.getLogger(__name__)


class WebSocketConnection(BaseConnection):
    """A single persistent WebSocket connection to the peer."""

    def __init__(
        self,
        url: str,
        connection_id: int = 0,
        *,
        ping_interval: float | None = 30,
        ping_timeout: float | None = 10,
        open_timeout: float | None = 10,
    ):
        super().__init__(url, connection_id)
        self.ping_interval = ping_interval
        self.ping_timeout = ping_timeout
        self.open_timeout = open_timeout
        self._ws: Any = None  # websockets ClientConnection

    async def _do_open(self) -> None:
        """Connect to the WebSocket server."""
        self._ws = await websockets.connect(
            self.url,
            ping_interval=self.ping_interval,
            ping_timeout=self.ping_timeout,
            open_timeout=self.open_timeout,
        )

    async def _do_close(self) -> None:
        """Close the WebSocket connection."""
        if self._ws:
            await self._ws.close()
            self._ws = None

    async def _do_send(self, frame: str) -> None:
        """Send one text frame."""
        if not self._ws:
            raise ConnectionError("WebSocket not connected")
        logger.debug(f"[{self.connection_id}] -> {frame}")
        await self._ws.send(frame)

    async def _receive_frames(self) -> AsyncIterator[str | bytes]:
        """Receive frames until the server closes the connection.

        A normal close ends the iteration; an abnormal close raises
        websockets.ConnectionClosedError.
        """
        ws = self._ws
        if not ws:
            raise ConnectionError("WebSocket not connected")

        async for message in ws:
            logger.debug(f"[{self.connection_id}] <- {message!r}")
            yield message


def websocket_factory(
    ping_interval: float | None = 30,
    ping_timeout: float | None = 10,
    open_timeout: float | None = 10,
) -> ConnectionFactory:
    """Build a pool factory producing WebSocketConnection instances."""
    return functools.partial(
        WebSocketConnection,
        ping_interval=ping_interval,
        ping_timeout=ping_timeout,
        open_timeout=open_timeout,
    )
