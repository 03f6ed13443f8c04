"""Mock connection for testing.

No actual I/O: outbound frames are recorded, inbound frames are injected.

Usage:
    conn = MockConnection()
    await conn.open()
    await conn.send('{"type": "GetRow", ...}')
    conn.feed({"type": "GetRow", "table": "employees", "row": {}, "request_id": "abc"})

    assert conn.sent_payloads[0]["type"] == "GetRow"

A responder callback can answer automatically: it receives each decoded
outbound payload and returns the frames to feed back (or None).
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Callable
from typing import Any

from .base import BaseConnection, ConnectionFactory

Frame = str | bytes | dict[str, Any]
Responder = Callable[[dict[str, Any]], list[Frame] | None]

# Queue sentinel: the peer closed the stream
_EOF = object()


class MockConnection(BaseConnection):
    """In-memory connection with a scriptable peer."""

    def __init__(
        self,
        url: str = "mock://peer",
        connection_id: int = 0,
        *,
        responder: Responder | None = None,
        fail_open: Exception | None = None,
        fail_send: Exception | None = None,
    ):
        super().__init__(url, connection_id)
        self.responder = responder
        self.fail_open = fail_open
        self.fail_send = fail_send
        self._sent: list[str] = []
        self._inbound: asyncio.Queue[Any] = asyncio.Queue()

    @property
    def sent(self) -> list[str]:
        """All frames sent through this connection."""
        return self._sent.copy()

    @property
    def sent_payloads(self) -> list[dict[str, Any]]:
        """Sent frames decoded from JSON."""
        return [json.loads(frame) for frame in self._sent]

    def feed(self, frame: Frame) -> None:
        """Inject an inbound frame. Dicts are JSON-encoded."""
        if isinstance(frame, dict):
            frame = json.dumps(frame)
        self._inbound.put_nowait(frame)

    def close_from_peer(self) -> None:
        """Simulate the peer closing the connection."""
        self._inbound.put_nowait(_EOF)

    async def _do_open(self) -> None:
        if self.fail_open is not None:
            raise self.fail_open

    async def _do_close(self) -> None:
        self._inbound.put_nowait(_EOF)

    async def _do_send(self, frame: str) -> None:
        if self.fail_send is not None:
            raise self.fail_send

        self._sent.append(frame)
        if self.responder is not None:
            for reply in self.responder(json.loads(frame)) or []:
                self.feed(reply)

    async def _receive_frames(self) -> AsyncIterator[str | bytes]:
        while True:
            frame = await self._inbound.get()
            if frame is _EOF:
                return
            yield frame


def mock_factory(
    responder: Responder | None = None,
    fail_open: dict[int, Exception] | None = None,
) -> ConnectionFactory:
    """Build a pool factory producing MockConnection instances.

    Args:
        responder: Shared responder for every connection
        fail_open: Map of connection slot -> exception raised when opening it
    """
    failures = fail_open or {}

    def factory(url: str, connection_id: int) -> MockConnection:
        return MockConnection(
            url,
            connection_id,
            responder=responder,
            fail_open=failures.get(connection_id),
        )

    return factory
