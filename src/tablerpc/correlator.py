"""Request/response correlation over pooled connections.

The correlator owns every in-flight call. Calls are tracked per connection
in send order, keyed by request_id:

- Success frames echo a request_id and resolve exactly that call, so
  out-of-order successes on one connection are routed correctly.
- Error frames carry no request_id. They resolve the OLDEST pending call on
  the connection they arrived on (errors are assumed to answer calls in send
  order per connection).
- Undecodable frames resolve the call named by their request_id when they
  have one (and are discarded if that id is not pending). Without an id they
  are treated like error frames.
- Frames that match no pending call are discarded.

Every call resolves at most once. When a connection closes, every call still
pending on it resolves with a ConnectionClosed error.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel

from .errors import DuplicateRequestIdError
from .protocol.codec import MessageCodec
from .protocol.errors import ConnectionClosed, TransportError
from .protocol.result import CallResult
from .transport.base import BaseConnection

logger = logging.getLogger(__name__)


class CallState(str, Enum):
    """Lifecycle of one logical call. Resolved states are terminal."""

    CREATED = "created"
    SENT = "sent"
    RESOLVED_DATA = "resolved_data"
    RESOLVED_ERROR = "resolved_error"
    CANCELLED = "cancelled"


@dataclass
class PendingCall:
    """Bookkeeping for one request awaiting its response."""

    request_id: str
    connection_id: int
    future: asyncio.Future[CallResult]
    state: CallState = CallState.CREATED
    created_at: float = field(default_factory=time.monotonic)

    @property
    def done(self) -> bool:
        return self.future.done()

    def resolve(self, result: CallResult, state: CallState) -> bool:
        """Complete the call. Returns False if it was already complete."""
        if self.future.done():
            return False
        self.state = state
        self.future.set_result(result)
        return True


class RequestCorrelator:
    """Matches inbound frames to in-flight calls, per connection."""

    def __init__(self, codec: MessageCodec | None = None):
        self.codec = codec or MessageCodec()
        self._pending: dict[BaseConnection, OrderedDict[str, PendingCall]] = {}
        self._readers: dict[BaseConnection, asyncio.Task[None]] = {}

    # =========================================================================
    # Outbound
    # =========================================================================

    async def send(
        self, connection: BaseConnection, request: BaseModel
    ) -> asyncio.Future[CallResult]:
        """Register a pending call for `request`, then transmit it.

        Returns a future that resolves exactly once with the CallResult.

        Raises:
            ValueError: If the request has no request_id
            DuplicateRequestIdError: If the id is already pending on this connection
        """
        request_id = getattr(request, "request_id", None)
        if not request_id:
            raise ValueError("Request has no request_id")

        calls = self._pending.setdefault(connection, OrderedDict())
        if request_id in calls:
            raise DuplicateRequestIdError(request_id, connection.connection_id)

        frame = self.codec.encode(request)
        call = PendingCall(
            request_id=request_id,
            connection_id=connection.connection_id,
            future=asyncio.get_running_loop().create_future(),
        )

        if connection.is_closed:
            call.resolve(
                CallResult.failure(ConnectionClosed(message=self._closed_message(connection))),
                CallState.CANCELLED,
            )
            return call.future

        # Register before transmitting so an early response finds the call
        calls[request_id] = call
        try:
            await connection.send(frame)
        except Exception as e:
            logger.warning(
                f"Failed to send {request_id} on connection {connection.connection_id}: {e}"
            )
            self._resolve(
                connection,
                call,
                CallResult.failure(TransportError(message=str(e))),
                CallState.CANCELLED,
            )
            return call.future

        if not call.done:
            call.state = CallState.SENT
        logger.debug(f"Sent {request_id} on connection {connection.connection_id}")
        return call.future

    # =========================================================================
    # Inbound
    # =========================================================================

    def on_message(self, connection: BaseConnection, frame: str | bytes) -> PendingCall | None:
        """Classify an inbound frame and resolve the call it answers.

        Returns the resolved call, or None if the frame was discarded.
        """
        decoded = self.codec.decode(frame)
        calls = self._pending.get(connection)
        cid = connection.connection_id

        if decoded.is_data:
            call = calls.get(decoded.request_id) if calls and decoded.request_id else None
            if call is None:
                logger.debug(
                    f"Discarding response {decoded.request_id!r} on connection {cid}: "
                    "no matching pending call"
                )
                return None
            self._resolve(
                connection, call, CallResult.success(decoded.value), CallState.RESOLVED_DATA
            )
            return call

        if not calls:
            logger.warning(
                f"Discarding {decoded.kind.value} frame on connection {cid}: nothing pending"
            )
            return None

        if decoded.request_id:
            call = calls.get(decoded.request_id)
            if call is None:
                logger.debug(
                    f"Discarding {decoded.kind.value} frame {decoded.request_id!r} on "
                    f"connection {cid}: no matching pending call"
                )
                return None
        else:
            call = next(iter(calls.values()))
        self._resolve(
            connection, call, CallResult.failure(decoded.value), CallState.RESOLVED_ERROR
        )
        return call

    def on_close(self, connection: BaseConnection, reason: str | None = None) -> int:
        """Resolve every call pending on `connection` with ConnectionClosed.

        Returns the number of calls that were cancelled.
        """
        calls = self._pending.pop(connection, None)
        if not calls:
            return 0

        message = self._closed_message(connection, reason)
        result = CallResult.failure(ConnectionClosed(message=message))
        cancelled = sum(1 for call in calls.values() if call.resolve(result, CallState.CANCELLED))
        logger.warning(
            f"Cancelled {cancelled} pending call(s) on connection {connection.connection_id}: "
            f"{message}"
        )
        return cancelled

    # =========================================================================
    # Reader tasks
    # =========================================================================

    def attach(self, connection: BaseConnection) -> asyncio.Task[None]:
        """Start feeding inbound frames of `connection` to on_message()."""
        task = self._readers.get(connection)
        if task is None or task.done():
            task = asyncio.create_task(
                self._read_loop(connection),
                name=f"tablerpc-reader-{connection.connection_id}",
            )
            self._readers[connection] = task
        return task

    async def _read_loop(self, connection: BaseConnection) -> None:
        """Background task reading frames and routing them."""
        reason: str | None = None
        try:
            async for frame in connection.frames():
                self.on_message(connection, frame)
        except asyncio.CancelledError:
            reason = "reader stopped"
            raise
        except Exception as e:
            reason = str(e)
            logger.error(f"Read loop error on connection {connection.connection_id}: {e}")
        finally:
            self.on_close(connection, reason)

    # =========================================================================
    # Cancellation and introspection
    # =========================================================================

    def cancel(
        self, connection: BaseConnection, request_id: str, error: BaseModel
    ) -> CallResult | None:
        """Resolve one pending call with a local error.

        Returns the error result, or None if the call was no longer pending.
        """
        calls = self._pending.get(connection)
        call = calls.get(request_id) if calls else None
        if call is None:
            return None
        result = CallResult.failure(error)
        self._resolve(connection, call, result, CallState.CANCELLED)
        return result

    def discard(self, connection: BaseConnection, request_id: str) -> None:
        """Forget a pending call whose caller went away."""
        calls = self._pending.get(connection)
        call = calls.pop(request_id, None) if calls else None
        if call is not None and not call.done:
            call.state = CallState.CANCELLED
            call.future.cancel()

    def pending_count(self, connection: BaseConnection | None = None) -> int:
        """Number of in-flight calls, on one connection or overall."""
        if connection is not None:
            return len(self._pending.get(connection, ()))
        return sum(len(calls) for calls in self._pending.values())

    def pending_ids(self, connection: BaseConnection) -> list[str]:
        """Request ids pending on `connection`, oldest first."""
        return list(self._pending.get(connection, ()))

    async def close(self) -> None:
        """Stop all reader tasks and cancel every pending call."""
        readers = list(self._readers.values())
        self._readers.clear()
        for task in readers:
            task.cancel()
        for task in readers:
            with contextlib.suppress(asyncio.CancelledError):
                await task

        for connection in list(self._pending):
            self.on_close(connection, "client closed")

    # =========================================================================
    # Helpers
    # =========================================================================

    def _resolve(
        self,
        connection: BaseConnection,
        call: PendingCall,
        result: CallResult,
        state: CallState,
    ) -> None:
        calls = self._pending.get(connection)
        if calls is not None and calls.get(call.request_id) is call:
            del calls[call.request_id]
        call.resolve(result, state)

    @staticmethod
    def _closed_message(connection: BaseConnection, reason: str | None = None) -> str:
        reason = reason or connection.close_reason or "closed"
        return f"Connection {connection.connection_id} closed: {reason}"
