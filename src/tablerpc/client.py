"""RPC client facade.

Composes the connection pool, the request correlator and the codec into a
single call operation usable by any caller (scripts, UIs, tests).

Usage:
    async with RpcClient(ClientConfig(url="ws://127.0.0.1:3030", connection_count=4)) as client:
        result = await client.rows.get("employees", key=1)
        if result.ok:
            print(result.data.row)
        else:
            print(result.error)

    # Any request model works too
    result = await client.call(GetRowRequest(table="employees", key=1))

No call is retried. A caller that wants a retry reissues the request with a
new request_id.

Error frames carry no request_id and are matched to the oldest pending call
on their connection. A call that timed out is no longer pending, so a late
error frame answering it resolves the next call on that connection instead.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from .config import ClientConfig
from .correlator import RequestCorrelator
from .errors import PoolNotInitializedError
from .pool import ConnectionPool
from .protocol.codec import MessageCodec
from .protocol.errors import CallTimeout
from .protocol.requests import (
    BatchInsertRowRequest,
    DeleteRowRequest,
    GetRowRequest,
    InsertRowRequest,
    ListRowsRequest,
    Page,
    Sort,
    SortOrder,
    UpdateRowRequest,
    new_request_id,
    parse_request,
)
from .protocol.result import CallResult
from .transport.base import ConnectionFactory
from .transport.mock import Responder, mock_factory
from .transport.websocket import websocket_factory

logger = logging.getLogger(__name__)


@dataclass
class RowsAPI:
    """Row operations on a table."""

    _client: RpcClient

    async def list(
        self,
        table: str,
        select: list[str] | None = None,
        sort: str | None = None,
        order: SortOrder | str = SortOrder.ASC,
        page: int | None = None,
        page_size: int | None = None,
        request_id: str | None = None,
    ) -> CallResult:
        """List rows of a table.

        Args:
            table: Table name
            select: Columns to return (all when empty)
            sort: Column to sort on
            order: "Asc" or "Desc"
            page: 1-based page number (requires page_size)
            page_size: Rows per page
            request_id: Explicit id (generated when omitted)
        """
        if (page is None) != (page_size is None):
            raise ValueError("page and page_size must be given together")

        request = ListRowsRequest(
            table=table,
            select=select or [],
            sort=Sort(column=sort, order=SortOrder(order)) if sort else None,
            page=Page(number=page, size=page_size) if page is not None else None,
            request_id=request_id,
        )
        return await self._client.call(request)

    async def get(
        self,
        table: str,
        key: Any,
        select: list[str] | None = None,
        request_id: str | None = None,
    ) -> CallResult:
        """Get one row by primary key."""
        request = GetRowRequest(
            table=table, key=key, select=select or [], request_id=request_id
        )
        return await self._client.call(request)

    async def insert(
        self, table: str, data: dict[str, Any], request_id: str | None = None
    ) -> CallResult:
        """Insert one row."""
        request = InsertRowRequest(table=table, data=data, request_id=request_id)
        return await self._client.call(request)

    async def batch_insert(
        self, table: str, rows: list[dict[str, Any]], request_id: str | None = None
    ) -> CallResult:
        """Insert several rows in one request."""
        request = BatchInsertRowRequest(table=table, data=rows, request_id=request_id)
        return await self._client.call(request)

    async def update(
        self,
        table: str,
        key: Any,
        data: dict[str, Any],
        request_id: str | None = None,
    ) -> CallResult:
        """Update columns of one row."""
        request = UpdateRowRequest(table=table, key=key, data=data, request_id=request_id)
        return await self._client.call(request)

    async def delete(self, table: str, key: Any, request_id: str | None = None) -> CallResult:
        """Delete one row."""
        request = DeleteRowRequest(table=table, key=key, request_id=request_id)
        return await self._client.call(request)


class RpcClient:
    """Issues correlated calls over a pool of connections.

    The pool is opened by connect() (or entering the async context) and all
    connections must open before the client is usable.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        connection_factory: ConnectionFactory | None = None,
        codec: MessageCodec | None = None,
    ):
        self.config = config or ClientConfig()
        self._connection_factory = connection_factory
        self._correlator = RequestCorrelator(codec)
        self._pool: ConnectionPool | None = None

    @property
    def rows(self) -> RowsAPI:
        """Row operations."""
        return RowsAPI(_client=self)

    @property
    def pool(self) -> ConnectionPool | None:
        """The connection pool (None until connected)."""
        return self._pool

    @property
    def correlator(self) -> RequestCorrelator:
        return self._correlator

    @property
    def is_connected(self) -> bool:
        return self._pool is not None and not self._pool.is_closed

    async def connect(self) -> None:
        """Open the pool and start a reader for every connection.

        Raises:
            PoolOpenError: If any connection fails to open
        """
        if self._pool is not None:
            return

        factory = self._connection_factory or websocket_factory(
            ping_interval=self.config.ping_interval,
            ping_timeout=self.config.ping_timeout,
            open_timeout=self.config.open_timeout,
        )
        pool = await ConnectionPool.open(
            self.config.url,
            self.config.connection_count,
            factory=factory,
            open_timeout=self.config.open_timeout,
        )
        for connection in pool.connections:
            self._correlator.attach(connection)
        self._pool = pool

    async def disconnect(self) -> None:
        """Cancel pending calls, stop readers and close every connection."""
        if self._pool is None:
            return
        pool, self._pool = self._pool, None
        await self._correlator.close()
        await pool.close()

    async def call(self, request: BaseModel) -> CallResult:
        """Send a request and wait for its classified result.

        A request without a request_id is sent as a copy stamped with a fresh
        one. Returns a CallResult whose `data` is the success response, or
        whose `error` is the peer error or a local error (ConnectionClosed,
        CallTimeout, TransportError).

        Raises:
            PoolNotInitializedError: If the client is not connected
            DuplicateRequestIdError: If the request_id is already in flight on
                the selected connection
        """
        if self._pool is None:
            raise PoolNotInitializedError("Client is not connected; call connect() first")

        if not getattr(request, "request_id", None):
            request = request.model_copy(update={"request_id": new_request_id()})
        request_id: str = request.request_id  # type: ignore[attr-defined]

        connection = self._pool.next_connection()
        future = await self._correlator.send(connection, request)

        timeout = self.config.call_timeout
        try:
            return await asyncio.wait_for(asyncio.shield(future), timeout=timeout)
        except TimeoutError:
            logger.warning(
                f"Call {request_id} timed out after {timeout}s "
                f"on connection {connection.connection_id}"
            )
            error = CallTimeout(
                message=f"No response to {request_id} within {timeout}s", timeout=timeout
            )
            return self._correlator.cancel(connection, request_id, error) or future.result()
        except asyncio.CancelledError:
            self._correlator.discard(connection, request_id)
            raise

    async def call_raw(self, payload: dict[str, Any]) -> CallResult:
        """Validate a plain dict into a request model, then call it.

        Raises:
            pydantic.ValidationError: If the payload matches no request shape
        """
        return await self.call(parse_request(payload))

    async def __aenter__(self) -> RpcClient:
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.disconnect()


# Factory functions


def create_client(
    url: str = "ws://127.0.0.1:3030",
    connection_count: int = 1,
    call_timeout: float | None = 30.0,
) -> RpcClient:
    """Create a client for a WebSocket peer.

    Args:
        url: Peer URL
        connection_count: Number of pooled connections
        call_timeout: Seconds to wait for each response (None = forever)

    Returns:
        RpcClient (not yet connected)
    """
    config = ClientConfig(url=url, connection_count=connection_count, call_timeout=call_timeout)
    return RpcClient(config)


def create_test_client(
    responder: Responder | None = None,
    connection_count: int = 1,
    call_timeout: float | None = 5.0,
) -> RpcClient:
    """Create a client backed by in-memory MockConnections.

    Args:
        responder: Answers each outbound payload with frames to feed back
        connection_count: Number of pooled connections
        call_timeout: Seconds to wait for each response

    Returns:
        RpcClient (not yet connected)
    """
    config = ClientConfig(
        url="mock://peer", connection_count=connection_count, call_timeout=call_timeout
    )
    return RpcClient(config, connection_factory=mock_factory(responder))
