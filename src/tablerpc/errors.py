"""Exception types raised by the client.

Protocol-level failures reported by the peer are *not* exceptions: they come
back as the ``error`` branch of a CallResult. The exceptions here cover
misuse of the client and failures to establish the pool.
"""

from __future__ import annotations

from pydantic import BaseModel


class TableRpcError(Exception):
    """Base class for all tablerpc exceptions."""


class PoolNotInitializedError(TableRpcError, RuntimeError):
    """A connection was requested from a pool that has no usable slots."""

    def __init__(self, message: str = "Connection pool is not initialized") -> None:
        super().__init__(message)


class PoolOpenError(TableRpcError, ConnectionError):
    """One or more connections failed to open, so no pool was created."""

    def __init__(self, url: str, count: int, cause: BaseException) -> None:
        self.url = url
        self.count = count
        self.cause = cause
        super().__init__(f"Failed to open {count} connection(s) to {url}: {cause}")


class DuplicateRequestIdError(TableRpcError, ValueError):
    """A request_id is already in flight on the chosen connection."""

    def __init__(self, request_id: str, connection_id: int) -> None:
        self.request_id = request_id
        self.connection_id = connection_id
        super().__init__(
            f"Request id {request_id!r} is already pending on connection {connection_id}"
        )


class CallError(TableRpcError):
    """Raised by CallResult.unwrap() when the call resolved with an error."""

    def __init__(self, error: BaseModel) -> None:
        self.error = error
        error_type = getattr(error, "type", type(error).__name__)
        super().__init__(f"{error_type}: {error.model_dump_json(exclude={'type'})}")
