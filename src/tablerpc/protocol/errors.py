"""Error definitions for the table protocol.

Two families share the `type` discriminator:

- ErrorResponse: errors sent by the peer. They carry NO request_id, so the
  correlator matches them to pending calls in send order per connection.
- LocalError: errors synthesized on the client (connection closed, timeout,
  transport failure). These never appear on the wire and are never parsed
  from inbound frames.

A frame that matches no known shape is reported as a BadRequest built on the
client side.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, Field, TypeAdapter


class ErrorType(str, Enum):
    """Tag constants for error responses."""

    BAD_REQUEST = "BadRequest"
    NON_TEXT_MESSAGE = "NonTextMessage"
    TABLE_NOT_FOUND = "TableNotFound"
    COLUMNS_NOT_FOUND = "ColumnsNotFound"
    SORT_COLUMN_NOT_FOUND = "SortColumnNotFound"
    PAGE_NUMBER_CAN_NOT_BE_ZERO = "PageNumberCanNotBeZero"
    ROW_NOT_FOUND = "RowNotFound"
    DATABASE_ERROR = "DatabaseError"

    # Client-side only
    CONNECTION_CLOSED = "ConnectionClosed"
    CALL_TIMEOUT = "CallTimeout"
    TRANSPORT_ERROR = "TransportError"


# =============================================================================
# Peer errors
# =============================================================================


class BadRequest(BaseModel):
    type: Literal["BadRequest"] = "BadRequest"
    message: str


class NonTextMessage(BaseModel):
    type: Literal["NonTextMessage"] = "NonTextMessage"


class TableNotFound(BaseModel):
    type: Literal["TableNotFound"] = "TableNotFound"
    table: str


class ColumnsNotFound(BaseModel):
    type: Literal["ColumnsNotFound"] = "ColumnsNotFound"
    columns: list[str]


class SortColumnNotFound(BaseModel):
    type: Literal["SortColumnNotFound"] = "SortColumnNotFound"
    column: str


class PageNumberCanNotBeZero(BaseModel):
    type: Literal["PageNumberCanNotBeZero"] = "PageNumberCanNotBeZero"


class RowNotFound(BaseModel):
    type: Literal["RowNotFound"] = "RowNotFound"


class DatabaseError(BaseModel):
    type: Literal["DatabaseError"] = "DatabaseError"


ErrorResponse = Annotated[
    BadRequest
    | NonTextMessage
    | TableNotFound
    | ColumnsNotFound
    | SortColumnNotFound
    | PageNumberCanNotBeZero
    | RowNotFound
    | DatabaseError,
    Field(discriminator="type"),
]

ERROR_ADAPTER: TypeAdapter[ErrorResponse] = TypeAdapter(ErrorResponse)


# =============================================================================
# Local errors
# =============================================================================


class ConnectionClosed(BaseModel):
    """The connection closed before the call was answered."""

    type: Literal["ConnectionClosed"] = "ConnectionClosed"
    message: str = "Connection closed"


class CallTimeout(BaseModel):
    """No answer arrived within the configured call timeout."""

    type: Literal["CallTimeout"] = "CallTimeout"
    message: str = "Call timed out"
    timeout: float | None = None


class TransportError(BaseModel):
    """Sending the request failed."""

    type: Literal["TransportError"] = "TransportError"
    message: str


LocalError = ConnectionClosed | CallTimeout | TransportError
