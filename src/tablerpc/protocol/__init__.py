"""Table protocol: requests, responses, errors and the wire codec.

Key concepts:
- Requests: client -> peer, tagged by `type`, carry a `request_id`
- Responses: peer -> client, mirror the request `type`, echo `request_id`
- Error responses: peer -> client, tagged by `type`, carry NO `request_id`
- Local errors: synthesized by the client (closed connection, timeout)
"""

from .codec import DecodedFrame, FrameKind, MessageCodec
from .errors import (
    ERROR_ADAPTER,
    BadRequest,
    CallTimeout,
    ColumnsNotFound,
    ConnectionClosed,
    DatabaseError,
    ErrorResponse,
    ErrorType,
    LocalError,
    NonTextMessage,
    PageNumberCanNotBeZero,
    RowNotFound,
    SortColumnNotFound,
    TableNotFound,
    TransportError,
)
from .requests import (
    REQUEST_ADAPTER,
    ApiRequest,
    BatchInsertRowRequest,
    DeleteRowRequest,
    GetRowRequest,
    InsertRowRequest,
    ListRowsRequest,
    OperationType,
    Page,
    Sort,
    SortOrder,
    TableRequest,
    UpdateRowRequest,
    new_request_id,
    parse_request,
)
from .responses import (
    RESPONSE_ADAPTER,
    ApiResponse,
    BatchInsertRowResponse,
    DeleteRowResponse,
    GetRowResponse,
    InsertRowResponse,
    ListRowsResponse,
    TableResponse,
    UpdateRowResponse,
)
from .result import CallResult

__all__ = [
    # Codec
    "MessageCodec",
    "DecodedFrame",
    "FrameKind",
    "CallResult",
    # Requests
    "ApiRequest",
    "REQUEST_ADAPTER",
    "OperationType",
    "TableRequest",
    "ListRowsRequest",
    "GetRowRequest",
    "InsertRowRequest",
    "BatchInsertRowRequest",
    "UpdateRowRequest",
    "DeleteRowRequest",
    "Sort",
    "SortOrder",
    "Page",
    "new_request_id",
    "parse_request",
    # Responses
    "ApiResponse",
    "RESPONSE_ADAPTER",
    "TableResponse",
    "ListRowsResponse",
    "GetRowResponse",
    "InsertRowResponse",
    "BatchInsertRowResponse",
    "UpdateRowResponse",
    "DeleteRowResponse",
    # Errors
    "ErrorResponse",
    "ERROR_ADAPTER",
    "ErrorType",
    "LocalError",
    "BadRequest",
    "NonTextMessage",
    "TableNotFound",
    "ColumnsNotFound",
    "SortColumnNotFound",
    "PageNumberCanNotBeZero",
    "RowNotFound",
    "DatabaseError",
    "ConnectionClosed",
    "CallTimeout",
    "TransportError",
]
