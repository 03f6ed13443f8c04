"""Request definitions for the table protocol.

Requests are the client side of the protocol. Each request:
- Has a `type` naming the operation (the discriminator on the wire)
- Names the `table` it operates on
- Carries a `request_id` echoed back by successful responses

Example:
    {
        "type": "GetRow",
        "table": "employees",
        "key": 1,
        "select": ["FirstName"],
        "request_id": "9f1c2a..."
    }

Requests are immutable. The client stamps a generated `request_id` onto a
copy when the caller leaves it unset.
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


def new_request_id() -> str:
    """Generate a globally unique request id."""
    return uuid.uuid4().hex


class OperationType(str, Enum):
    """All supported operation tags."""

    LIST_ROWS = "ListRows"
    GET_ROW = "GetRow"
    INSERT_ROW = "InsertRow"
    BATCH_INSERT_ROW = "BatchInsertRow"
    UPDATE_ROW = "UpdateRow"
    DELETE_ROW = "DeleteRow"


class SortOrder(str, Enum):
    ASC = "Asc"
    DESC = "Desc"


class Sort(BaseModel):
    """Sort clause for ListRows."""

    model_config = ConfigDict(frozen=True)

    column: str
    order: SortOrder = SortOrder.ASC


class Page(BaseModel):
    """Pagination clause for ListRows. Page numbers start at 1."""

    model_config = ConfigDict(frozen=True)

    number: int
    size: int


class TableRequest(BaseModel):
    """Fields shared by every table operation."""

    model_config = ConfigDict(frozen=True)

    table: str
    request_id: str | None = None

    def with_request_id(self, request_id: str | None = None) -> TableRequest:
        """Return a copy stamped with `request_id` (generated when None)."""
        return self.model_copy(update={"request_id": request_id or new_request_id()})


class ListRowsRequest(TableRequest):
    type: Literal["ListRows"] = "ListRows"
    select: list[str] = Field(default_factory=list)
    sort: Sort | None = None
    page: Page | None = None


class GetRowRequest(TableRequest):
    type: Literal["GetRow"] = "GetRow"
    key: Any
    select: list[str] = Field(default_factory=list)


class InsertRowRequest(TableRequest):
    type: Literal["InsertRow"] = "InsertRow"
    data: dict[str, Any]


class BatchInsertRowRequest(TableRequest):
    type: Literal["BatchInsertRow"] = "BatchInsertRow"
    data: list[dict[str, Any]]


class UpdateRowRequest(TableRequest):
    type: Literal["UpdateRow"] = "UpdateRow"
    key: Any
    data: dict[str, Any]


class DeleteRowRequest(TableRequest):
    type: Literal["DeleteRow"] = "DeleteRow"
    key: Any


ApiRequest = Annotated[
    ListRowsRequest
    | GetRowRequest
    | InsertRowRequest
    | BatchInsertRowRequest
    | UpdateRowRequest
    | DeleteRowRequest,
    Field(discriminator="type"),
]

REQUEST_ADAPTER: TypeAdapter[ApiRequest] = TypeAdapter(ApiRequest)


def parse_request(payload: dict[str, Any]) -> ApiRequest:
    """Validate a plain dict into the matching request model.

    Raises:
        pydantic.ValidationError: If the payload matches no request shape
    """
    return REQUEST_ADAPTER.validate_python(payload)
