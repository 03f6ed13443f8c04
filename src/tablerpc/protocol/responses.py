"""Success response definitions for the table protocol.

Every success response mirrors the `type` of the request it answers and
echoes its `request_id`. Row contents are passed through unexamined.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, TypeAdapter


class TableResponse(BaseModel):
    """Fields shared by every success response."""

    table: str
    # Optional so a response without an id can still be classified (and
    # then discarded) instead of being reported as undecodable.
    request_id: str | None = None


class ListRowsResponse(TableResponse):
    type: Literal["ListRows"] = "ListRows"
    rows: list[Any]


class GetRowResponse(TableResponse):
    type: Literal["GetRow"] = "GetRow"
    row: Any


class InsertRowResponse(TableResponse):
    type: Literal["InsertRow"] = "InsertRow"
    inserted_rows: int


class BatchInsertRowResponse(TableResponse):
    type: Literal["BatchInsertRow"] = "BatchInsertRow"
    inserted_rows: int


class UpdateRowResponse(TableResponse):
    type: Literal["UpdateRow"] = "UpdateRow"
    updated_rows: int


class DeleteRowResponse(TableResponse):
    type: Literal["DeleteRow"] = "DeleteRow"
    deleted_rows: int


ApiResponse = Annotated[
    ListRowsResponse
    | GetRowResponse
    | InsertRowResponse
    | BatchInsertRowResponse
    | UpdateRowResponse
    | DeleteRowResponse,
    Field(discriminator="type"),
]

RESPONSE_ADAPTER: TypeAdapter[ApiResponse] = TypeAdapter(ApiResponse)
