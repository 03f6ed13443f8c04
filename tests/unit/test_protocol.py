"""Unit tests for protocol models.

Tests requests, responses, errors and CallResult.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from tablerpc.errors import CallError
from tablerpc.protocol import (
    CallResult,
    CallTimeout,
    ConnectionClosed,
    DeleteRowRequest,
    ErrorType,
    GetRowRequest,
    GetRowResponse,
    InsertRowRequest,
    ListRowsRequest,
    OperationType,
    RowNotFound,
    SortOrder,
    TableNotFound,
    UpdateRowRequest,
    new_request_id,
    parse_request,
)

# =============================================================================
# Requests
# =============================================================================


class TestRequests:
    """Tests for request models."""

    def test_type_tags(self) -> None:
        """Each request carries its operation tag."""
        assert GetRowRequest(table="t", key=1).type == OperationType.GET_ROW.value
        assert ListRowsRequest(table="t").type == "ListRows"
        assert DeleteRowRequest(table="t", key=1).type == "DeleteRow"

    def test_defaults(self) -> None:
        """Optional clauses default to empty."""
        request = ListRowsRequest(table="t")

        assert request.select == []
        assert request.sort is None
        assert request.page is None
        assert request.request_id is None

    def test_requests_are_immutable(self) -> None:
        """Requests cannot be mutated after construction."""
        request = GetRowRequest(table="t", key=1)

        with pytest.raises(ValidationError):
            request.request_id = "abc"  # type: ignore[misc]

    def test_with_request_id_copies(self) -> None:
        """with_request_id stamps a copy and leaves the original alone."""
        request = GetRowRequest(table="t", key=1)
        stamped = request.with_request_id("abc")

        assert stamped.request_id == "abc"
        assert request.request_id is None
        assert stamped.key == 1

    def test_with_request_id_generates(self) -> None:
        """with_request_id generates an id when none is given."""
        stamped = GetRowRequest(table="t", key=1).with_request_id()

        assert stamped.request_id

    def test_key_accepts_any_json_scalar(self) -> None:
        """Keys are untyped JSON values."""
        assert GetRowRequest(table="t", key="abc").key == "abc"
        assert UpdateRowRequest(table="t", key=[1, 2], data={}).key == [1, 2]

    def test_insert_requires_data(self) -> None:
        """InsertRow without data is rejected."""
        with pytest.raises(ValidationError):
            InsertRowRequest(table="t")  # type: ignore[call-arg]


class TestParseRequest:
    """Tests for parse_request."""

    def test_parse_by_tag(self) -> None:
        """The type tag selects the model."""
        request = parse_request(
            {"type": "ListRows", "table": "t", "sort": {"column": "a", "order": "Desc"}}
        )

        assert isinstance(request, ListRowsRequest)
        assert request.sort is not None
        assert request.sort.order == SortOrder.DESC

    def test_parse_unknown_tag(self) -> None:
        """Unknown tags are rejected."""
        with pytest.raises(ValidationError):
            parse_request({"type": "DropTable", "table": "t"})

    def test_parse_missing_table(self) -> None:
        """Every request names a table."""
        with pytest.raises(ValidationError):
            parse_request({"type": "GetRow", "key": 1})


def test_new_request_id_unique() -> None:
    """Generated ids do not repeat."""
    ids = {new_request_id() for _ in range(1000)}
    assert len(ids) == 1000


# =============================================================================
# Errors
# =============================================================================


class TestErrors:
    """Tests for error models."""

    def test_local_error_tags(self) -> None:
        """Local errors use their own tags."""
        assert ConnectionClosed().type == ErrorType.CONNECTION_CLOSED.value
        assert CallTimeout(timeout=1.5).type == ErrorType.CALL_TIMEOUT.value

    def test_peer_error_dump(self) -> None:
        """Peer errors serialize back to their wire shape."""
        assert TableNotFound(table="cats").model_dump() == {
            "type": "TableNotFound",
            "table": "cats",
        }


# =============================================================================
# CallResult
# =============================================================================


class TestCallResult:
    """Tests for CallResult."""

    def test_success(self) -> None:
        """A success result exposes data and the echoed id."""
        response = GetRowResponse(table="t", row={"id": 1}, request_id="abc")
        result = CallResult.success(response)

        assert result.ok
        assert result.error is None
        assert result.request_id == "abc"
        assert result.unwrap() is response

    def test_failure(self) -> None:
        """A failure result exposes the error and has no id."""
        result = CallResult.failure(RowNotFound())

        assert not result.ok
        assert result.data is None
        assert result.request_id is None

    def test_unwrap_failure_raises(self) -> None:
        """unwrap() raises CallError carrying the error."""
        result = CallResult.failure(TableNotFound(table="cats"))

        with pytest.raises(CallError) as exc_info:
            result.unwrap()

        assert exc_info.value.error == TableNotFound(table="cats")
        assert "TableNotFound" in str(exc_info.value)
        assert "cats" in str(exc_info.value)

    def test_exactly_one_branch(self) -> None:
        """A result cannot be both or neither."""
        with pytest.raises(ValueError):
            CallResult()
        with pytest.raises(ValueError):
            CallResult(data=GetRowResponse(table="t", row=None), error=RowNotFound())

    def test_model_dump_single_key(self) -> None:
        """Results serialize to {"data": ...} or {"error": ...}."""
        ok = CallResult.success(GetRowResponse(table="t", row={"id": 1}, request_id="abc"))
        failed = CallResult.failure(TableNotFound(table="cats"))

        assert ok.model_dump() == {
            "data": {"table": "t", "request_id": "abc", "type": "GetRow", "row": {"id": 1}}
        }
        assert failed.model_dump() == {"error": {"type": "TableNotFound", "table": "cats"}}
