"""Unit tests for the wire codec.

Tests frame classification:
- Error frames (no request_id)
- Success frames (matched by request_id)
- Frames matching neither shape
"""

from __future__ import annotations

import json

import pytest
from pydantic import TypeAdapter

from tablerpc.protocol import (
    BadRequest,
    ColumnsNotFound,
    FrameKind,
    GetRowRequest,
    GetRowResponse,
    ListRowsRequest,
    ListRowsResponse,
    MessageCodec,
    Page,
    RowNotFound,
    Sort,
    SortOrder,
    TableNotFound,
    UpdateRowRequest,
)

# =============================================================================
# Encoding
# =============================================================================


class TestEncode:
    """Tests for MessageCodec.encode."""

    def test_encode_get_row(self) -> None:
        """A request encodes as one JSON object carrying its tag and id."""
        codec = MessageCodec()
        frame = codec.encode(GetRowRequest(table="employees", key=1, request_id="abc"))
        data = json.loads(frame)

        assert data == {
            "type": "GetRow",
            "table": "employees",
            "key": 1,
            "select": [],
            "request_id": "abc",
        }

    def test_encode_omits_unset_optionals(self) -> None:
        """Unset sort and page are left out of the frame."""
        codec = MessageCodec()
        data = json.loads(codec.encode(ListRowsRequest(table="employees", request_id="r1")))

        assert "sort" not in data
        assert "page" not in data

    def test_encode_keeps_null_key(self) -> None:
        """A null key is a value, not an unset clause, and is sent as null."""
        codec = MessageCodec()
        data = json.loads(codec.encode(GetRowRequest(table="t", key=None, request_id="x")))

        assert "key" in data
        assert data["key"] is None

    def test_encode_keeps_null_update_value(self) -> None:
        """Null column values inside data are sent unchanged."""
        codec = MessageCodec()
        request = UpdateRowRequest(table="t", key=1, data={"Title": None}, request_id="x")
        data = json.loads(codec.encode(request))

        assert data["data"] == {"Title": None}

    def test_encode_nested_clauses(self) -> None:
        """Sort and page clauses encode as nested objects."""
        codec = MessageCodec()
        request = ListRowsRequest(
            table="employees",
            select=["FirstName"],
            sort=Sort(column="FirstName", order=SortOrder.DESC),
            page=Page(number=2, size=10),
            request_id="r1",
        )
        data = json.loads(codec.encode(request))

        assert data["sort"] == {"column": "FirstName", "order": "Desc"}
        assert data["page"] == {"number": 2, "size": 10}
        assert data["select"] == ["FirstName"]

    def test_encode_requires_request_id(self) -> None:
        """Encoding a request without an id is refused."""
        codec = MessageCodec()
        with pytest.raises(ValueError, match="request_id"):
            codec.encode(GetRowRequest(table="employees", key=1))


# =============================================================================
# Decoding
# =============================================================================


class TestDecode:
    """Tests for MessageCodec.decode."""

    def test_decode_success_frame(self) -> None:
        """A success frame is DATA with its request_id."""
        codec = MessageCodec()
        decoded = codec.decode(
            json.dumps(
                {"type": "GetRow", "table": "employees", "row": {"id": 1}, "request_id": "abc"}
            )
        )

        assert decoded.kind == FrameKind.DATA
        assert decoded.is_data
        assert decoded.request_id == "abc"
        assert isinstance(decoded.value, GetRowResponse)
        assert decoded.value.row == {"id": 1}

    def test_decode_list_rows(self) -> None:
        """Row contents are passed through unexamined."""
        codec = MessageCodec()
        rows = [{"a": 1}, [1, 2], "x", None]
        decoded = codec.decode(
            json.dumps({"type": "ListRows", "table": "t", "rows": rows, "request_id": "r"})
        )

        assert isinstance(decoded.value, ListRowsResponse)
        assert decoded.value.rows == rows

    def test_decode_error_frame(self) -> None:
        """An error frame is ERROR and has no request_id."""
        codec = MessageCodec()
        decoded = codec.decode(json.dumps({"type": "TableNotFound", "table": "cats"}))

        assert decoded.is_error
        assert decoded.request_id is None
        assert decoded.value == TableNotFound(table="cats")

    def test_decode_unit_error(self) -> None:
        """Errors without fields decode from just their tag."""
        codec = MessageCodec()
        decoded = codec.decode('{"type": "RowNotFound"}')

        assert decoded.is_error
        assert isinstance(decoded.value, RowNotFound)

    def test_decode_error_with_list_payload(self) -> None:
        """ColumnsNotFound keeps its column list."""
        codec = MessageCodec()
        decoded = codec.decode('{"type": "ColumnsNotFound", "columns": ["a", "b"]}')

        assert decoded.value == ColumnsNotFound(columns=["a", "b"])

    def test_decode_error_wins_over_success(self) -> None:
        """Error shapes are tried before success shapes."""
        shared = TypeAdapter(BadRequest)
        codec = MessageCodec(response_adapter=shared, error_adapter=shared)
        decoded = codec.decode('{"type": "BadRequest", "message": "nope"}')

        assert decoded.kind == FrameKind.ERROR

    def test_decode_success_without_request_id(self) -> None:
        """A success frame missing its id still classifies as DATA."""
        codec = MessageCodec()
        decoded = codec.decode('{"type": "DeleteRow", "table": "t", "deleted_rows": 1}')

        assert decoded.is_data
        assert decoded.request_id is None

    def test_decode_binary_frame(self) -> None:
        """Binary frames are invalid."""
        codec = MessageCodec()
        decoded = codec.decode(b"\x00\x01")

        assert decoded.is_invalid
        assert isinstance(decoded.value, BadRequest)
        assert "non-text" in decoded.value.message

    def test_decode_non_json(self) -> None:
        """Plain text is invalid and quoted in the message."""
        codec = MessageCodec()
        decoded = codec.decode("failed to decode json body")

        assert decoded.is_invalid
        assert "failed to decode json body" in decoded.value.message
        assert decoded.request_id is None

    def test_decode_non_json_quote_is_bounded(self) -> None:
        """Long undecodable frames are truncated in the message."""
        codec = MessageCodec()
        decoded = codec.decode("x" * 10_000)

        assert len(decoded.value.message) < 300

    def test_decode_unknown_type_keeps_request_id(self) -> None:
        """An unknown shape that carries an id keeps it for routing."""
        codec = MessageCodec()
        decoded = codec.decode('{"type": "Mystery", "request_id": "abc"}')

        assert decoded.is_invalid
        assert decoded.request_id == "abc"
        assert "Mystery" in decoded.value.message

    def test_decode_success_with_missing_field(self) -> None:
        """A success tag with a malformed body is invalid, not data."""
        codec = MessageCodec()
        decoded = codec.decode('{"type": "GetRow", "table": "t", "request_id": "abc"}')

        # GetRowResponse.row is required
        assert decoded.is_invalid
        assert decoded.request_id == "abc"

    def test_decode_json_array(self) -> None:
        """Non-object JSON is invalid."""
        codec = MessageCodec()
        decoded = codec.decode("[1, 2, 3]")

        assert decoded.is_invalid
        assert decoded.request_id is None
