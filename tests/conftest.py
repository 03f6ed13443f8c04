"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from tablerpc.transport.mock import Frame


def echo_responder(payload: dict[str, Any]) -> list[Frame]:
    """Answer every request with a success response echoing its request_id."""
    op = payload["type"]
    response: dict[str, Any] = {
        "type": op,
        "table": payload["table"],
        "request_id": payload["request_id"],
    }
    if op == "ListRows":
        response["rows"] = []
    elif op == "GetRow":
        response["row"] = {"key": payload["key"]}
    elif op in ("InsertRow", "BatchInsertRow"):
        data = payload["data"]
        response["inserted_rows"] = len(data) if isinstance(data, list) else 1
    elif op == "UpdateRow":
        response["updated_rows"] = 1
    elif op == "DeleteRow":
        response["deleted_rows"] = 1
    return [response]


@pytest.fixture
def responder():
    """Default mock peer: answers everything successfully."""
    return echo_responder
