"""tablerpc CLI.

Issues one call against a table service and prints the result.

Usage:
    tablerpc list employees                          # List all rows
    tablerpc list employees -s FirstName --sort FirstName --order Desc
    tablerpc list employees --page 2 --size 10       # Paginate
    tablerpc get employees 1                         # Get row by key
    tablerpc insert employees '{"FirstName": "A", "LastName": "B"}'
    tablerpc batch-insert employees '[{...}, {...}]'
    tablerpc update employees 1 '{"Title": "CTO"}'
    tablerpc delete employees 1
    tablerpc send '{"type": "GetRow", "table": "employees", "key": 1}'

Connection settings default to the TABLERPC_* environment variables.
Results go to stdout as JSON; logs go to stderr. A call that resolves with
an error exits with status 1.
"""

from __future__ import annotations

import asyncio
import dataclasses
import json
import logging
import sys
from typing import Any

import click
from pydantic import BaseModel, ValidationError

from .client import RpcClient
from .config import ClientConfig
from .errors import TableRpcError
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
    parse_request,
)
from .protocol.result import CallResult

# Output format options
FORMAT_TABLE = "table"
FORMAT_JSON = "json"


def truncate(text: str, max_len: int = 30) -> str:
    """Truncate text for display."""
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def parse_json_arg(value: str, name: str) -> Any:
    """Parse a JSON command-line argument."""
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"invalid JSON: {e}", param_hint=name) from e


def parse_key(value: str) -> Any:
    """Keys are JSON when they parse (so `1` is an integer), else plain strings."""
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


async def _call(config: ClientConfig, request: BaseModel) -> CallResult:
    """Open a client, issue one call, close the client."""
    async with RpcClient(config) as client:
        return await client.call(request)


def _render_table(rows: list[Any]) -> str:
    """Render a list of row objects as an aligned text table."""
    if not rows:
        return "(no rows)"

    columns: list[str] = []
    for row in rows:
        for column in row if isinstance(row, dict) else ():
            if column not in columns:
                columns.append(column)
    if not columns:
        return "\n".join(str(row) for row in rows)

    cells = [
        [truncate("" if row.get(c) is None else str(row.get(c))) for c in columns]
        for row in rows
    ]
    widths = [max(len(c), *(len(r[i]) for r in cells)) for i, c in enumerate(columns)]
    lines = ["  ".join(c.ljust(w) for c, w in zip(columns, widths, strict=True))]
    lines.append("  ".join("-" * w for w in widths))
    for row_cells in cells:
        lines.append("  ".join(v.ljust(w) for v, w in zip(row_cells, widths, strict=True)))
    return "\n".join(lines)


def _output(result: CallResult, output_format: str) -> None:
    if output_format == FORMAT_TABLE and result.ok:
        data = result.model_dump()["data"]
        if "rows" in data:
            click.echo(_render_table(data["rows"]))
        elif "row" in data:
            click.echo(_render_table([data["row"]]))
        else:
            for key, value in data.items():
                click.echo(f"{key}: {value}")
    else:
        click.echo(json.dumps(result.model_dump(), indent=2))

    if not result.ok:
        sys.exit(1)


def _run(ctx: click.Context, request: BaseModel) -> None:
    """Execute a request with the group's config and print the result."""
    config: ClientConfig = ctx.obj["config"]
    try:
        result = asyncio.run(_call(config, request))
    except (TableRpcError, ConnectionError) as e:
        raise click.ClickException(str(e)) from e
    _output(result, ctx.obj["format"])


@click.group()
@click.option("--url", "-u", default=None, help="Peer URL [env: TABLERPC_URL]")
@click.option(
    "--connections",
    "-c",
    type=int,
    default=None,
    help="Number of pooled connections [env: TABLERPC_CONNECTIONS]",
)
@click.option(
    "--timeout",
    "-t",
    type=float,
    default=None,
    help="Seconds to wait for a response [env: TABLERPC_CALL_TIMEOUT]",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice([FORMAT_JSON, FORMAT_TABLE]),
    default=FORMAT_JSON,
    help="Output format",
)
@click.option("--verbose", "-v", is_flag=True, help="Log connection activity to stderr")
@click.pass_context
def main(
    ctx: click.Context,
    url: str | None,
    connections: int | None,
    timeout: float | None,
    output_format: str,
    verbose: bool,
) -> None:
    """tablerpc - call a table service over WebSocket."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = ClientConfig.from_env()
        overrides: dict[str, Any] = {}
        if url is not None:
            overrides["url"] = url
        if connections is not None:
            overrides["connection_count"] = connections
        if timeout is not None:
            overrides["call_timeout"] = timeout
        if overrides:
            config = dataclasses.replace(config, **overrides)
    except ValueError as e:
        raise click.UsageError(str(e)) from e

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["format"] = output_format


# =============================================================================
# Row Commands
# =============================================================================


@main.command("list")
@click.argument("table")
@click.option("--select", "-s", multiple=True, help="Column to return (repeatable)")
@click.option("--sort", "sort_column", default=None, help="Column to sort on")
@click.option(
    "--order",
    type=click.Choice([o.value for o in SortOrder]),
    default=SortOrder.ASC.value,
    help="Sort order",
)
@click.option("--page", type=int, default=None, help="Page number (1-based)")
@click.option("--size", "page_size", type=int, default=None, help="Rows per page")
@click.pass_context
def list_rows(
    ctx: click.Context,
    table: str,
    select: tuple[str, ...],
    sort_column: str | None,
    order: str,
    page: int | None,
    page_size: int | None,
) -> None:
    """List rows of TABLE.

    Examples:

        # Two columns, sorted
        tablerpc list employees -s FirstName -s EmployeeId --sort FirstName

        # Second page of two rows
        tablerpc list employees --page 2 --size 2
    """
    if (page is None) != (page_size is None):
        raise click.UsageError("--page and --size must be given together")

    request = ListRowsRequest(
        table=table,
        select=list(select),
        sort=Sort(column=sort_column, order=SortOrder(order)) if sort_column else None,
        page=Page(number=page, size=page_size) if page is not None else None,
    )
    _run(ctx, request)


@main.command("get")
@click.argument("table")
@click.argument("key")
@click.option("--select", "-s", multiple=True, help="Column to return (repeatable)")
@click.pass_context
def get_row(ctx: click.Context, table: str, key: str, select: tuple[str, ...]) -> None:
    """Get the row of TABLE with primary key KEY."""
    _run(ctx, GetRowRequest(table=table, key=parse_key(key), select=list(select)))


@main.command("insert")
@click.argument("table")
@click.argument("data")
@click.pass_context
def insert_row(ctx: click.Context, table: str, data: str) -> None:
    """Insert one row (DATA is a JSON object) into TABLE."""
    row = parse_json_arg(data, "DATA")
    if not isinstance(row, dict):
        raise click.BadParameter("expected a JSON object", param_hint="DATA")
    _run(ctx, InsertRowRequest(table=table, data=row))


@main.command("batch-insert")
@click.argument("table")
@click.argument("data")
@click.pass_context
def batch_insert_rows(ctx: click.Context, table: str, data: str) -> None:
    """Insert several rows (DATA is a JSON array of objects) into TABLE."""
    rows = parse_json_arg(data, "DATA")
    if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
        raise click.BadParameter("expected a JSON array of objects", param_hint="DATA")
    _run(ctx, BatchInsertRowRequest(table=table, data=rows))


@main.command("update")
@click.argument("table")
@click.argument("key")
@click.argument("data")
@click.pass_context
def update_row(ctx: click.Context, table: str, key: str, data: str) -> None:
    """Update the row of TABLE with key KEY using DATA (a JSON object)."""
    changes = parse_json_arg(data, "DATA")
    if not isinstance(changes, dict):
        raise click.BadParameter("expected a JSON object", param_hint="DATA")
    _run(ctx, UpdateRowRequest(table=table, key=parse_key(key), data=changes))


@main.command("delete")
@click.argument("table")
@click.argument("key")
@click.pass_context
def delete_row(ctx: click.Context, table: str, key: str) -> None:
    """Delete the row of TABLE with key KEY."""
    _run(ctx, DeleteRowRequest(table=table, key=parse_key(key)))


@main.command("send")
@click.argument("request_json")
@click.pass_context
def send(ctx: click.Context, request_json: str) -> None:
    """Send a raw REQUEST_JSON (must include "type" and "table")."""
    payload = parse_json_arg(request_json, "REQUEST_JSON")
    try:
        request = parse_request(payload)
    except ValidationError as e:
        raise click.BadParameter(str(e), param_hint="REQUEST_JSON") from e
    _run(ctx, request)


if __name__ == "__main__":
    main()
