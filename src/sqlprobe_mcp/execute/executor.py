"""Query execution against a backend driver.

`execute_query` opens a connection, binds credentials, submits the query and
streams rows from every result-set the backend returns. Each step is a hard
stop: driver failures become `ConnectionInitError`, `BindError` or
`QueryError`. The connection is finished on every path once it was opened; a
failure to finish is logged and never discards rows already produced.
"""

from __future__ import annotations

from collections.abc import Iterator

from fastmcp.utilities.logging import get_logger

from sqlprobe_mcp.connection import ConnectionParameters
from sqlprobe_mcp.exceptions import (
    BindError,
    ConnectionCloseError,
    ConnectionInitError,
    QueryError,
)
from sqlprobe_mcp.execute.driver import (
    BackendDriver,
    BackendHandle,
    BackendResultSet,
    ColumnValue,
    DriverError,
)

_logger = get_logger(__name__)

MAX_QUERY_DISPLAY = 200


def preview_sql(sql: str) -> str:
    return sql[:MAX_QUERY_DISPLAY] + ("..." if len(sql) > MAX_QUERY_DISPLAY else "")


def _read_row(result: BackendResultSet) -> list[ColumnValue]:
    return [
        ColumnValue(result.column_name(i), result.column_type(i), result.field_value(i))
        for i in range(result.column_count())
    ]


def _drain(handle: BackendHandle, sql: str) -> Iterator[list[ColumnValue]]:
    """Walk result-sets (outer) and rows (inner)."""
    result_sets = 0
    rows = 0
    try:
        while (result := handle.next_result()) is not None:
            result_sets += 1
            try:
                while result.fetch_row():
                    rows += 1
                    yield _read_row(result)
            finally:
                result.finish()
    except DriverError as exc:
        raise QueryError(preview_sql(sql), str(exc)) from exc
    _logger.debug("Drained %d result-set(s), %d row(s)", result_sets, rows)


def _finish(handle: BackendHandle, backend_id: str) -> None:
    try:
        handle.finish()
    except DriverError as exc:
        close_error = ConnectionCloseError(backend_id, str(exc))
        _logger.warning("%s: %s", close_error.kind, close_error)


def execute_query(
    driver: BackendDriver,
    backend_id: str,
    params: ConnectionParameters,
    sql: str,
) -> Iterator[list[ColumnValue]]:
    """Run `sql` on `backend_id` and yield each row's columns.

    Args:
        driver: Backend driver implementation
        backend_id: Backend identifier resolved from the engine table
        params: Parsed connection parameters (not cleared here)
        sql: Query text, submitted verbatim

    Yields:
        One list of `ColumnValue` per row, across all result-sets

    Raises:
        ConnectionInitError: If the backend cannot be initialized
        BindError: If binding database/user/password fails
        QueryError: If submitting the query or fetching rows fails
    """
    host = params.reveal("host")
    port = params.reveal("port")
    try:
        handle = driver.init(backend_id, host, port, params.connect_timeout)
    except DriverError as exc:
        raise ConnectionInitError(backend_id, host, port, str(exc)) from exc

    try:
        database = params.reveal("database")
        user = params.reveal("user")
        try:
            handle.bind(database, user, params.reveal("password"))
        except DriverError as exc:
            raise BindError(database, user, str(exc)) from exc

        try:
            handle.query(sql)
        except DriverError as exc:
            raise QueryError(preview_sql(sql), str(exc)) from exc

        yield from _drain(handle, sql)
    finally:
        _finish(handle, backend_id)
