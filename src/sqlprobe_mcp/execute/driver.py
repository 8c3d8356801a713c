"""Backend driver boundary and its SQLAlchemy implementation.

The executor talks to databases only through the small `BackendDriver`
contract defined here:

- ``init(backend_id, host, port, connect_timeout)`` returns a handle
- ``handle.bind(database, user, password)`` authenticates (simple mode)
- ``handle.query(sql)`` submits the statement text verbatim
- ``handle.next_result()`` yields result-sets until None
- ``result.fetch_row()`` advances to the next row; per-row accessors are
  ``column_count``, ``column_name``, ``column_type`` and ``field_value``
- ``handle.finish()`` closes and releases the connection

Field values cross the boundary as text, column types as `BackendType`.
Every failure is raised as `DriverError`; the executor translates it into
the evaluation error taxonomy.

`SqlAlchemyDriver` implements the contract on top of SQLAlchemy Core. Queries
run on a raw DBAPI cursor so that multiple result-sets can be walked with
``cursor.nextset()``.
"""

from __future__ import annotations

from collections.abc import Mapping
import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Any, Final, NamedTuple, Protocol

from fastmcp.utilities.logging import get_logger
import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

_logger = get_logger(__name__)


class BackendType(Enum):
    """Column types as reported by a backend."""

    BOOLEAN = "boolean"
    INTEGER = "integer"
    SMALLINT = "smallint"
    REAL = "real"
    DOUBLE = "double"
    FLOAT = "float"
    CHAR = "char"
    NCHAR = "nchar"
    VARCHAR = "varchar"
    TIMESTAMP = "timestamp"
    BINARY = "binary"
    UNKNOWN = "unknown"


class ColumnValue(NamedTuple):
    """One column of a fetched row as seen through the driver boundary."""

    name: str
    type: BackendType
    value: str | None


class DriverError(Exception):
    """Raised by driver implementations for any backend failure."""


class BackendResultSet(Protocol):
    def fetch_row(self) -> bool: ...
    def column_count(self) -> int: ...
    def column_name(self, index: int) -> str: ...
    def column_type(self, index: int) -> BackendType: ...
    def field_value(self, index: int) -> str | None: ...
    def finish(self) -> None: ...


class BackendHandle(Protocol):
    def bind(self, database: str | None, user: str | None, password: str | None) -> None: ...
    def query(self, sql: str) -> None: ...
    def next_result(self) -> BackendResultSet | None: ...
    def finish(self) -> None: ...


class BackendDriver(Protocol):
    def init(
        self, backend_id: str, host: str | None, port: str | None, connect_timeout: int
    ) -> BackendHandle: ...


# ---- SQLAlchemy implementation ---------------------------------------------

# backend id -> SQLAlchemy drivername
BACKEND_DRIVERNAMES: Final[dict[str, str]] = {
    "firebird": "firebird",
    "mssql": "mssql+pymssql",
    "mysql": "mysql+pymysql",
    "oracle": "oracle+oracledb",
    "pgsql": "postgresql+psycopg2",
    "sqlite": "sqlite+pysqlite",
    "sqlite3": "sqlite+pysqlite",
    "sybase": "sybase+pyodbc",
}

# SQLAlchemy dialect name -> DBAPI connect() keyword carrying the timeout
TIMEOUT_CONNECT_ARGS: Final[dict[str, str]] = {
    "mssql": "login_timeout",
    "mysql": "connect_timeout",
    "oracle": "tcp_connect_timeout",
    "postgresql": "connect_timeout",
    "sqlite": "timeout",
}


def classify_value(value: object) -> BackendType:
    """Derive a backend column type from a DBAPI value."""
    if value is None:
        return BackendType.UNKNOWN
    if isinstance(value, bool):
        return BackendType.BOOLEAN
    if isinstance(value, int):
        return BackendType.INTEGER
    if isinstance(value, Decimal):
        exponent = value.as_tuple().exponent
        if isinstance(exponent, int) and exponent >= 0:
            return BackendType.INTEGER
        return BackendType.DOUBLE
    if isinstance(value, float):
        return BackendType.DOUBLE
    if isinstance(value, str):
        return BackendType.VARCHAR
    if isinstance(value, dt.date | dt.time):
        return BackendType.TIMESTAMP
    if isinstance(value, bytes | bytearray | memoryview):
        return BackendType.BINARY
    return BackendType.UNKNOWN


def render_value(value: object) -> str | None:
    """Render a DBAPI value as the text a native driver would hand back."""
    if value is None:
        return None
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, dt.date | dt.time):
        return value.isoformat()
    if isinstance(value, bytes | bytearray | memoryview):
        return bytes(value).hex()
    return str(value)


class SqlAlchemyResultSet:
    """Row cursor over one DBAPI result-set."""

    def __init__(self, cursor: Any, dbapi_error: type[Exception]) -> None:
        self._cursor = cursor
        self._dbapi_error = dbapi_error
        self._names: list[str] = [str(d[0]) for d in cursor.description]
        self._row: tuple[Any, ...] | None = None

    def fetch_row(self) -> bool:
        try:
            row = self._cursor.fetchone()
        except self._dbapi_error as exc:
            raise DriverError(str(exc)) from exc
        self._row = tuple(row) if row is not None else None
        return self._row is not None

    def column_count(self) -> int:
        return len(self._names)

    def column_name(self, index: int) -> str:
        return self._names[index]

    def column_type(self, index: int) -> BackendType:
        return classify_value(self._current()[index])

    def field_value(self, index: int) -> str | None:
        return render_value(self._current()[index])

    def finish(self) -> None:
        self._row = None

    def _current(self) -> tuple[Any, ...]:
        if self._row is None:
            msg = "no current row; call fetch_row() first"
            raise DriverError(msg)
        return self._row


class SqlAlchemyHandle:
    """A single, unpooled SQLAlchemy connection."""

    def __init__(self, url: sa.URL, connect_timeout: int) -> None:
        self._url = url
        self._connect_timeout = connect_timeout
        self._engine: sa.Engine | None = None
        self._conn: sa.Connection | None = None
        self._cursor: Any = None
        self._dbapi: Any = None
        self._dbapi_error: type[Exception] = Exception
        self._started = False

    @property
    def url(self) -> sa.URL:
        return self._url

    def bind(self, database: str | None, user: str | None, password: str | None) -> None:
        url = self._url.set(database=database, username=user, password=password)
        connect_args: dict[str, object] = {}
        timeout_arg = TIMEOUT_CONNECT_ARGS.get(url.get_backend_name())
        if timeout_arg is not None:
            connect_args[timeout_arg] = self._connect_timeout
        try:
            self._engine = sa.create_engine(url, poolclass=NullPool, connect_args=connect_args)
            self._dbapi = self._engine.dialect.loaded_dbapi
            self._dbapi_error = self._dbapi.Error
            self._conn = self._engine.connect()
        except (SQLAlchemyError, ImportError, ValueError, TypeError) as exc:
            # DBAPIs validate connect arguments (e.g. timeout range) with plain errors.
            raise DriverError(str(exc)) from exc

    def query(self, sql: str) -> None:
        if self._conn is None:
            msg = "connection is not bound"
            raise DriverError(msg)
        try:
            self._cursor = self._conn.connection.cursor()
            self._cursor.execute(sql)
        except (self._dbapi_error, SQLAlchemyError) as exc:
            raise DriverError(str(exc)) from exc
        self._started = False

    def next_result(self) -> SqlAlchemyResultSet | None:
        if self._cursor is None:
            return None
        while True:
            if self._started and not self._advance():
                return None
            self._started = True
            if self._cursor.description is not None:
                return SqlAlchemyResultSet(self._cursor, self._dbapi_error)

    def _advance(self) -> bool:
        nextset = getattr(self._cursor, "nextset", None)
        if nextset is None:
            return False
        try:
            return bool(nextset())
        except self._dbapi.NotSupportedError:
            return False
        except self._dbapi_error as exc:
            raise DriverError(str(exc)) from exc

    def finish(self) -> None:
        close_error: Exception | None = None
        try:
            if self._cursor is not None:
                self._cursor.close()
            if self._conn is not None:
                self._conn.close()
        except (self._dbapi_error, SQLAlchemyError) as exc:
            close_error = exc
        finally:
            self._cursor = None
            self._conn = None

        engine, self._engine = self._engine, None
        if engine is not None:
            try:
                engine.dispose()
            except SQLAlchemyError as exc:
                if close_error is None:
                    close_error = exc
                else:
                    _logger.warning("Engine dispose failed after close error: %s", exc)

        if close_error is not None:
            raise DriverError(str(close_error)) from close_error


class SqlAlchemyDriver:
    """`BackendDriver` backed by SQLAlchemy dialects."""

    def __init__(
        self,
        drivernames: Mapping[str, str] | None = None,
        odbc_drivers: Mapping[str, str] | None = None,
    ) -> None:
        self._drivernames = dict(BACKEND_DRIVERNAMES)
        if drivernames:
            self._drivernames.update(drivernames)
        # backend id -> ODBC driver name, used by "+pyodbc" drivernames
        self._odbc_drivers = dict(odbc_drivers or {})

    def drivername(self, backend_id: str) -> str | None:
        return self._drivernames.get(backend_id)

    def init(
        self, backend_id: str, host: str | None, port: str | None, connect_timeout: int
    ) -> SqlAlchemyHandle:
        drivername = self._drivernames.get(backend_id)
        if drivername is None:
            msg = f"no SQLAlchemy driver configured for backend {backend_id!r}"
            raise DriverError(msg)
        try:
            port_num = int(port) if port else None
        except ValueError as exc:
            msg = f"invalid port {port!r}"
            raise DriverError(msg) from exc
        query: dict[str, str] = {}
        odbc_driver = self._odbc_drivers.get(backend_id)
        if odbc_driver and drivername.endswith("+pyodbc"):
            query["driver"] = odbc_driver
        url = sa.URL.create(drivername, host=host or None, port=port_num, query=query)
        try:
            # Loads the dialect class; fails for backends SQLAlchemy cannot serve.
            url.get_dialect()
        except (SQLAlchemyError, ImportError) as exc:
            raise DriverError(str(exc)) from exc
        _logger.debug("Initialized backend %s via %s", backend_id, drivername)
        return SqlAlchemyHandle(url, connect_timeout)
