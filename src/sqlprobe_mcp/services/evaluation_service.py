"""Evaluation of a single SQL probe request.

`EvaluationService.evaluate` sequences the whole call: parse the connection
string, resolve the engine, execute the query, coerce every row and build the
`OutputItem`. Secrets (connection string, query text, version and the parsed
connection parameters) live in `SecretBuffer`s that are scrubbed on every
exit path, successful or not.
"""

from __future__ import annotations

from collections.abc import Mapping
from contextlib import closing
import time
from typing import Final

from fastmcp.utilities.logging import get_logger

from sqlprobe_mcp.connection import parse_connection_string
from sqlprobe_mcp.engines import resolve_engine
from sqlprobe_mcp.exceptions import EvaluationError, InputError
from sqlprobe_mcp.execute.coercion import coerce_row
from sqlprobe_mcp.execute.driver import BackendDriver
from sqlprobe_mcp.execute.executor import execute_query, preview_sql
from sqlprobe_mcp.models import OutputItem, QueryRequest, ResultRecord
from sqlprobe_mcp.security import SecretBuffer
from sqlprobe_mcp.services.config_service import ConfigService

_logger = get_logger(__name__)

REQUIRED_FIELDS: Final[tuple[str, ...]] = ("engine", "version", "connection_string", "sql")


def build_request(data: Mapping[str, object]) -> QueryRequest:
    """Validate raw request entities into a `QueryRequest`.

    Raises:
        InputError: If a required field is missing, None or not a string
    """
    for name in REQUIRED_FIELDS:
        if not isinstance(data.get(name), str):
            raise InputError(name)
    return QueryRequest(**{name: data[name] for name in REQUIRED_FIELDS})


class EvaluationService:
    """Evaluates SQL probe requests against a backend driver."""

    def __init__(
        self, driver: BackendDriver | None = None, *, default_timeout: int | None = None
    ) -> None:
        self._driver = driver or ConfigService.create_backend_driver()
        self._default_timeout = (
            default_timeout if default_timeout is not None else ConfigService.default_connect_timeout()
        )

    def evaluate(self, request: QueryRequest | Mapping[str, object]) -> OutputItem:
        """Evaluate one request and return its output item.

        Raises:
            EvaluationError: Any fatal failure; no partial output is returned
        """
        req = request if isinstance(request, QueryRequest) else build_request(request)
        _logger.info("evaluate: engine=%s", req.engine)
        _logger.debug("evaluate: sql=%s", preview_sql(req.sql))

        start = time.perf_counter()
        try:
            with (
                SecretBuffer(req.connection_string) as conn_buf,
                SecretBuffer(req.sql) as sql_buf,
                SecretBuffer(req.version),  # scrubbed with the others
            ):
                records = self._run(req.engine, conn_buf, sql_buf)
        except EvaluationError as exc:
            _logger.error("evaluate failed [%s]: %s", exc.kind, exc)
            raise

        _logger.info(
            "evaluate: finished (elapsed_ms=%.1f, records=%d)",
            (time.perf_counter() - start) * 1000.0,
            len(records),
        )
        return OutputItem(
            engine=req.engine,
            version=req.version,
            sql=req.sql,
            connection_string=req.connection_string,
            results=records,
        )

    def _run(self, engine: str, conn_buf: SecretBuffer, sql_buf: SecretBuffer) -> list[ResultRecord]:
        with parse_connection_string(
            conn_buf.reveal(), default_timeout=self._default_timeout
        ) as params:
            backend_id = resolve_engine(engine)
            with closing(
                execute_query(self._driver, backend_id, params, sql_buf.reveal())
            ) as rows:
                return [coerce_row(row) for row in rows]
