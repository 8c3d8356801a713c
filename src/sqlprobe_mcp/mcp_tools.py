"""MCP tool registration for SQL probe evaluation (evaluate_sql).

Provides a single tool `evaluate_sql(engine, version, connection_string, sql)`
that evaluates the query and returns typed result records, or a structured
error carrying the failure kind.
"""

import asyncio
import time
from typing import Annotated

from fastmcp import Context, FastMCP
from fastmcp.utilities.logging import get_logger
from pydantic import Field

from sqlprobe_mcp.engines import supported_engines
from sqlprobe_mcp.exceptions import EvaluationError
from sqlprobe_mcp.models import EvaluationResult, QueryRequest
from sqlprobe_mcp.services.evaluation_service import EvaluationService

_logger = get_logger(__name__)


def run_evaluation(service: EvaluationService, request: QueryRequest) -> EvaluationResult:
    """Evaluate `request` and fold failures into an error result."""
    start = time.perf_counter()
    try:
        item = service.evaluate(request)
    except EvaluationError as exc:
        return EvaluationResult(
            status="error",
            error_kind=exc.kind,
            error=str(exc),
            elapsed_ms=(time.perf_counter() - start) * 1000.0,
        )
    return EvaluationResult(
        status="ok",
        item=item,
        elapsed_ms=(time.perf_counter() - start) * 1000.0,
    )


def register_evaluate_sql_tool(mcp: FastMCP, *, service: EvaluationService | None = None) -> None:
    """Register the SQL probe evaluation tool."""

    evaluation = service or EvaluationService()
    engines = ", ".join(supported_engines())

    @mcp.tool
    async def evaluate_sql(
        ctx: Context,
        engine: Annotated[str, Field(description=f"Database engine; supported: {engines}")],
        version: Annotated[str, Field(description="Engine version, echoed in the result")],
        connection_string: Annotated[
            str,
            Field(
                description=(
                    "Semicolon-delimited key=value pairs. Keys: server, port, uid, pwd, "
                    "database, connecttimeout. Unknown keys reject the whole string."
                )
            ),
        ],
        sql: Annotated[str, Field(description="Query text, executed verbatim")],
    ) -> EvaluationResult:  # pyright: ignore[reportUnusedFunction]
        """Run a query and return every row as a record of typed fields.

        Integer, float and string columns are returned; boolean, timestamp and
        other types are omitted from the records.
        """
        _logger.info("evaluate_sql: engine=%s", engine)
        request = QueryRequest(
            engine=engine, version=version, connection_string=connection_string, sql=sql
        )
        result = await asyncio.to_thread(run_evaluation, evaluation, request)
        if result.status == "error":
            await ctx.error(f"evaluate_sql failed [{result.error_kind}]: {result.error}")
        return result

    _ = evaluate_sql
