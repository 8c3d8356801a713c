"""Pydantic models for evaluation requests and results.

`QueryRequest` is what the transport delivers; `OutputItem` is what an
evaluation produces: the echoed request attributes plus one `ResultRecord`
per fetched row, each holding named, typed `ResultField` entries.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class FieldType(Enum):
    """Abstract value types a result field can carry."""

    INTEGER = "int"
    FLOAT = "float"
    STRING = "string"
    UNREPRESENTABLE = "unrepresentable"  # never emitted


# -----------------------
# Request
# -----------------------


class QueryRequest(BaseModel):
    """A single SQL evaluation request."""

    engine: str = Field(description="Abstract engine name, e.g. 'mysql', 'postgre', 'sqlite'")
    version: str = Field(description="Engine version, echoed in the output")
    connection_string: str = Field(
        description="Semicolon-delimited key=value pairs: server, port, uid, pwd, database, connecttimeout"
    )
    sql: str = Field(description="Query text, passed to the backend verbatim")


# -----------------------
# Result
# -----------------------


class ResultField(BaseModel):
    """One named, typed value within a record."""

    name: str = Field(description="Column name as reported by the backend")
    type: FieldType = Field(description="Abstract value type")
    value: int | float | str = Field(description="Coerced column value")


class ResultRecord(BaseModel):
    """One fetched row; fields follow column order."""

    fields: list[ResultField] = Field(default_factory=list)


class OutputItem(BaseModel):
    """Result of one evaluation call."""

    engine: str
    version: str
    sql: str
    connection_string: str
    results: list[ResultRecord] = Field(
        default_factory=list, description="One record per row across all result-sets"
    )


class EvaluationResult(BaseModel):
    """Structured response from the evaluate_sql tool."""

    status: Literal["ok", "error"] = Field(default="ok", description="Overall status of the call")
    item: OutputItem | None = Field(default=None, description="Evaluation output when status is ok")
    error_kind: str | None = Field(
        default=None, description="Machine-readable failure kind when status is error"
    )
    error: str | None = Field(default=None, description="Diagnostic message; never contains passwords")
    elapsed_ms: float = Field(default=0.0, description="Wall-clock evaluation time")
    timestamp: str = Field(
        default_factory=lambda: datetime.now(UTC).isoformat(),
        description="UTC ISO8601 timestamp of completion",
    )
