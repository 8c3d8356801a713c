"""sqlprobe-mcp package for evaluating SQL probes.

Evaluates a query described by an engine name, a version, a semicolon-delimited
connection string and SQL text, and returns the rows as typed records. Exposed
as a Model Context Protocol (FastMCP) tool.
"""

from sqlprobe_mcp.models import (
    EvaluationResult,
    FieldType,
    OutputItem,
    QueryRequest,
    ResultField,
    ResultRecord,
)
from sqlprobe_mcp.services import ConfigService, EvaluationService

__all__ = [  # noqa: RUF022
    # Core models
    "EvaluationResult",
    "FieldType",
    "OutputItem",
    "QueryRequest",
    "ResultField",
    "ResultRecord",
    # Services
    "ConfigService",
    "EvaluationService",
]
