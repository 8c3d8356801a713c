"""FastMCP server implementation for sqlprobe-mcp."""

from __future__ import annotations

import dotenv
from fastmcp import FastMCP
from fastmcp.utilities.logging import get_logger
from starlette.requests import Request
from starlette.responses import JSONResponse

from sqlprobe_mcp.mcp_tools import register_evaluate_sql_tool

# Load environment variables
dotenv.load_dotenv()

# Configure a module-level logger for local server logs.
_logger = get_logger(__name__)

mcp = FastMCP(
    instructions=(
        "This server evaluates a SQL query against a relational database described "
        "by an engine name and a connection string, and returns the rows as typed records."
    ),
)

# -- Tool Registration -------------------------------------------------------
register_evaluate_sql_tool(mcp)


# -- Health Check ----------------------------------------------------------
@mcp.custom_route("/health", methods=["GET"])
async def health_check(_request: Request) -> JSONResponse:
    return JSONResponse({"status": "healthy", "service": "mcp-server"})
