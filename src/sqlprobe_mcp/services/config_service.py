"""Configuration service for sqlprobe-mcp.

This module centralizes environment variable handling: the default connect
timeout used when a connection string does not set one, per-backend
SQLAlchemy drivername overrides and ODBC driver names for pyodbc backends.
"""

from __future__ import annotations

import os

from sqlprobe_mcp.connection import DEFAULT_CONNECT_TIMEOUT
from sqlprobe_mcp.execute.driver import SqlAlchemyDriver

DRIVER_ENV_PREFIX = "SQLPROBE_MCP_DRIVER_"
ODBC_DRIVER_ENV_PREFIX = "SQLPROBE_MCP_ODBC_DRIVER_"


def _prefixed_env(prefix: str) -> dict[str, str]:
    """Non-blank variables starting with `prefix`, keyed by lowercased suffix."""
    found: dict[str, str] = {}
    for name, value in os.environ.items():
        if name.startswith(prefix) and value.strip():
            found[name.removeprefix(prefix).lower()] = value.strip()
    return found


class ConfigService:
    """Service for managing configuration and backend drivers."""

    @staticmethod
    def default_connect_timeout() -> int:
        """Connect timeout in seconds applied when none is given."""
        val = os.getenv("SQLPROBE_MCP_CONNECT_TIMEOUT", str(DEFAULT_CONNECT_TIMEOUT))
        try:
            n = int(val)
        except ValueError:
            n = DEFAULT_CONNECT_TIMEOUT
        return max(1, n)

    @staticmethod
    def driver_overrides() -> dict[str, str]:
        """SQLAlchemy drivernames keyed by backend id.

        Read from ``SQLPROBE_MCP_DRIVER_<BACKEND>`` variables, e.g.
        ``SQLPROBE_MCP_DRIVER_PGSQL=postgresql+psycopg``.
        """
        return _prefixed_env(DRIVER_ENV_PREFIX)

    @staticmethod
    def odbc_drivers() -> dict[str, str]:
        """ODBC driver names keyed by backend id, for "+pyodbc" drivernames.

        Read from ``SQLPROBE_MCP_ODBC_DRIVER_<BACKEND>`` variables, e.g.
        ``SQLPROBE_MCP_ODBC_DRIVER_SYBASE=FreeTDS``.
        """
        return _prefixed_env(ODBC_DRIVER_ENV_PREFIX)

    @staticmethod
    def create_backend_driver() -> SqlAlchemyDriver:
        """Create the SQLAlchemy backend driver with configured overrides."""
        return SqlAlchemyDriver(ConfigService.driver_overrides(), ConfigService.odbc_drivers())
