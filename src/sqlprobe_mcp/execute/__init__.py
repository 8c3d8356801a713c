"""Query execution and result coercion.

Exports the backend driver boundary, the executor and the row coercer.
"""

from __future__ import annotations

from .coercion import coerce_row
from .driver import BackendDriver, BackendType, ColumnValue, DriverError, SqlAlchemyDriver
from .executor import execute_query

__all__ = [
    "BackendDriver",
    "BackendType",
    "ColumnValue",
    "DriverError",
    "SqlAlchemyDriver",
    "coerce_row",
    "execute_query",
]
