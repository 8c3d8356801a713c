"""Static engine table mapping abstract engine names to backend drivers.

The table is a closed set sorted by engine name and searched with `bisect`.
Entries whose backend is None are recognized engines without a driver; they
raise `UnsupportedEngine` rather than `UnknownEngine`.
"""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass
from typing import Final

from sqlprobe_mcp.exceptions import UnknownEngine, UnsupportedEngine


@dataclass(frozen=True, slots=True)
class EngineMapping:
    """One engine table row."""

    object_engine: str
    backend_engine: str | None


ENGINE_MAP: Final[tuple[EngineMapping, ...]] = (
    EngineMapping("access", None),
    EngineMapping("cache", None),
    EngineMapping("db2", None),
    EngineMapping("firebird", "firebird"),
    EngineMapping("firstsql", None),
    EngineMapping("foxpro", None),
    EngineMapping("informix", None),
    EngineMapping("ingres", None),
    EngineMapping("interbase", None),
    EngineMapping("lightbase", None),
    EngineMapping("maxdb", None),
    EngineMapping("mimer", None),
    EngineMapping("monetdb", None),
    EngineMapping("mssql", "mssql"),
    EngineMapping("mysql", "mysql"),
    EngineMapping("oracle", "oracle"),
    EngineMapping("paradox", None),
    EngineMapping("pervasive", None),
    EngineMapping("postgre", "pgsql"),
    EngineMapping("sqlbase", None),
    EngineMapping("sqlite", "sqlite"),
    EngineMapping("sqlite3", "sqlite3"),
    EngineMapping("sqlserver", None),
    EngineMapping("sybase", "sybase"),
)

_ENGINE_KEYS: Final[tuple[str, ...]] = tuple(m.object_engine for m in ENGINE_MAP)


def find_engine(name: str) -> EngineMapping | None:
    """Binary-search the engine table; case-sensitive exact match."""
    idx = bisect_left(_ENGINE_KEYS, name)
    if idx < len(_ENGINE_KEYS) and _ENGINE_KEYS[idx] == name:
        return ENGINE_MAP[idx]
    return None


def resolve_engine(name: str) -> str:
    """Return the backend id for engine `name`.

    Raises:
        UnknownEngine: If `name` is not in the table
        UnsupportedEngine: If `name` is known but has no backend
    """
    mapping = find_engine(name)
    if mapping is None:
        raise UnknownEngine(name)
    if mapping.backend_engine is None:
        raise UnsupportedEngine(name)
    return mapping.backend_engine


def known_engines() -> list[str]:
    return list(_ENGINE_KEYS)


def supported_engines() -> list[str]:
    return [m.object_engine for m in ENGINE_MAP if m.backend_engine is not None]
