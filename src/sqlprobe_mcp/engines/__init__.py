"""Engine name resolution."""

from __future__ import annotations

from .registry import (
    ENGINE_MAP,
    EngineMapping,
    find_engine,
    known_engines,
    resolve_engine,
    supported_engines,
)

__all__ = [
    "ENGINE_MAP",
    "EngineMapping",
    "find_engine",
    "known_engines",
    "resolve_engine",
    "supported_engines",
]
