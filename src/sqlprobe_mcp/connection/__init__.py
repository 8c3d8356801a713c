"""Connection-string parsing and connection parameters."""

from __future__ import annotations

from .params import DEFAULT_CONNECT_TIMEOUT, ConnectionParameters
from .parser import KEY_ALIASES, parse_connection_string, parse_timeout

__all__ = [
    "DEFAULT_CONNECT_TIMEOUT",
    "KEY_ALIASES",
    "ConnectionParameters",
    "parse_connection_string",
    "parse_timeout",
]
