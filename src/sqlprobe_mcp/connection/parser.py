"""Parser for semicolon-delimited ``key=value`` connection strings.

Recognized keys (case-insensitive): ``server``, ``port``, ``pwd``,
``database``, ``uid`` and ``connecttimeout``. Whitespace around a key is
ignored; the value is everything after the first ``=`` and is kept verbatim.

Parsing is strict: all tokens are validated before any value is stored, and a
single token with an unknown key (or without ``=``) rejects the whole string.
Empty tokens are skipped and the last occurrence of a key wins.
"""

from __future__ import annotations

import re
from typing import Final

from fastmcp.utilities.logging import get_logger

from sqlprobe_mcp.connection.params import DEFAULT_CONNECT_TIMEOUT, ConnectionParameters
from sqlprobe_mcp.exceptions import MalformedConnectionString
from sqlprobe_mcp.security import SecretBuffer

_logger = get_logger(__name__)

TOKEN_SEPARATOR: Final[str] = ";"

# connection-string key -> ConnectionParameters attribute
KEY_ALIASES: Final[dict[str, str]] = {
    "server": "host",
    "port": "port",
    "pwd": "password",
    "database": "database",
    "uid": "user",
    "connecttimeout": "connect_timeout",
}

MAX_CONNECT_TIMEOUT: Final[int] = 2**31 - 1

_INT_PREFIX: Final[re.Pattern[str]] = re.compile(r"\s*[+-]?\d+")


def parse_timeout(text: str, default: int = DEFAULT_CONNECT_TIMEOUT) -> int:
    """Parse a timeout the way ``strtol`` reads a base-10 prefix.

    Falls back to `default` when no digits are found or the value is outside
    ``0..MAX_CONNECT_TIMEOUT``; never raises.
    """
    match = _INT_PREFIX.match(text)
    if match is None:
        _logger.debug("connecttimeout has no digits, using default %d", default)
        return default
    value = int(match.group())
    if not 0 <= value <= MAX_CONNECT_TIMEOUT:
        _logger.debug("connecttimeout out of range, using default %d", default)
        return default
    return value


def _split_token(index: int, token: str) -> tuple[str, str]:
    key, sep, value = token.partition("=")
    if not sep:
        # Report the position only; the token itself may be a secret.
        raise MalformedConnectionString(f"token #{index}", "missing '=' in")
    key = key.strip().lower()
    if key not in KEY_ALIASES:
        raise MalformedConnectionString(key)
    return key, value


def _validate_tokens(raw: str) -> list[tuple[str, str]]:
    """Check every token up front and return the ``(key, value)`` pairs."""
    pairs: list[tuple[str, str]] = []
    for index, token in enumerate(raw.split(TOKEN_SEPARATOR)):
        if not token.strip():
            continue
        pairs.append(_split_token(index, token))
    return pairs


def parse_connection_string(
    raw: str, *, default_timeout: int = DEFAULT_CONNECT_TIMEOUT
) -> ConnectionParameters:
    """Parse `raw` into a fresh `ConnectionParameters`.

    Args:
        raw: Connection string such as ``"Server=db;Port=5432;Uid=app;Pwd=..."``
        default_timeout: Timeout used when ``connecttimeout`` is absent or invalid

    Returns:
        Populated parameters; the caller owns them and must `clear()` them

    Raises:
        MalformedConnectionString: If any token has an unrecognized key
    """
    pairs = _validate_tokens(raw)

    params = ConnectionParameters(connect_timeout=default_timeout)
    for key, value in pairs:
        attr = KEY_ALIASES[key]
        if attr == "connect_timeout":
            params.connect_timeout = parse_timeout(value, default_timeout)
            continue
        previous: SecretBuffer | None = getattr(params, attr)
        if previous is not None:
            previous.scrub()
        setattr(params, attr, SecretBuffer(value))
    return params
