"""Connection parameters produced by the connection-string parser."""

from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType
from typing import Final

from sqlprobe_mcp.security import SecretBuffer, scrub_all

DEFAULT_CONNECT_TIMEOUT: Final[int] = 30


@dataclass(slots=True)
class ConnectionParameters:
    """Discrete connection settings owned by a single evaluation call.

    Every text field is a `SecretBuffer`; `clear()` scrubs all of them and
    is safe to call more than once.
    """

    host: SecretBuffer | None = None
    port: SecretBuffer | None = None
    user: SecretBuffer | None = None
    password: SecretBuffer | None = None
    database: SecretBuffer | None = None
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT

    def reveal(self, name: str) -> str | None:
        """Return the text of field `name`, or None when it was not given."""
        buf: SecretBuffer | None = getattr(self, name)
        return buf.reveal() if buf is not None else None

    def clear(self) -> None:
        """Scrub and drop every secret field."""
        scrub_all(self.host, self.port, self.user, self.password, self.database)
        self.host = None
        self.port = None
        self.user = None
        self.password = None
        self.database = None

    def __enter__(self) -> ConnectionParameters:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.clear()
