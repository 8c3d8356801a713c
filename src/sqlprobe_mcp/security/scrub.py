"""Secret buffers that are overwritten with random bytes before release.

Python strings are immutable and cannot be wiped in place, so every secret
that this package owns (passwords, connection strings, query text) is copied
into a `bytearray` as early as possible and handed around as a `SecretBuffer`.
Calling `scrub()` overwrites the backing memory with random bytes and then
empties it.
"""

from __future__ import annotations

import secrets
from types import TracebackType


class SecretBuffer:
    """Mutable, scrub-on-release holder for a single secret value."""

    __slots__ = ("_buf", "_scrubbed")

    def __init__(self, value: str | bytes | bytearray) -> None:
        if isinstance(value, str):
            self._buf = bytearray(value.encode("utf-8", "surrogatepass"))
        else:
            self._buf = bytearray(value)
        self._scrubbed = False

    def reveal(self) -> str:
        """Return the secret as text for handing to a driver.

        Raises:
            ValueError: If the buffer has already been scrubbed
        """
        if self._scrubbed:
            msg = "secret buffer already scrubbed"
            raise ValueError(msg)
        return self._buf.decode("utf-8", "surrogatepass")

    def scrub(self) -> None:
        """Overwrite the backing memory with random bytes, then release it."""
        if self._scrubbed:
            return
        size = len(self._buf)
        if size:
            self._buf[:] = secrets.token_bytes(size)
        del self._buf[:]
        self._scrubbed = True

    @property
    def scrubbed(self) -> bool:
        return self._scrubbed

    def __len__(self) -> int:
        return len(self._buf)

    def __bool__(self) -> bool:
        return not self._scrubbed

    def __repr__(self) -> str:
        state = "scrubbed" if self._scrubbed else f"{len(self._buf)} bytes"
        return f"SecretBuffer(<{state}>)"

    __str__ = __repr__

    def __enter__(self) -> SecretBuffer:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.scrub()


def scrub_all(*buffers: SecretBuffer | None) -> None:
    """Scrub every buffer given, skipping `None` entries."""
    for buf in buffers:
        if buf is not None:
            buf.scrub()
