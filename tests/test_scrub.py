from __future__ import annotations

import pytest

from sqlprobe_mcp.connection import ConnectionParameters
from sqlprobe_mcp.security import SecretBuffer, scrub_all


def test_reveal_and_repr_masks_secret() -> None:
    buf = SecretBuffer("hunter2")
    assert buf.reveal() == "hunter2"
    assert len(buf) == 7
    assert "hunter2" not in repr(buf)
    assert "hunter2" not in str(buf)


def test_scrub_overwrites_with_random_bytes(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[int] = []

    def fake_token_bytes(n: int) -> bytes:
        calls.append(n)
        return b"\xaa" * n

    monkeypatch.setattr("sqlprobe_mcp.security.scrub.secrets.token_bytes", fake_token_bytes)
    buf = SecretBuffer("s3cret")
    buf.scrub()
    assert calls == [6]
    assert buf.scrubbed
    assert len(buf) == 0
    with pytest.raises(ValueError, match="scrubbed"):
        buf.reveal()


def test_scrub_is_idempotent_and_context_managed() -> None:
    with SecretBuffer(b"abc") as buf:
        assert buf.reveal() == "abc"
    assert buf.scrubbed
    buf.scrub()
    assert not buf


def test_scrub_all_skips_none() -> None:
    a, b = SecretBuffer("a"), SecretBuffer("")
    scrub_all(a, None, b)
    assert a.scrubbed and b.scrubbed


def test_connection_parameters_clear() -> None:
    pwd = SecretBuffer("pw")
    params = ConnectionParameters(host=SecretBuffer("db"), password=pwd)
    with params:
        assert params.reveal("host") == "db"
        assert params.reveal("user") is None
    assert pwd.scrubbed
    assert params.host is None and params.password is None
    assert params.connect_timeout == 30
