from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
import logging

import pytest

from sqlprobe_mcp.execute.driver import BackendType, DriverError


@dataclass
class FakeResultSet:
    columns: list[tuple[str, BackendType]]
    rows: list[list[str | None]]
    fail_after: int | None = None
    finished: bool = False
    _pos: int = -1

    def fetch_row(self) -> bool:
        if self.fail_after is not None and self._pos + 1 >= self.fail_after:
            raise DriverError("connection lost while fetching")
        self._pos += 1
        return self._pos < len(self.rows)

    def column_count(self) -> int:
        return len(self.columns)

    def column_name(self, index: int) -> str:
        return self.columns[index][0]

    def column_type(self, index: int) -> BackendType:
        return self.columns[index][1]

    def field_value(self, index: int) -> str | None:
        return self.rows[self._pos][index]

    def finish(self) -> None:
        self.finished = True


@dataclass
class FakeHandle:
    result_sets: list[FakeResultSet]
    fail_on: str | None = None
    finish_fails: bool = False
    bound: tuple[str | None, str | None, str | None] | None = None
    queried: str | None = None
    finished: bool = False
    requested: int = 0

    def bind(self, database: str | None, user: str | None, password: str | None) -> None:
        if self.fail_on == "bind":
            raise DriverError("access denied")
        self.bound = (database, user, password)

    def query(self, sql: str) -> None:
        if self.fail_on == "query":
            raise DriverError("syntax error")
        self.queried = sql

    def next_result(self) -> FakeResultSet | None:
        if self.requested > 0 and not self.result_sets[self.requested - 1].finished:
            raise AssertionError("previous result-set was not finished")
        if self.requested >= len(self.result_sets):
            return None
        self.requested += 1
        return self.result_sets[self.requested - 1]

    def finish(self) -> None:
        self.finished = True
        if self.finish_fails:
            raise DriverError("close failed")


@dataclass
class FakeDriver:
    result_sets: list[FakeResultSet] = field(default_factory=list)
    fail_on: str | None = None
    finish_fails: bool = False
    init_args: tuple[str, str | None, str | None, int] | None = None
    handle: FakeHandle | None = None

    def init(
        self, backend_id: str, host: str | None, port: str | None, connect_timeout: int
    ) -> FakeHandle:
        self.init_args = (backend_id, host, port, connect_timeout)
        if self.fail_on == "init":
            raise DriverError("backend module not loaded")
        self.handle = FakeHandle(self.result_sets, self.fail_on, self.finish_fails)
        return self.handle


@pytest.fixture
def fake_driver() -> type[FakeDriver]:
    return FakeDriver


@pytest.fixture
def fake_result_set() -> type[FakeResultSet]:
    return FakeResultSet


@pytest.fixture
def fastmcp_caplog(caplog: pytest.LogCaptureFixture) -> Iterator[pytest.LogCaptureFixture]:
    """caplog attached to the fastmcp logger tree, which may not propagate to root."""
    logger = logging.getLogger("fastmcp")
    logger.addHandler(caplog.handler)
    caplog.set_level(logging.INFO, logger="fastmcp")
    yield caplog
    logger.removeHandler(caplog.handler)
