from __future__ import annotations

from pathlib import Path

import pytest
import sqlalchemy as sa
from sqlalchemy import text

from sqlprobe_mcp.connection import ConnectionParameters
from sqlprobe_mcp.exceptions import (
    BindError,
    ConnectionInitError,
    InputError,
    MalformedConnectionString,
    QueryError,
    UnknownEngine,
    UnsupportedEngine,
)
from sqlprobe_mcp.execute import driver as driver_module
from sqlprobe_mcp.execute.driver import BackendType, SqlAlchemyDriver
from sqlprobe_mcp.mcp_tools import run_evaluation
from sqlprobe_mcp.models import FieldType, QueryRequest
from sqlprobe_mcp.services import evaluation_service
from sqlprobe_mcp.services.evaluation_service import EvaluationService, build_request


@pytest.fixture
def captured_params(monkeypatch: pytest.MonkeyPatch) -> list[ConnectionParameters]:
    """Record every ConnectionParameters the service creates."""
    created: list[ConnectionParameters] = []
    real_parse = evaluation_service.parse_connection_string

    def spy(raw: str, **kwargs: int) -> ConnectionParameters:
        params = real_parse(raw, **kwargs)
        created.append(params)
        return params

    monkeypatch.setattr(evaluation_service, "parse_connection_string", spy)
    return created


def _request(**overrides: str) -> QueryRequest:
    data = {
        "engine": "sqlite",
        "version": "3",
        "connection_string": "Database=/tmp/x.db",
        "sql": "SELECT 1 AS n",
    }
    data.update(overrides)
    return QueryRequest(**data)


def _assert_cleared(params: ConnectionParameters) -> None:
    assert params.host is None
    assert params.port is None
    assert params.user is None
    assert params.password is None
    assert params.database is None


def test_single_integer_row(fake_driver, fake_result_set, captured_params) -> None:
    driver = fake_driver([fake_result_set([("n", BackendType.INTEGER)], [["1"]])])
    item = EvaluationService(driver, default_timeout=30).evaluate(_request())

    assert item.engine == "sqlite"
    assert item.version == "3"
    assert item.sql == "SELECT 1 AS n"
    assert item.connection_string == "Database=/tmp/x.db"
    assert len(item.results) == 1
    (field,) = item.results[0].fields
    assert (field.name, field.type, field.value) == ("n", FieldType.INTEGER, 1)

    assert driver.init_args == ("sqlite", None, None, 30)
    assert driver.handle.bound == ("/tmp/x.db", None, None)
    _assert_cleared(captured_params[0])


def test_records_span_result_sets(fake_driver, fake_result_set) -> None:
    cols = [("id", BackendType.INTEGER), ("flag", BackendType.BOOLEAN), ("status", BackendType.VARCHAR)]
    driver = fake_driver(
        [
            fake_result_set(cols, [["42", "1", "ok"]]),
            fake_result_set(cols, [["43", "0", "late"]]),
        ]
    )
    item = EvaluationService(driver, default_timeout=30).evaluate(
        _request(engine="mssql", connection_string="server=h;port=1433;uid=u;pwd=p")
    )
    assert [[(f.name, f.value) for f in r.fields] for r in item.results] == [
        [("id", 42), ("status", "ok")],
        [("id", 43), ("status", "late")],
    ]


@pytest.mark.parametrize(
    ("overrides", "fail_on", "error"),
    [
        ({"connection_string": "server=h;bogus=1"}, None, MalformedConnectionString),
        ({"engine": "notreal"}, None, UnknownEngine),
        ({"engine": "access"}, None, UnsupportedEngine),
        ({}, "init", ConnectionInitError),
        ({}, "bind", BindError),
        ({}, "query", QueryError),
    ],
)
def test_failures_scrub_parameters(
    fake_driver, captured_params, overrides: dict[str, str], fail_on: str | None, error: type[Exception]
) -> None:
    driver = fake_driver(fail_on=fail_on)
    service = EvaluationService(driver, default_timeout=30)
    with pytest.raises(error):
        service.evaluate(_request(**{"connection_string": "server=h;pwd=secret", **overrides}))
    for params in captured_params:
        _assert_cleared(params)
    if fail_on in {"bind", "query"}:
        assert driver.handle.finished


def test_build_request_requires_every_field() -> None:
    data: dict[str, object] = {"engine": "sqlite", "version": "3", "connection_string": "", "sql": "x"}
    assert build_request(data).engine == "sqlite"
    for missing in ("engine", "version", "connection_string", "sql"):
        partial = {k: v for k, v in data.items() if k != missing}
        with pytest.raises(InputError, match=missing):
            build_request(partial)
    with pytest.raises(InputError):
        build_request({**data, "sql": None})


def test_evaluate_accepts_mapping(fake_driver) -> None:
    service = EvaluationService(fake_driver(), default_timeout=30)
    with pytest.raises(InputError):
        service.evaluate({"engine": "sqlite", "version": "3", "sql": "SELECT 1"})


def test_run_evaluation_reports_error_kind(fake_driver) -> None:
    service = EvaluationService(fake_driver(fail_on="bind"), default_timeout=30)
    result = run_evaluation(service, _request())
    assert result.status == "error"
    assert result.error_kind == "bind_error"
    assert result.item is None


def test_sql_text_stays_out_of_info_logs(fake_driver, fastmcp_caplog) -> None:
    sql = "SELECT 'hunter2-marker' AS n"
    EvaluationService(fake_driver(), default_timeout=30).evaluate(_request(sql=sql))
    assert "evaluate: engine=sqlite" in fastmcp_caplog.text
    assert "hunter2-marker" not in fastmcp_caplog.text


# ---- end to end through SQLAlchemy + SQLite ---------------------------------


def _make_db(path: Path) -> None:
    engine = sa.create_engine(f"sqlite+pysqlite:///{path}")
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE t(id INTEGER PRIMARY KEY, name TEXT, price REAL, data BLOB)"))
        conn.execute(
            text("INSERT INTO t(name, price, data) VALUES ('Alice', 1.5, x'00ff'), ('Bob', NULL, NULL)")
        )
    engine.dispose()


def test_sqlite_end_to_end(tmp_path: Path) -> None:
    db = tmp_path / "rows.db"
    _make_db(db)
    service = EvaluationService(SqlAlchemyDriver(), default_timeout=5)

    item = service.evaluate(
        _request(connection_string=f"Database={db}", sql="SELECT id, name, price, data FROM t ORDER BY id")
    )

    assert len(item.results) == 2
    first, second = item.results
    assert [(f.name, f.type, f.value) for f in first.fields] == [
        ("id", FieldType.INTEGER, 1),
        ("name", FieldType.STRING, "Alice"),
        ("price", FieldType.FLOAT, 1.5),
    ]
    assert [f.name for f in second.fields] == ["id", "name"]


def test_sqlite_select_literal(tmp_path: Path) -> None:
    db = tmp_path / "x.db"
    _make_db(db)
    item = EvaluationService(SqlAlchemyDriver(), default_timeout=5).evaluate(
        _request(engine="sqlite3", connection_string=f"Database={db}")
    )
    assert [[(f.name, f.value) for f in r.fields] for r in item.results] == [[("n", 1)]]


def test_sqlite_query_error(tmp_path: Path) -> None:
    db = tmp_path / "x.db"
    _make_db(db)
    with pytest.raises(QueryError):
        EvaluationService(SqlAlchemyDriver(), default_timeout=5).evaluate(
            _request(connection_string=f"Database={db}", sql="SELECT * FROM missing_table")
        )


def test_sqlite_bind_error(tmp_path: Path) -> None:
    missing = tmp_path / "no" / "such" / "dir" / "x.db"
    with pytest.raises(BindError):
        EvaluationService(SqlAlchemyDriver(), default_timeout=5).evaluate(
            _request(connection_string=f"Database={missing}")
        )


def test_rejected_connect_arguments_are_bind_errors(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    # sqlite3.connect() raises TypeError for an unexpected keyword, much like
    # DBAPIs that reject an out-of-range timeout with ValueError.
    monkeypatch.setitem(driver_module.TIMEOUT_CONNECT_ARGS, "sqlite", "no_such_option")
    service = EvaluationService(SqlAlchemyDriver(), default_timeout=5)
    request = _request(connection_string=f"Database={tmp_path / 'x.db'};connecttimeout=0")

    with pytest.raises(BindError):
        service.evaluate(request)

    result = run_evaluation(service, request)
    assert result.status == "error"
    assert result.error_kind == "bind_error"
