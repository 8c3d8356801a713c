"""Custom exception hierarchy for SQL probe evaluation.

Every fatal failure of an evaluation call is raised as a subclass of
`EvaluationError`. The `kind` class attribute is a stable, machine-readable
tag that the transport layer reports back to the caller, so that e.g. a bind
failure can be told apart from a connection or query failure.

Exception Categories:
- Input errors for missing request fields and malformed connection strings
- Engine errors for unknown and recognized-but-unsupported engines
- Backend errors for connection, bind, query and close failures

Messages carry diagnostic context (engine, host:port, query text) and never
include passwords.
"""

from __future__ import annotations


class EvaluationError(Exception):
    """Base exception for a failed evaluation call."""

    kind: str = "evaluation_error"


class InputError(EvaluationError):
    """Raised when a required request field is missing or not a string."""

    kind = "input_error"

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Missing entity or value: {field}")


class MalformedConnectionString(EvaluationError):
    """Raised when a connection string token cannot be matched to a known key.

    Only the offending key is reported; token values may contain secrets.
    """

    kind = "malformed_connection_string"

    def __init__(self, key: str, reason: str = "unrecognized key") -> None:
        self.key = key
        super().__init__(f"Malformed connection string: {reason} {key!r}")


class UnknownEngine(EvaluationError):
    """Raised when the engine name is not present in the engine table."""

    kind = "unknown_engine"

    def __init__(self, engine: str) -> None:
        self.engine = engine
        super().__init__(f"DB engine not found: {engine}")


class UnsupportedEngine(EvaluationError):
    """Raised when the engine is recognized but has no backend driver."""

    kind = "unsupported_engine"

    def __init__(self, engine: str) -> None:
        self.engine = engine
        super().__init__(f"DB engine not supported: {engine}")


class BackendError(EvaluationError):
    """Base for failures reported by the backend driver."""

    kind = "backend_error"


class ConnectionInitError(BackendError):
    """Raised when the backend cannot be initialized for host:port."""

    kind = "connection_init_error"

    def __init__(self, backend: str, host: str | None, port: str | None, detail: str = "") -> None:
        self.backend = backend
        self.address = f"{host or ''}:{port or ''}"
        msg = f"Backend init failed: e={backend}, h={self.address}"
        super().__init__(f"{msg} ({detail})" if detail else msg)


class BindError(BackendError):
    """Raised when credentials cannot be bound to an initialized connection."""

    kind = "bind_error"

    def __init__(self, database: str | None, user: str | None, detail: str = "") -> None:
        self.database = database
        self.user = user
        msg = f"Backend bind failed: db={database}, u={user}"
        super().__init__(f"{msg} ({detail})" if detail else msg)


class QueryError(BackendError):
    """Raised when query submission or result iteration fails."""

    kind = "query_error"

    def __init__(self, sql: str, detail: str = "") -> None:
        self.sql = sql
        msg = f"Backend query failed: q={sql}"
        super().__init__(f"{msg} ({detail})" if detail else msg)


class ConnectionCloseError(BackendError):
    """Signals a failed connection close.

    Never propagated out of the executor; it is logged and the collected
    results are kept.
    """

    kind = "connection_close_error"

    def __init__(self, backend: str, detail: str = "") -> None:
        self.backend = backend
        msg = f"Backend finish failed: e={backend}"
        super().__init__(f"{msg} ({detail})" if detail else msg)
