"""Coercion of backend column values into typed result fields.

Integer and floating point columns are read like ``strtol``/``strtod`` read
a prefix: trailing garbage is ignored and a value with no usable prefix
becomes 0 with a logged diagnostic instead of an error. Boolean, timestamp
and unknown column types have no representation and are left out of the
record entirely.
"""

from __future__ import annotations

from collections.abc import Iterable
import re
from typing import Final

from fastmcp.utilities.logging import get_logger

from sqlprobe_mcp.execute.driver import BackendType, ColumnValue
from sqlprobe_mcp.models import FieldType, ResultField, ResultRecord

_logger = get_logger(__name__)

BACKEND_TO_FIELD_TYPE: Final[dict[BackendType, FieldType]] = {
    BackendType.INTEGER: FieldType.INTEGER,
    BackendType.SMALLINT: FieldType.INTEGER,
    BackendType.REAL: FieldType.FLOAT,
    BackendType.DOUBLE: FieldType.FLOAT,
    BackendType.FLOAT: FieldType.FLOAT,
    BackendType.CHAR: FieldType.STRING,
    BackendType.NCHAR: FieldType.STRING,
    BackendType.VARCHAR: FieldType.STRING,
}

_INT_PREFIX: Final[re.Pattern[str]] = re.compile(r"\s*[+-]?[0-9]+")
_FLOAT_PREFIX: Final[re.Pattern[str]] = re.compile(
    r"\s*[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)


def parse_int_prefix(text: str | None) -> int:
    """Parse a base-10 integer prefix; 0 with a diagnostic when none exists."""
    match = _INT_PREFIX.match(text or "")
    if match is None:
        _logger.warning("integer parse of %r failed, using 0", text)
        return 0
    return int(match.group())


def parse_float_prefix(text: str | None) -> float:
    """Parse a floating point prefix; 0.0 with a diagnostic when none exists."""
    match = _FLOAT_PREFIX.match(text or "")
    if match is None:
        _logger.warning("float parse of %r failed, using 0.0", text)
        return 0.0
    return float(match.group())


def field_type_for(backend_type: BackendType) -> FieldType:
    return BACKEND_TO_FIELD_TYPE.get(backend_type, FieldType.UNREPRESENTABLE)


def coerce_column(column: ColumnValue) -> ResultField | None:
    """Convert one column into a field, or None when it cannot be represented."""
    field_type = field_type_for(column.type)
    if field_type is FieldType.UNREPRESENTABLE or column.value is None:
        return None
    value: int | float | str
    if field_type is FieldType.INTEGER:
        value = parse_int_prefix(column.value)
    elif field_type is FieldType.FLOAT:
        value = parse_float_prefix(column.value)
    else:
        value = column.value
    return ResultField(name=column.name, type=field_type, value=value)


def coerce_row(columns: Iterable[ColumnValue]) -> ResultRecord:
    """Build a record from a row, keeping column order and dropping gaps."""
    fields: list[ResultField] = []
    for column in columns:
        field = coerce_column(column)
        if field is not None:
            fields.append(field)
    return ResultRecord(fields=fields)
