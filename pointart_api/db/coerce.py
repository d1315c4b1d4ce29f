"""
Python-side conversion of incoming values (JSON strings from requests and
backup files) to what a table column stores.

Bad values raise ValueError here, so callers can reject a record before any
statement reaches the database.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, List, Tuple

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, Numeric
from sqlalchemy.dialects.postgresql import UUID

from pointart_api.db.base import Base
from pointart_api.db.client import Record

# Registers every model table on Base.metadata.
from pointart_api.db import models as _models  # noqa: F401


def _temporal(column_type: Any, value: str) -> Any:
    text_value = value.replace("Z", "+00:00")
    if isinstance(column_type, DateTime):
        return datetime.fromisoformat(text_value)
    return date.fromisoformat(text_value[:10])


# PUBLIC_INTERFACE
def coerce_value(column: Column, value: Any) -> Any:
    """Return `value` in the column's Python type; ValueError when it cannot be one."""
    if value is None:
        return None
    column_type = column.type
    if isinstance(column_type, (DateTime, Date)):
        if isinstance(value, str):
            return _temporal(column_type, value)
        if isinstance(value, (date, datetime)):
            return value
        raise ValueError(f"{column.name}: expected a date, got {value!r}")
    if isinstance(column_type, UUID):
        return str(uuid.UUID(str(value)))
    if isinstance(column_type, Boolean):
        if isinstance(value, bool):
            return value
        raise ValueError(f"{column.name}: expected true or false, got {value!r}")
    if isinstance(column_type, Integer):
        if isinstance(value, bool):
            raise ValueError(f"{column.name}: expected a whole number, got {value!r}")
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(f"{column.name}: expected a whole number, got {value!r}")
        return int(value)
    if isinstance(column_type, Numeric):
        if isinstance(value, bool):
            raise ValueError(f"{column.name}: expected a number, got {value!r}")
        if isinstance(value, (int, float, Decimal)):
            return value
        try:
            return float(Decimal(str(value)))
        except InvalidOperation:
            raise ValueError(f"{column.name}: expected a number, got {value!r}") from None
    return value


def _required(column: Column) -> bool:
    return not column.nullable and column.server_default is None and column.default is None


# PUBLIC_INTERFACE
def coerce_record(table_name: str, record: Any) -> Tuple[Record, List[str]]:
    """
    Keep the record's known columns, converted; return it with a list of problems.

    Unknown keys are dropped silently. Missing or null required columns and
    unconvertible values are reported, one message per column.
    """
    if not isinstance(record, dict):
        return {}, ["record is not an object"]
    table = Base.metadata.tables[table_name]
    clean: Record = {}
    problems: List[str] = []
    for column in table.columns:
        if column.name not in record:
            if _required(column):
                problems.append(f"{column.name}: missing")
            continue
        value = record[column.name]
        if value is None and _required(column):
            problems.append(f"{column.name}: must not be null")
            continue
        try:
            clean[column.name] = coerce_value(column, value)
        except (TypeError, ValueError) as exc:
            problems.append(str(exc) if str(exc).startswith(column.name) else f"{column.name}: {exc}")
    return clean, problems
