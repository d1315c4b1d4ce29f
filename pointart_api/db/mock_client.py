"""
In-memory stand-in for the PostgreSQL data client, for offline development
and tests (USE_MOCK_DB=true).

Tables are plain lists of dicts keyed by table name. Semantics:
  - insert assigns a generated `id` and `created_at` when absent;
  - update touches the first matching record only and refreshes `updated_at`;
  - delete removes every matching record and reports how many went;
  - adjust changes every matching record, skipping those that would fall below the floor;
  - a transaction restores a snapshot of the whole store when its block raises.

Nothing is durable and there is no locking.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timezone
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional
from uuid import UUID, uuid4

from pointart_api.db.client import DataClient, QueryResult, Record, TableQuery

logger = logging.getLogger(__name__)

DEFAULT_TABLES = (
    "stationery",
    "gift_store",
    "embroidery",
    "machines",
    "art_services",
    "product_categories",
    "stationery_sales",
    "gift_daily_sales",
    "customers",
    "invoices",
    "invoice_items",
    "users",
    "profiles",
    "auth_sessions",
    "notifications",
    "audit_log",
    "app_settings",
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _comparable(value: Any) -> Any:
    """Normalize values so dates, datetimes and ISO strings compare consistently."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    return value


def _like_to_regex(pattern: str) -> "re.Pattern[str]":
    parts = []
    escaped = False
    for ch in pattern:
        if escaped:
            parts.append(re.escape(ch))
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == "%":
            parts.append(".*")
        elif ch == "_":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    return re.compile("".join(parts), re.IGNORECASE | re.DOTALL)


def _test(op: str, actual: Any, expected: Any) -> bool:
    if op == "is":
        return actual is expected or actual == expected
    if op == "ilike":
        return actual is not None and _like_to_regex(expected).fullmatch(str(actual)) is not None
    if op == "in":
        return _comparable(actual) in [_comparable(v) for v in expected]

    a, b = _comparable(actual), _comparable(expected)
    if op == "eq":
        return a == b
    if op == "neq":
        return a != b
    if a is None or b is None:
        return False
    try:
        if op == "gt":
            return a > b
        if op == "gte":
            return a >= b
        if op == "lt":
            return a < b
        if op == "lte":
            return a <= b
    except TypeError:
        return False
    raise ValueError(f"Unsupported filter operator: {op}")


class MockTableQuery(TableQuery):
    """TableQuery evaluated against the owning MockDataClient's store."""

    def __init__(self, client: "MockDataClient", table_name: str) -> None:
        super().__init__(table_name)
        self.client = client

    def _rows(self) -> List[Record]:
        return self.client.store.setdefault(self.table_name, [])

    def _matches(self, row: Record) -> bool:
        return all(_test(op, row.get(column), value) for column, op, value in self._filters)

    def _sorted(self, rows: List[Record]) -> List[Record]:
        # Apply sort keys last-to-first; each pass is stable. Missing values sort last.
        for column, desc in reversed(self._orders):
            present = [r for r in rows if r.get(column) is not None]
            missing = [r for r in rows if r.get(column) is None]
            present.sort(key=lambda r: _comparable(r[column]), reverse=desc)
            rows = present + missing
        return rows

    async def execute(self) -> QueryResult:
        if self._action == "insert":
            return self._insert()
        if self._action == "update":
            return self._update()
        if self._action == "delete":
            return self._delete()
        if self._action == "adjust":
            return self._adjust()
        return self._select()

    def _select(self) -> QueryResult:
        matched = [dict(r) for r in self._rows() if self._matches(r)]
        count = len(matched) if self._count else None
        matched = self._sorted(matched)
        start = self._offset or 0
        end = start + self._limit if self._limit is not None else None
        return self._shape(matched[start:end], count)

    def _insert(self) -> QueryResult:
        inserted: List[Record] = []
        table = self._rows()
        for record in self._payload:
            new = dict(record)
            if not new.get("id"):
                new["id"] = str(uuid4())
            if not new.get("created_at"):
                new["created_at"] = _now()
            table.append(new)
            inserted.append(dict(new))
        logger.debug("mock insert into %s: %d record(s)", self.table_name, len(inserted))
        return self._shape(inserted, len(inserted))

    def _update(self) -> QueryResult:
        table = self._rows()
        for index, row in enumerate(table):
            if self._matches(row):
                table[index] = {**row, **self._payload, "updated_at": _now()}
                return self._shape([dict(table[index])], 1)
        return self._shape([], 0)

    def _delete(self) -> QueryResult:
        table = self._rows()
        removed = [r for r in table if self._matches(r)]
        self.client.store[self.table_name] = [r for r in table if not self._matches(r)]
        logger.debug("mock delete from %s: %d record(s)", self.table_name, len(removed))
        return self._shape([dict(r) for r in removed], len(removed))

    def _adjust(self) -> QueryResult:
        column, delta, floor = self._payload
        table = self._rows()
        changed: List[Record] = []
        for index, row in enumerate(table):
            if not self._matches(row):
                continue
            value = (row.get(column) or 0) + delta
            if floor is not None and value < floor:
                continue
            table[index] = {**row, column: value, "updated_at": _now()}
            changed.append(dict(table[index]))
        return self._shape(changed, len(changed))


class MockDataClient(DataClient):
    """Process-local table store implementing the DataClient interface."""

    def __init__(self, store: Optional[Dict[str, List[Record]]] = None) -> None:
        self.store: Dict[str, List[Record]] = store if store is not None else {t: [] for t in DEFAULT_TABLES}

    def table(self, name: str) -> MockTableQuery:
        return MockTableQuery(self, name)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Snapshot the store; put the snapshot back if the block raises."""
        snapshot = {name: [dict(r) for r in rows] for name, rows in self.store.items()}
        try:
            yield
        except BaseException:
            self.store.clear()
            self.store.update(snapshot)
            raise


_SHARED_STORE: Dict[str, List[Record]] = {t: [] for t in DEFAULT_TABLES}


# PUBLIC_INTERFACE
def get_mock_client() -> MockDataClient:
    """Return a client over the process-wide mock store."""
    return MockDataClient(_SHARED_STORE)
