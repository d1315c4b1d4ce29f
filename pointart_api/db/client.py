"""
Chainable table-query interface shared by the PostgreSQL client and the
in-memory mock client.

    result = await (
        client.table("stationery")
        .select("id, item, stock")
        .lte("stock", 5)
        .order("stock")
        .limit(20)
        .execute()
    )
    rows = result.data

Filters, ordering, offset and limit may be chained in any order; they are
applied at execute() time. Writes return the affected rows in `data` and
their number in `count`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, AsyncContextManager, Dict, Iterable, List, Optional, Tuple, Union

from pointart_api.core.errors import NotFoundError

Record = Dict[str, Any]
Filter = Tuple[str, str, Any]

FILTER_OPERATORS = ("eq", "neq", "gt", "gte", "lt", "lte", "in", "ilike", "is")


@dataclass
class QueryResult:
    """Outcome of one executed query."""
    data: Any
    count: Optional[int] = None


def parse_columns(columns: Union[str, Iterable[str], None]) -> Optional[List[str]]:
    """Turn "id, item" or ["id", "item"] into a column list; "*" means all columns."""
    if columns is None:
        return None
    if isinstance(columns, str):
        parts = [c.strip() for c in columns.split(",") if c.strip()]
    else:
        parts = [c.strip() for c in columns]
    if not parts or parts == ["*"]:
        return None
    return parts


class TableQuery:
    """
    Query builder for one table. Subclasses implement execute().

    Only one action (select/insert/update/delete/adjust) applies per query; select()
    after a write only narrows the returned columns.
    """

    def __init__(self, table_name: str) -> None:
        self.table_name = table_name
        self._action = "select"
        self._columns: Optional[List[str]] = None
        self._count: Optional[str] = None
        self._payload: Any = None
        self._filters: List[Filter] = []
        self._orders: List[Tuple[str, bool]] = []
        self._limit: Optional[int] = None
        self._offset: Optional[int] = None
        self._single: Optional[str] = None

    # Actions
    def select(self, columns: Union[str, Iterable[str]] = "*", *, count: Optional[str] = None) -> "TableQuery":
        self._columns = parse_columns(columns)
        self._count = count
        return self

    def insert(self, records: Union[Record, List[Record]]) -> "TableQuery":
        self._action = "insert"
        self._payload = [records] if isinstance(records, dict) else list(records)
        return self

    def update(self, values: Record) -> "TableQuery":
        self._action = "update"
        self._payload = dict(values)
        return self

    def delete(self) -> "TableQuery":
        self._action = "delete"
        return self

    def adjust(self, column: str, delta: float, *, floor: Optional[float] = None) -> "TableQuery":
        """
        Add `delta` to a numeric column of every matching row in one statement.

        With `floor`, rows whose result would drop below it are left alone and
        not returned, so `adjust("stock", -3, floor=0)` either takes three units
        or reports zero affected rows.
        """
        self._action = "adjust"
        self._payload = (column, delta, floor)
        return self

    # Filters
    def _add_filter(self, column: str, op: str, value: Any) -> "TableQuery":
        self._filters.append((column, op, value))
        return self

    def eq(self, column: str, value: Any) -> "TableQuery":
        return self._add_filter(column, "eq", value)

    def neq(self, column: str, value: Any) -> "TableQuery":
        return self._add_filter(column, "neq", value)

    def gt(self, column: str, value: Any) -> "TableQuery":
        return self._add_filter(column, "gt", value)

    def gte(self, column: str, value: Any) -> "TableQuery":
        return self._add_filter(column, "gte", value)

    def lt(self, column: str, value: Any) -> "TableQuery":
        return self._add_filter(column, "lt", value)

    def lte(self, column: str, value: Any) -> "TableQuery":
        return self._add_filter(column, "lte", value)

    def in_(self, column: str, values: Iterable[Any]) -> "TableQuery":
        return self._add_filter(column, "in", list(values))

    def ilike(self, column: str, pattern: str) -> "TableQuery":
        """Case-insensitive SQL LIKE; % matches any run, _ any single character."""
        return self._add_filter(column, "ilike", pattern)

    def is_(self, column: str, value: Any) -> "TableQuery":
        return self._add_filter(column, "is", value)

    def match(self, criteria: Record) -> "TableQuery":
        for column, value in criteria.items():
            self.eq(column, value)
        return self

    # Shaping
    def order(self, column: str, *, desc: bool = False) -> "TableQuery":
        self._orders.append((column, desc))
        return self

    def limit(self, n: int) -> "TableQuery":
        self._limit = n
        return self

    def offset(self, n: int) -> "TableQuery":
        self._offset = n
        return self

    def range(self, start: int, end: int) -> "TableQuery":
        """Inclusive row window, e.g. range(0, 9) for the first ten rows."""
        self._offset = start
        self._limit = end - start + 1
        return self

    def single(self) -> "TableQuery":
        """Return one record as `data`; NotFoundError when nothing matched."""
        self._single = "single"
        return self

    def maybe_single(self) -> "TableQuery":
        """Return one record or None as `data`."""
        self._single = "maybe"
        return self

    async def execute(self) -> QueryResult:
        raise NotImplementedError

    def _project(self, row: Record) -> Record:
        if self._columns is None:
            return row
        return {c: row.get(c) for c in self._columns}

    def _shape(self, rows: List[Record], count: Optional[int]) -> QueryResult:
        rows = [self._project(r) for r in rows]
        if self._single is None:
            return QueryResult(data=rows, count=count)
        if not rows:
            if self._single == "single":
                raise NotFoundError(f"No matching record in {self.table_name}")
            return QueryResult(data=None, count=0)
        return QueryResult(data=rows[0], count=count)


class DataClient:
    """
    Entry point: one TableQuery per call to table().

    Queries commit one by one. Inside `async with client.transaction():` they
    are applied together on exit, or not at all when the block raises.
    """

    def table(self, name: str) -> TableQuery:
        raise NotImplementedError

    def transaction(self) -> AsyncContextManager[None]:
        raise NotImplementedError
