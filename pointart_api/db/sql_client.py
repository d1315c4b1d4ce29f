"""
PostgreSQL implementation of the chainable DataClient, built on SQLAlchemy Core
statements over the tables registered in Base.metadata.

Outside a transaction every execute() runs through with_retry with a
per-attempt timeout, rolling the session back before each new attempt, and
writes are committed immediately. Inside `client.transaction()` statements run
once and are committed together when the block exits. Driver errors are mapped
onto the domain exceptions in pointart_api.core.errors.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from sqlalchemy import Table, delete, false, func, insert, select, update
from sqlalchemy.exc import DataError, DBAPIError, IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from pointart_api.core.errors import (
    ConflictError,
    DataAccessError,
    DataAuthError,
    DataQueryError,
    NotFoundError,
    PointArtError,
    ValidationFailed,
)
from pointart_api.core.retry import with_retry
from pointart_api.db.base import Base
from pointart_api.db.client import DataClient, QueryResult, Record, TableQuery
from pointart_api.db.coerce import coerce_value

# Registers every model table on Base.metadata.
from pointart_api.db import models as _models  # noqa: F401

logger = logging.getLogger(__name__)

_INSUFFICIENT_PRIVILEGE = "42501"
# Class 22: invalid text representation, numeric out of range, bad datetime...
_DATA_EXCEPTION_CLASS = "22"


# PUBLIC_INTERFACE
def translate_error(exc: DBAPIError, table_name: str, action: str) -> PointArtError:
    """Map a driver error onto the domain exception the API reports for it."""
    sqlstate = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
    if sqlstate == _INSUFFICIENT_PRIVILEGE:
        return DataAuthError(f"Access to {table_name} denied")
    if isinstance(exc, DataError) or (sqlstate or "").startswith(_DATA_EXCEPTION_CLASS):
        return ValidationFailed(f"Invalid value for {table_name}", details=str(exc.orig))
    if isinstance(exc, IntegrityError):
        return ConflictError(f"Constraint violated on {table_name}", details=str(exc.orig))
    if isinstance(exc, (OperationalError, InterfaceError)) or exc.connection_invalidated:
        return DataAccessError(f"Database unavailable ({action} {table_name})")
    return DataQueryError(f"Database error on {table_name}", details=str(exc.orig))


class SqlTableQuery(TableQuery):
    """TableQuery compiled to SQLAlchemy Core and run on an AsyncSession."""

    def __init__(self, client: "SqlDataClient", table: Table) -> None:
        super().__init__(table.name)
        self.client = client
        self.table = table

    def _column(self, name: str):
        try:
            return self.table.c[name]
        except KeyError:
            raise ValidationFailed(f"Unknown column '{name}' on {self.table_name}")

    def _coerce(self, name: str, value: Any) -> Any:
        try:
            return coerce_value(self._column(name), value)
        except (TypeError, ValueError) as exc:
            raise ValidationFailed(f"Invalid value for {self.table_name}.{name}", details=str(exc)) from None

    def _coerce_record(self, record: Record) -> Record:
        return {k: self._coerce(k, v) for k, v in record.items()}

    def _filter_value(self, name: str, value: Any) -> Any:
        """Coerced filter value, or ValueError when no row could hold it."""
        return coerce_value(self._column(name), value)

    def _where(self):
        clauses = []
        for name, op, value in self._filters:
            col = self._column(name)
            if op == "in":
                accepted = []
                for v in value:
                    try:
                        accepted.append(self._filter_value(name, v))
                    except (TypeError, ValueError):
                        continue
                clauses.append(col.in_(accepted))
                continue
            if op == "ilike":
                clauses.append(col.ilike(value, escape="\\"))
                continue
            if op == "is":
                clauses.append(col.is_(value))
                continue
            try:
                value = self._filter_value(name, value)
            except (TypeError, ValueError):
                # A malformed id cannot equal any stored one.
                if op == "eq":
                    clauses.append(false())
                    continue
                if op == "neq":
                    continue
                raise ValidationFailed(f"Invalid value for {self.table_name}.{name}: {value!r}")
            if op == "eq":
                clauses.append(col.is_(None) if value is None else col == value)
            elif op == "neq":
                clauses.append(col.is_not(None) if value is None else col != value)
            elif op == "gt":
                clauses.append(col > value)
            elif op == "gte":
                clauses.append(col >= value)
            elif op == "lt":
                clauses.append(col < value)
            elif op == "lte":
                clauses.append(col <= value)
            else:
                raise ValidationFailed(f"Unsupported filter operator: {op}")
        return clauses

    async def execute(self) -> QueryResult:
        client = self.client
        session = client.session
        in_transaction = client.in_transaction
        try:
            return await with_retry(
                self._run_once,
                max_attempts=1 if in_transaction else client.max_attempts,
                base_delay=client.base_delay,
                timeout=client.timeout,
                operation_name=f"db.{self._action}({self.table_name})",
                before_retry=session.rollback,
            )
        except asyncio.TimeoutError as exc:
            if not in_transaction:
                await session.rollback()
            raise DataAccessError(
                f"Timed out talking to the database ({self._action} {self.table_name})"
            ) from exc

    async def _run_once(self) -> QueryResult:
        session = self.client.session
        try:
            if self._action == "select":
                return await self._select(session)
            if self._action == "insert":
                rows = await self._insert(session)
            elif self._action == "update":
                rows = await self._update(session)
            elif self._action == "adjust":
                rows = await self._adjust(session)
            else:
                rows = await self._delete(session)
            if not self.client.in_transaction:
                await session.commit()
            return self._shape(rows, len(rows))
        except DBAPIError as exc:
            if not self.client.in_transaction:
                await session.rollback()
            raise translate_error(exc, self.table_name, self._action) from exc

    async def _select(self, session: AsyncSession) -> QueryResult:
        where = self._where()
        count: Optional[int] = None
        if self._count:
            count_stmt = select(func.count()).select_from(self.table).where(*where)
            count = int((await session.execute(count_stmt)).scalar_one())

        stmt = select(self.table).where(*where)
        for name, desc in self._orders:
            col = self._column(name)
            stmt = stmt.order_by(col.desc().nullslast() if desc else col.asc().nullslast())
        if self._offset:
            stmt = stmt.offset(self._offset)
        if self._limit is not None:
            stmt = stmt.limit(self._limit)

        result = await session.execute(stmt)
        rows = [dict(r._mapping) for r in result]
        return self._shape(rows, count)

    async def _insert(self, session: AsyncSession) -> List[Record]:
        rows: List[Record] = []
        for record in self._payload:
            values = {k: v for k, v in self._coerce_record(record).items() if v is not None or k != "id"}
            stmt = insert(self.table).values(**values).returning(*self.table.c)
            result = await session.execute(stmt)
            rows.append(dict(result.one()._mapping))
        return rows

    async def _update(self, session: AsyncSession) -> List[Record]:
        values: Dict[str, Any] = self._coerce_record(self._payload)
        if "updated_at" in self.table.c and "updated_at" not in values:
            values["updated_at"] = func.now()
        stmt = update(self.table).where(*self._where()).values(**values).returning(*self.table.c)
        result = await session.execute(stmt)
        return [dict(r._mapping) for r in result]

    async def _adjust(self, session: AsyncSession) -> List[Record]:
        column, delta, floor = self._payload
        col = self._column(column)
        adjusted = func.coalesce(col, 0) + delta
        where = self._where()
        if floor is not None:
            where.append(adjusted >= floor)
        values: Dict[str, Any] = {column: adjusted}
        if "updated_at" in self.table.c:
            values["updated_at"] = func.now()
        stmt = update(self.table).where(*where).values(values).returning(*self.table.c)
        result = await session.execute(stmt)
        return [dict(r._mapping) for r in result]

    async def _delete(self, session: AsyncSession) -> List[Record]:
        stmt = delete(self.table).where(*self._where()).returning(*self.table.c)
        result = await session.execute(stmt)
        return [dict(r._mapping) for r in result]


class SqlDataClient(DataClient):
    """DataClient bound to one AsyncSession."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        timeout: Optional[float] = 5.0,
        max_attempts: int = 3,
        base_delay: float = 1.0,
    ) -> None:
        self.session = session
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._depth = 0

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    def table(self, name: str) -> SqlTableQuery:
        table = Base.metadata.tables.get(name)
        if table is None:
            raise NotFoundError(f"Unknown table '{name}'")
        return SqlTableQuery(self, table)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Commit everything run in the block at exit, or roll all of it back.

        Nested blocks join the outermost one.
        """
        outermost = self._depth == 0
        self._depth += 1
        try:
            yield
        except BaseException:
            if outermost:
                await self.session.rollback()
            raise
        else:
            if outermost:
                try:
                    await self.session.commit()
                except DBAPIError as exc:
                    await self.session.rollback()
                    raise translate_error(exc, "transaction", "commit") from exc
        finally:
            self._depth -= 1
