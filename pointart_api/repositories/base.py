from __future__ import annotations

from typing import Any, Dict, List, Optional

from pointart_api.db.client import DataClient, Record, TableQuery


def contains_pattern(text: str) -> str:
    """ILIKE pattern matching `text` anywhere, with its own % and _ taken literally."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class BaseRepository:
    """
    Base class for repositories providing common helpers.

    Repositories talk to a DataClient, so the same code runs against
    PostgreSQL and the in-memory mock.
    """

    def __init__(self, client: DataClient) -> None:
        self.client = client

    def table(self, name: str) -> TableQuery:
        """Start a query on a table."""
        return self.client.table(name)


class TableRepository(BaseRepository):
    """CRUD helpers for a single table keyed by `id`."""

    table_name: str = ""

    def __init__(self, client: DataClient, table_name: Optional[str] = None) -> None:
        super().__init__(client)
        if table_name:
            self.table_name = table_name

    def query(self) -> TableQuery:
        return self.table(self.table_name)

    async def get(self, record_id: str) -> Optional[Record]:
        res = await self.query().select("*").eq("id", record_id).maybe_single().execute()
        return res.data

    async def list(
        self,
        *,
        filters: Optional[Dict[str, Any]] = None,
        order_by: str = "created_at",
        desc: bool = True,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Record]:
        q = self.query().select("*").match(filters or {}).order(order_by, desc=desc)
        if offset:
            q = q.offset(offset)
        if limit is not None:
            q = q.limit(limit)
        res = await q.execute()
        return list(res.data)

    async def all(self) -> List[Record]:
        res = await self.query().select("*").execute()
        return list(res.data)

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        res = await self.query().select("id", count="exact").match(filters or {}).execute()
        return int(res.count or 0)

    async def create(self, values: Record) -> Record:
        res = await self.query().insert(values).single().execute()
        return res.data

    async def create_many(self, values: List[Record]) -> List[Record]:
        if not values:
            return []
        res = await self.query().insert(values).execute()
        return list(res.data)

    async def update(self, record_id: str, values: Record) -> Optional[Record]:
        res = await self.query().update(values).eq("id", record_id).maybe_single().execute()
        return res.data

    async def delete(self, record_id: str) -> bool:
        res = await self.query().delete().eq("id", record_id).execute()
        return bool(res.count)
