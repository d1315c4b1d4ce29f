from __future__ import annotations

from datetime import date
from typing import List, Optional

from pointart_api.db.client import Record
from .base import TableRepository, contains_pattern

# Column searched by the free-text filter of each inventory table.
SEARCH_COLUMNS = {
    "stationery": "item",
    "gift_store": "item",
    "embroidery": "job_description",
    "machines": "machine_name",
    "art_services": "service_name",
}


class InventoryRepository(TableRepository):
    """Repository for one inventory category table (stationery, gift_store, ...)."""

    async def search(
        self,
        *,
        q: Optional[str] = None,
        category: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Record]:
        query = self.query().select("*")
        if q:
            query = query.ilike(SEARCH_COLUMNS.get(self.table_name, "id"), contains_pattern(q))
        if category:
            query = query.eq("category", category)
        if date_from:
            query = query.gte("date", date_from)
        if date_to:
            query = query.lte("date", date_to)
        res = await query.order("created_at", desc=True).range(offset, offset + limit - 1).execute()
        return list(res.data)

    async def adjust_stock(self, item_id: str, delta: int) -> Optional[Record]:
        """
        Add `delta` (negative to take units out) to an item's stock in one statement.

        Returns the updated row, or None when the item is missing or would go
        below zero.
        """
        res = await self.query().adjust("stock", delta, floor=0).eq("id", item_id).maybe_single().execute()
        return res.data

    async def low_stock_stationery(self) -> List[Record]:
        """Stationery items whose stock has reached their own threshold."""
        rows = await self.all()
        return [r for r in rows if (r.get("stock") or 0) <= (r.get("low_stock_threshold") or 0)]

    async def at_or_below(self, column: str, threshold: int) -> List[Record]:
        res = await self.query().select("*").lte(column, threshold).order(column).execute()
        return list(res.data)


class CategoryRepository(TableRepository):
    """Repository for product categories."""

    table_name = "product_categories"

    async def list_for_module(self, module: Optional[str] = None) -> List[Record]:
        query = self.query().select("*")
        if module:
            query = query.eq("module", module)
        res = await query.order("name").execute()
        return list(res.data)

    async def find(self, name: str, module: str) -> Optional[Record]:
        res = await (
            self.query().select("*").eq("name", name).eq("module", module).maybe_single().execute()
        )
        return res.data
