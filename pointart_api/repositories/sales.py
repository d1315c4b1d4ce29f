from __future__ import annotations

from datetime import date
from typing import List, Optional

from pointart_api.db.client import Record
from .base import TableRepository, contains_pattern


class LedgerRepository(TableRepository):
    """Date-keyed sales ledger (stationery_sales, gift_daily_sales)."""

    async def between(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        *,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Record]:
        query = self.query().select("*")
        if date_from:
            query = query.gte("date", date_from)
        if date_to:
            query = query.lte("date", date_to)
        query = query.order("date", desc=True).order("created_at", desc=True)
        if limit is not None:
            query = query.range(offset, offset + limit - 1)
        res = await query.execute()
        return list(res.data)


class StationerySalesRepository(LedgerRepository):
    table_name = "stationery_sales"

    async def for_item(self, item_id: str) -> List[Record]:
        res = await self.query().select("*").eq("item_id", item_id).execute()
        return list(res.data)


class GiftSalesRepository(LedgerRepository):
    table_name = "gift_daily_sales"


class CustomerRepository(TableRepository):
    table_name = "customers"

    async def search(
        self,
        *,
        q: Optional[str] = None,
        customer_type: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Record]:
        query = self.query().select("*")
        if q:
            query = query.ilike("full_name", contains_pattern(q))
        if customer_type:
            query = query.eq("customer_type", customer_type)
        res = await query.order("full_name").range(offset, offset + limit - 1).execute()
        return list(res.data)
