from __future__ import annotations

from typing import List, Optional

from pointart_api.db.client import Record
from .base import TableRepository, contains_pattern


class InvoiceRepository(TableRepository):
    """Invoice headers and their line items."""

    table_name = "invoices"

    async def number_taken(self, column: str, value: str) -> bool:
        res = await self.query().select("id").eq(column, value).limit(1).execute()
        return bool(res.data)

    async def search(
        self,
        *,
        status: Optional[str] = None,
        customer: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Record]:
        query = self.query().select("*")
        if status:
            query = query.eq("status", status)
        if customer:
            query = query.ilike("customer_name", contains_pattern(customer))
        res = await (
            query.order("invoice_date", desc=True)
            .order("created_at", desc=True)
            .range(offset, offset + limit - 1)
            .execute()
        )
        return list(res.data)

    async def items(self, invoice_id: str) -> List[Record]:
        res = await (
            self.table("invoice_items").select("*").eq("invoice_id", invoice_id).order("serial_number").execute()
        )
        return list(res.data)

    async def add_items(self, items: List[Record]) -> List[Record]:
        if not items:
            return []
        res = await self.table("invoice_items").insert(items).execute()
        return list(res.data)

    async def delete_items(self, invoice_id: str) -> int:
        res = await self.table("invoice_items").delete().eq("invoice_id", invoice_id).execute()
        return int(res.count or 0)
