from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from pointart_api.core.errors import NotFoundError, ValidationFailed
from pointart_api.db.client import Record
from pointart_api.repositories.inventory import InventoryRepository
from pointart_api.repositories.sales import GiftSalesRepository, LedgerRepository, StationerySalesRepository
from pointart_api.schemas.sales import (
    GiftSaleCreate,
    GiftSaleUpdate,
    SalesSummary,
    StationerySaleCreate,
    StationerySaleUpdate,
)
from .analytics import AnalyticsService
from .audit import AuditService
from .base import BaseService
from .realtime import DASHBOARD_TOPIC, broadcast_manager

logger = logging.getLogger(__name__)


def _stationery_totals(quantity: int, rate: float, selling_price: float) -> Record:
    return {
        "total_amount": round(selling_price * quantity, 2),
        "profit": round((selling_price - rate) * quantity, 2),
    }


def _gift_totals(quantity: int, bpx: float, spx: float) -> Record:
    return {
        "total_amount": round(spx * quantity, 2),
        "profit": round((spx - bpx) * quantity, 2),
    }


class SalesService(BaseService):
    """Stationery sales (stock-backed) and gift store daily sales."""

    def _stock(self) -> InventoryRepository:
        return InventoryRepository(self.client, "stationery")

    async def _audit(self, action: str, table: str, record_id: str, **kwargs) -> None:
        await AuditService(self.client, self.actor).record(action, table, record_id, **kwargs)

    async def _push_dashboard(self) -> None:
        """Send fresh stats to dashboard subscribers; the sale stands even if this fails."""
        if not broadcast_manager.subscriber_count(DASHBOARD_TOPIC):
            return
        try:
            stats = await AnalyticsService(self.client).dashboard_stats()
            await broadcast_manager.publish_dashboard_stats(stats)
        except Exception:
            logger.exception("Dashboard push after sale failed")

    async def _stationery_item(self, item_id: str) -> Record:
        item = await self._stock().get(item_id)
        if not item:
            raise NotFoundError("Stationery item not found")
        return item

    async def _take_stock(self, item: Record, quantity: int) -> None:
        """Take `quantity` units (negative returns them); ValidationFailed when short."""
        if not quantity:
            return
        if await self._stock().adjust_stock(item["id"], -quantity) is None:
            current = await self._stock().get(item["id"])
            stock = int((current or item).get("stock") or 0)
            raise ValidationFailed(f"Only {stock} units available for {item['item']}")

    async def _with_names(self, sales: List[Record]) -> List[Record]:
        items = await self._stock().all()
        names = {i["id"]: i.get("item") for i in items}
        return [{**sale, "item_name": names.get(sale.get("item_id"))} for sale in sales]

    # Stationery
    # PUBLIC_INTERFACE
    async def list_stationery_sales(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        *,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Record]:
        rows = await StationerySalesRepository(self.client).between(date_from, date_to, limit=limit, offset=offset)
        return await self._with_names(rows)

    # PUBLIC_INTERFACE
    async def record_stationery_sale(self, payload: StationerySaleCreate) -> Record:
        """
        Record a stationery sale and take the units out of stock.

        Raises ValidationFailed when the item has fewer units than requested.
        The stock decrement and the sale row are written in one transaction.
        """
        item = await self._stationery_item(payload.item_id)
        rate = payload.rate if payload.rate is not None else float(item.get("rate") or 0)
        selling_price = payload.selling_price if payload.selling_price is not None else item.get("selling_price")
        if selling_price is None:
            raise ValidationFailed(f"No selling price set for {item['item']}")

        values = payload.model_dump()
        values.update(rate=rate, selling_price=selling_price)
        values.update(_stationery_totals(payload.quantity, rate, float(selling_price)))
        async with self.client.transaction():
            await self._take_stock(item, payload.quantity)
            sale = await StationerySalesRepository(self.client).create(values)
        logger.info("Stationery sale id=%s item=%s qty=%d", sale["id"], item["id"], payload.quantity)

        await self._audit("create", "stationery_sales", sale["id"], new_values=values)
        await self._push_dashboard()
        return {**sale, "item_name": item.get("item")}

    # PUBLIC_INTERFACE
    async def update_stationery_sale(self, sale_id: str, payload: StationerySaleUpdate) -> Record:
        repo = StationerySalesRepository(self.client)
        sale = await repo.get(sale_id)
        if not sale:
            raise NotFoundError("Stationery sale not found")
        item = await self._stationery_item(sale["item_id"])
        changes = payload.model_dump(exclude_unset=True)
        merged = {**sale, **changes}

        delta = int(merged["quantity"]) - int(sale["quantity"])
        changes.update(
            _stationery_totals(int(merged["quantity"]), float(merged.get("rate") or 0), float(merged["selling_price"]))
        )
        async with self.client.transaction():
            await self._take_stock(item, delta)
            row = await repo.update(sale_id, changes)
        await self._audit(
            "update", "stationery_sales", sale_id,
            old_values={k: sale.get(k) for k in changes}, new_values=changes,
        )
        await self._push_dashboard()
        return {**row, "item_name": item.get("item")}

    # PUBLIC_INTERFACE
    async def delete_stationery_sale(self, sale_id: str) -> None:
        """Delete a sale and put its units back in stock."""
        repo = StationerySalesRepository(self.client)
        sale = await repo.get(sale_id)
        if not sale:
            raise NotFoundError("Stationery sale not found")
        async with self.client.transaction():
            await repo.delete(sale_id)
            # The item may have been deleted since; then there is nothing to restock.
            await self._stock().adjust_stock(sale["item_id"], int(sale["quantity"]))
        await self._audit("delete", "stationery_sales", sale_id, old_values=sale)
        await self._push_dashboard()

    # Gift store
    # PUBLIC_INTERFACE
    async def list_gift_sales(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        *,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Record]:
        return await GiftSalesRepository(self.client).between(date_from, date_to, limit=limit, offset=offset)

    # PUBLIC_INTERFACE
    async def record_gift_sale(self, payload: GiftSaleCreate) -> Record:
        values = payload.model_dump()
        values.update(_gift_totals(payload.quantity, payload.bpx, payload.spx))
        sale = await GiftSalesRepository(self.client).create(values)
        await self._audit("create", "gift_daily_sales", sale["id"], new_values=values)
        await self._push_dashboard()
        return sale

    # PUBLIC_INTERFACE
    async def update_gift_sale(self, sale_id: str, payload: GiftSaleUpdate) -> Record:
        repo = GiftSalesRepository(self.client)
        sale = await repo.get(sale_id)
        if not sale:
            raise NotFoundError("Gift sale not found")
        changes = payload.model_dump(exclude_unset=True)
        merged = {**sale, **changes}
        changes.update(_gift_totals(int(merged["quantity"]), float(merged["bpx"]), float(merged["spx"])))
        row = await repo.update(sale_id, changes)
        await self._audit(
            "update", "gift_daily_sales", sale_id,
            old_values={k: sale.get(k) for k in changes}, new_values=changes,
        )
        await self._push_dashboard()
        return row

    # PUBLIC_INTERFACE
    async def delete_gift_sale(self, sale_id: str) -> None:
        repo = GiftSalesRepository(self.client)
        sale = await repo.get(sale_id)
        if not sale:
            raise NotFoundError("Gift sale not found")
        await repo.delete(sale_id)
        await self._audit("delete", "gift_daily_sales", sale_id, old_values=sale)
        await self._push_dashboard()

    # PUBLIC_INTERFACE
    async def summary(
        self, ledger: str, date_from: Optional[date] = None, date_to: Optional[date] = None
    ) -> SalesSummary:
        repo: LedgerRepository = (
            StationerySalesRepository(self.client) if ledger == "stationery" else GiftSalesRepository(self.client)
        )
        rows = await repo.between(date_from, date_to)
        return SalesSummary(
            total_sales=round(sum(float(r.get("total_amount") or 0) for r in rows), 2),
            total_profit=round(sum(float(r.get("profit") or 0) for r in rows), 2),
            items_sold=sum(int(r.get("quantity") or 0) for r in rows),
            transactions=len(rows),
        )
