"""
Inventory category registry and CRUD service.

Each category is one table with its own create/update/read schemas and a
derive function that fills the computed money columns from the stored inputs.
Derived values are recomputed on every write from the merged record, so a
partial update of `rate` still refreshes profit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, List, Optional, Type

from pydantic import BaseModel

from pointart_api.core.errors import ConflictError, NotFoundError
from pointart_api.db.client import Record
from pointart_api.repositories.inventory import CategoryRepository, InventoryRepository
from pointart_api.schemas import inventory as s
from .audit import AuditService
from .base import BaseService

logger = logging.getLogger(__name__)


def _num(value) -> float:
    return float(value or 0)


def _money(value: float) -> float:
    return round(value, 2)


def derive_stationery(record: Record) -> Record:
    price = record.get("selling_price")
    profit = _money(_num(price) - _num(record.get("rate"))) if price is not None else None
    return {"profit_per_unit": profit}


def derive_gift_store(record: Record) -> Record:
    price = record.get("selling_price")
    profit = _money(_num(price) - _num(record.get("rate"))) if price is not None else None
    return {"profit": profit}


def derive_embroidery(record: Record) -> Record:
    quotation = _num(record.get("quotation"))
    return {
        "sales": _money(quotation),
        "balance": _money(quotation - _num(record.get("deposit"))),
        "profit": _money(quotation - _num(record.get("expenditure"))),
    }


def derive_machines(record: Record) -> Record:
    return {"sales": _money(_num(record.get("quantity")) * _num(record.get("rate")))}


def derive_art_services(record: Record) -> Record:
    quotation = _money(_num(record.get("quantity")) * _num(record.get("rate")))
    return {
        "quotation": quotation,
        "sales": quotation,
        "balance": _money(quotation - _num(record.get("deposit"))),
        "profit": _money(quotation - _num(record.get("expenditure"))),
    }


@dataclass(frozen=True)
class InventoryCategory:
    key: str
    label: str
    create_schema: Type[BaseModel]
    update_schema: Type[BaseModel]
    read_schema: Type[BaseModel]
    derive: Callable[[Record], Record]
    # Column that holds the sales value of an entry, if any.
    sales_column: Optional[str] = None
    has_category: bool = False


CATEGORIES: Dict[str, InventoryCategory] = {
    c.key: c
    for c in (
        InventoryCategory(
            "stationery", "Stationery",
            s.StationeryCreate, s.StationeryUpdate, s.StationeryRead,
            derive_stationery, has_category=True,
        ),
        InventoryCategory(
            "gift_store", "Gift Store",
            s.GiftStoreCreate, s.GiftStoreUpdate, s.GiftStoreRead,
            derive_gift_store, has_category=True,
        ),
        InventoryCategory(
            "embroidery", "Embroidery",
            s.EmbroideryCreate, s.EmbroideryUpdate, s.EmbroideryRead,
            derive_embroidery, sales_column="sales",
        ),
        InventoryCategory(
            "machines", "Machines",
            s.MachineCreate, s.MachineUpdate, s.MachineRead,
            derive_machines, sales_column="sales",
        ),
        InventoryCategory(
            "art_services", "Art Services",
            s.ArtServiceCreate, s.ArtServiceUpdate, s.ArtServiceRead,
            derive_art_services, sales_column="sales",
        ),
    )
}


class InventoryService(BaseService):
    """CRUD over the inventory category tables, with derived fields and auditing."""

    def _repo(self, category: InventoryCategory) -> InventoryRepository:
        return InventoryRepository(self.client, category.key)

    # PUBLIC_INTERFACE
    async def list_items(
        self,
        category: InventoryCategory,
        *,
        q: Optional[str] = None,
        product_category: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Record]:
        return await self._repo(category).search(
            q=q,
            category=product_category if category.has_category else None,
            date_from=date_from,
            date_to=date_to,
            limit=limit,
            offset=offset,
        )

    # PUBLIC_INTERFACE
    async def get_item(self, category: InventoryCategory, item_id: str) -> Record:
        row = await self._repo(category).get(item_id)
        if not row:
            raise NotFoundError(f"{category.label} entry not found")
        return row

    # PUBLIC_INTERFACE
    async def create_item(self, category: InventoryCategory, payload: BaseModel) -> Record:
        values = payload.model_dump()
        values.update(category.derive(values))
        if self.actor:
            values["updated_by"] = self.actor.user_id
        row = await self._repo(category).create(values)
        logger.info("Created %s entry id=%s", category.key, row["id"])
        await AuditService(self.client, self.actor).record(
            "create", category.key, row["id"], new_values=values
        )
        return row

    # PUBLIC_INTERFACE
    async def update_item(self, category: InventoryCategory, item_id: str, payload: BaseModel) -> Record:
        existing = await self.get_item(category, item_id)
        changes = payload.model_dump(exclude_unset=True)
        merged = {**existing, **changes}
        changes.update(category.derive(merged))
        if self.actor:
            changes["updated_by"] = self.actor.user_id
        row = await self._repo(category).update(item_id, changes)
        if row is None:
            raise NotFoundError(f"{category.label} entry not found")
        await AuditService(self.client, self.actor).record(
            "update",
            category.key,
            item_id,
            old_values={k: existing.get(k) for k in changes},
            new_values=changes,
        )
        return row

    # PUBLIC_INTERFACE
    async def delete_item(self, category: InventoryCategory, item_id: str) -> None:
        existing = await self.get_item(category, item_id)
        await self._repo(category).delete(item_id)
        logger.info("Deleted %s entry id=%s", category.key, item_id)
        await AuditService(self.client, self.actor).record(
            "delete", category.key, item_id, old_values=existing
        )

    # Product categories
    # PUBLIC_INTERFACE
    async def list_product_categories(self, module: Optional[str] = None) -> List[Record]:
        return await CategoryRepository(self.client).list_for_module(module)

    # PUBLIC_INTERFACE
    async def create_product_category(self, payload: s.ProductCategoryCreate) -> Record:
        repo = CategoryRepository(self.client)
        if await repo.find(payload.name, payload.module):
            raise ConflictError(f"Category '{payload.name}' already exists for {payload.module}")
        row = await repo.create(payload.model_dump())
        await AuditService(self.client, self.actor).record(
            "create", "product_categories", row["id"], new_values=payload.model_dump()
        )
        return row
