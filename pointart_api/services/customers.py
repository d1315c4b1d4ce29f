from __future__ import annotations

from datetime import date, timedelta
from typing import List, Optional

from pointart_api.core.errors import NotFoundError
from pointart_api.db.client import Record
from pointart_api.repositories.sales import CustomerRepository
from pointart_api.schemas.sales import CustomerCreate, CustomerSummary, CustomerUpdate
from .analytics import as_date
from .audit import AuditService
from .base import BaseService

ACTIVE_WINDOW_DAYS = 30


class CustomerService(BaseService):
    """Customer records, search and the customer summary."""

    def _repo(self) -> CustomerRepository:
        return CustomerRepository(self.client)

    async def list_customers(
        self, *, q: Optional[str] = None, customer_type: Optional[str] = None, limit: int = 100, offset: int = 0
    ) -> List[Record]:
        return await self._repo().search(q=q, customer_type=customer_type, limit=limit, offset=offset)

    async def get_customer(self, customer_id: str) -> Record:
        row = await self._repo().get(customer_id)
        if not row:
            raise NotFoundError("Customer not found")
        return row

    async def create_customer(self, payload: CustomerCreate) -> Record:
        values = payload.model_dump()
        row = await self._repo().create(values)
        await AuditService(self.client, self.actor).record("create", "customers", row["id"], new_values=values)
        return row

    async def update_customer(self, customer_id: str, payload: CustomerUpdate) -> Record:
        existing = await self.get_customer(customer_id)
        changes = payload.model_dump(exclude_unset=True)
        row = await self._repo().update(customer_id, changes) if changes else existing
        await AuditService(self.client, self.actor).record(
            "update", "customers", customer_id,
            old_values={k: existing.get(k) for k in changes}, new_values=changes,
        )
        return row

    async def delete_customer(self, customer_id: str) -> None:
        existing = await self.get_customer(customer_id)
        await self._repo().delete(customer_id)
        await AuditService(self.client, self.actor).record("delete", "customers", customer_id, old_values=existing)

    async def summary(self, today: Optional[date] = None) -> CustomerSummary:
        today = today or date.today()
        cutoff = today - timedelta(days=ACTIVE_WINDOW_DAYS)
        rows = await self._repo().all()
        active = 0
        for r in rows:
            last = as_date(r.get("last_purchase_date"))
            if last is not None and last >= cutoff:
                active += 1
        return CustomerSummary(
            total_customers=len(rows),
            total_purchases=round(sum(float(r.get("total_purchases") or 0) for r in rows), 2),
            outstanding_balance=round(sum(float(r.get("outstanding_balance") or 0) for r in rows), 2),
            active_customers=active,
        )
