"""
Invoicing: numbering, amounts, amount-in-words and the invoice service.

    >>> number_to_words(150000)
    'One Hundred Fifty Thousand Shillings Only'
    >>> format_currency(1500)
    'UGX 1,500'
"""

from __future__ import annotations

import logging
import random
import time
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional, Union

from pointart_api.core.errors import ConflictError, NotFoundError
from pointart_api.core.settings import get_app_settings
from pointart_api.db.client import Record
from pointart_api.repositories.invoices import InvoiceRepository
from pointart_api.schemas.invoices import InvoiceCreate, InvoiceItemIn, InvoiceUpdate
from .audit import AuditService
from .base import BaseService

logger = logging.getLogger(__name__)

Number = Union[int, float, Decimal]

ONES = ["", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine"]
TEENS = [
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen",
    "Fifteen", "Sixteen", "Seventeen", "Eighteen", "Nineteen",
]
TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]

SCALES = ((1_000_000_000, "Billion"), (1_000_000, "Million"), (1_000, "Thousand"))

MAX_NUMBER_DRAWS = 10


def _below_thousand(n: int) -> List[str]:
    words: List[str] = []
    if n >= 100:
        words += [ONES[n // 100], "Hundred"]
        n %= 100
    if n >= 20:
        words.append(TENS[n // 10])
        n %= 10
    elif n >= 10:
        return words + [TEENS[n - 10]]
    if n:
        words.append(ONES[n])
    return words


def _spell(n: int) -> List[str]:
    words: List[str] = []
    for size, name in SCALES:
        group, n = divmod(n, size)
        if group:
            # Groups above 999 only occur for billions; spell them recursively.
            words += (_spell(group) if group >= 1000 else _below_thousand(group)) + [name]
    return words + _below_thousand(n)


# PUBLIC_INTERFACE
def number_to_words(amount: Number) -> str:
    """
    Spell a shilling amount in English words, e.g. 150000 ->
    "One Hundred Fifty Thousand Shillings Only".

    Fractions are rounded half-up to whole shillings. Negative amounts raise
    ValueError.
    """
    value = Decimal(str(amount))
    if value.is_nan() or value.is_infinite():
        raise ValueError(f"Cannot spell {amount!r}")
    if value < 0:
        raise ValueError("Amount must not be negative")
    whole = int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    if whole == 0:
        return "Zero Shillings Only"
    return " ".join(_spell(whole)) + " Shillings Only"


# PUBLIC_INTERFACE
def format_currency(amount: Optional[Number], currency: Optional[str] = None) -> str:
    """Format an amount as "UGX 1,500"; None formats as "UGX 0"."""
    code = currency or get_app_settings().CURRENCY_CODE
    if amount is None:
        return f"{code} 0"
    value = round(float(amount), 2)
    if value == int(value):
        return f"{code} {int(value):,}"
    return f"{code} {value:,.2f}".rstrip("0")


# PUBLIC_INTERFACE
def calculate_line_amount(quantity: Number, rate: Number) -> float:
    """quantity x rate rounded to 2 decimals."""
    return round(float(quantity) * float(rate), 2)


# PUBLIC_INTERFACE
def calculate_invoice_total(items: Iterable) -> float:
    """Sum of line amounts; items are mappings or objects with quantity and rate."""
    total = 0.0
    for item in items:
        if isinstance(item, dict):
            total += calculate_line_amount(item["quantity"], item["rate"])
        else:
            total += calculate_line_amount(item.quantity, item.rate)
    return round(total, 2)


# PUBLIC_INTERFACE
def generate_invoice_number() -> str:
    """Five-digit invoice number drawn from the clock plus randomness."""
    combined = (int(time.time() * 1000) + random.randint(0, 999)) % 100_000
    return f"{combined:05d}"


# PUBLIC_INTERFACE
def generate_reference_number() -> str:
    """Ten-digit reference number drawn from the clock plus randomness."""
    combined = (int(time.time() * 1000) + random.randint(0, 9999)) % 10_000_000_000
    return f"{combined:010d}"


def _line_records(invoice_id: str, items: List[InvoiceItemIn]) -> List[Record]:
    return [
        {
            "invoice_id": invoice_id,
            "serial_number": index,
            "particulars": item.particulars,
            "description": item.description,
            "quantity": item.quantity,
            "rate": item.rate,
            "amount": calculate_line_amount(item.quantity, item.rate),
        }
        for index, item in enumerate(items, start=1)
    ]


class InvoiceService(BaseService):
    """Invoices with their line items."""

    def _repo(self) -> InvoiceRepository:
        return InvoiceRepository(self.client)

    async def _draw_unique(self, column: str, generate) -> str:
        for _ in range(MAX_NUMBER_DRAWS):
            candidate = generate()
            if not await self._repo().number_taken(column, candidate):
                return candidate
            logger.info("Invoice %s %s already used; drawing again", column, candidate)
        raise ConflictError(f"Could not allocate a unique {column.replace('_', ' ')}")

    async def list_invoices(
        self, *, status: Optional[str] = None, customer: Optional[str] = None, limit: int = 100, offset: int = 0
    ) -> List[Record]:
        return await self._repo().search(status=status, customer=customer, limit=limit, offset=offset)

    async def get_invoice(self, invoice_id: str) -> Record:
        header = await self._repo().get(invoice_id)
        if not header:
            raise NotFoundError("Invoice not found")
        return {**header, "items": await self._repo().items(invoice_id)}

    async def create_invoice(self, payload: InvoiceCreate) -> Record:
        total = calculate_invoice_total(payload.items)
        header = {
            "invoice_number": await self._draw_unique("invoice_number", generate_invoice_number),
            "reference_number": await self._draw_unique("reference_number", generate_reference_number),
            "customer_name": payload.customer_name,
            "invoice_date": payload.invoice_date,
            "total_amount": total,
            "amount_in_words": number_to_words(total),
            "status": payload.status,
            "notes": payload.notes,
            "created_by": self.actor.user_id if self.actor else None,
        }
        row = await self._repo().create(header)
        items = await self._repo().add_items(_line_records(row["id"], payload.items))
        logger.info("Created invoice %s (%d items)", row["invoice_number"], len(items))
        await AuditService(self.client, self.actor).record("create", "invoices", row["id"], new_values=header)
        return {**row, "items": items}

    async def update_invoice(self, invoice_id: str, payload: InvoiceUpdate) -> Record:
        existing = await self.get_invoice(invoice_id)
        changes = payload.model_dump(exclude_unset=True, exclude={"items"})
        if payload.items is not None:
            await self._repo().delete_items(invoice_id)
            await self._repo().add_items(_line_records(invoice_id, payload.items))
            total = calculate_invoice_total(payload.items)
            changes.update(total_amount=total, amount_in_words=number_to_words(total))
        if self.actor:
            changes["updated_by"] = self.actor.user_id
        if changes:
            await self._repo().update(invoice_id, changes)
        await AuditService(self.client, self.actor).record(
            "update", "invoices", invoice_id,
            old_values={k: existing.get(k) for k in changes}, new_values=changes,
        )
        return await self.get_invoice(invoice_id)

    async def set_status(self, invoice_id: str, status: str) -> Record:
        existing = await self.get_invoice(invoice_id)
        values = {"status": status}
        if self.actor:
            values["updated_by"] = self.actor.user_id
        await self._repo().update(invoice_id, values)
        await AuditService(self.client, self.actor).record(
            "status_change", "invoices", invoice_id,
            old_values={"status": existing.get("status")}, new_values={"status": status},
        )
        return await self.get_invoice(invoice_id)

    async def delete_invoice(self, invoice_id: str) -> None:
        existing = await self.get_invoice(invoice_id)
        await self._repo().delete_items(invoice_id)
        await self._repo().delete(invoice_id)
        existing.pop("items", None)
        await AuditService(self.client, self.actor).record("delete", "invoices", invoice_id, old_values=existing)
