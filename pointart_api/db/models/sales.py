from __future__ import annotations

import datetime as dt
from typing import Optional

from sqlalchemy import Boolean, Date, ForeignKey, Integer, Numeric, Text, text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from pointart_api.db.base import Base, TimestampMixin, UUIDPkMixin

Money = Numeric(18, 2, asdecimal=False)


class StationerySale(UUIDPkMixin, TimestampMixin, Base):
    """A sale drawn from stationery stock."""
    __tablename__ = "stationery_sales"

    item_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("stationery.id", ondelete="CASCADE"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    rate: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    selling_price: Mapped[float] = mapped_column(Money, nullable=False)
    total_amount: Mapped[float] = mapped_column(Money, nullable=False)
    profit: Mapped[float] = mapped_column(Money, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sold_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, server_default=text("CURRENT_DATE"))


class GiftDailySale(UUIDPkMixin, TimestampMixin, Base):
    """Free-form gift store sale (bpx = buying price, spx = selling price)."""
    __tablename__ = "gift_daily_sales"

    item: Mapped[str] = mapped_column(Text, nullable=False)
    code: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit: Mapped[str] = mapped_column(Text, nullable=False, server_default=text("'pcs'"))
    bpx: Mapped[float] = mapped_column(Money, nullable=False)
    spx: Mapped[float] = mapped_column(Money, nullable=False)
    total_amount: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    profit: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    sold_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, server_default=text("CURRENT_DATE"))


class Customer(UUIDPkMixin, TimestampMixin, Base):
    """Customer master with running purchase and credit figures."""
    __tablename__ = "customers"

    full_name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    company: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    customer_type: Mapped[str] = mapped_column(Text, nullable=False, server_default=text("'individual'"))
    total_purchases: Mapped[float] = mapped_column(Money, nullable=False, server_default=text("0"))
    outstanding_balance: Mapped[float] = mapped_column(Money, nullable=False, server_default=text("0"))
    credit_limit: Mapped[float] = mapped_column(Money, nullable=False, server_default=text("0"))
    preferred_contact: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    marketing_consent: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("false"))
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tags: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    last_purchase_date: Mapped[Optional[dt.date]] = mapped_column(Date, nullable=True)


class Invoice(UUIDPkMixin, TimestampMixin, Base):
    """Invoice header."""
    __tablename__ = "invoices"

    invoice_number: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    reference_number: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    customer_name: Mapped[str] = mapped_column(Text, nullable=False)
    invoice_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    total_amount: Mapped[float] = mapped_column(Money, nullable=False, server_default=text("0"))
    amount_in_words: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(Text, nullable=False, server_default=text("'draft'"))
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    updated_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class InvoiceItem(UUIDPkMixin, TimestampMixin, Base):
    """Invoice line item."""
    __tablename__ = "invoice_items"

    invoice_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True
    )
    serial_number: Mapped[int] = mapped_column(Integer, nullable=False)
    particulars: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    quantity: Mapped[float] = mapped_column(Numeric(18, 3, asdecimal=False), nullable=False)
    rate: Mapped[float] = mapped_column(Money, nullable=False)
    amount: Mapped[float] = mapped_column(Money, nullable=False)
