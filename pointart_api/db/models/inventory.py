from __future__ import annotations

import datetime as dt
from typing import Optional

from sqlalchemy import Date, Integer, Numeric, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from pointart_api.db.base import Base, TimestampMixin, UUIDPkMixin

Money = Numeric(18, 2, asdecimal=False)


class Stationery(UUIDPkMixin, TimestampMixin, Base):
    """Stationery stock item; `stock` is decremented by stationery sales."""
    __tablename__ = "stationery"

    item: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    rate: Mapped[float] = mapped_column(Money, nullable=False, server_default=text("0"))
    selling_price: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    profit_per_unit: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    low_stock_threshold: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("10"))
    sensitivity: Mapped[str] = mapped_column(Text, nullable=False, server_default=text("'normal'"))
    status: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sold_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, server_default=text("CURRENT_DATE"))
    updated_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class GiftStoreItem(UUIDPkMixin, TimestampMixin, Base):
    """Gift store stock item."""
    __tablename__ = "gift_store"

    item: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    rate: Mapped[float] = mapped_column(Money, nullable=False, server_default=text("0"))
    selling_price: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    profit: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    status: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sold_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, server_default=text("CURRENT_DATE"))
    updated_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class EmbroideryJob(UUIDPkMixin, TimestampMixin, Base):
    """Embroidery job with quotation, deposit and costs."""
    __tablename__ = "embroidery"

    job_description: Mapped[str] = mapped_column(Text, nullable=False)
    quotation: Mapped[float] = mapped_column(Money, nullable=False, server_default=text("0"))
    deposit: Mapped[float] = mapped_column(Money, nullable=False, server_default=text("0"))
    balance: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("1"))
    rate: Mapped[float] = mapped_column(Money, nullable=False, server_default=text("0"))
    expenditure: Mapped[float] = mapped_column(Money, nullable=False, server_default=text("0"))
    profit: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    sales: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    done_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, server_default=text("CURRENT_DATE"))
    updated_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class MachineService(UUIDPkMixin, TimestampMixin, Base):
    """Machine service job (printing, photocopy, lamination...)."""
    __tablename__ = "machines"

    machine_name: Mapped[str] = mapped_column(Text, nullable=False)
    service_description: Mapped[str] = mapped_column(Text, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("1"))
    rate: Mapped[float] = mapped_column(Money, nullable=False, server_default=text("0"))
    sales: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    done_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, server_default=text("CURRENT_DATE"))
    updated_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class ArtService(UUIDPkMixin, TimestampMixin, Base):
    """Art service job."""
    __tablename__ = "art_services"

    service_name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("1"))
    rate: Mapped[float] = mapped_column(Money, nullable=False, server_default=text("0"))
    quotation: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    deposit: Mapped[float] = mapped_column(Money, nullable=False, server_default=text("0"))
    balance: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    expenditure: Mapped[float] = mapped_column(Money, nullable=False, server_default=text("0"))
    profit: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    sales: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    done_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, server_default=text("CURRENT_DATE"))
    updated_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class ProductCategory(UUIDPkMixin, TimestampMixin, Base):
    """Named category scoped to one inventory module."""
    __tablename__ = "product_categories"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    module: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
