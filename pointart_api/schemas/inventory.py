from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field

from .common import IDModel, Timestamps


class _Audited(IDModel, Timestamps):
    updated_by: Optional[str] = Field(None, description="Last editor (user id)")

    class Config:
        from_attributes = True


# Stationery
class StationeryBase(BaseModel):
    item: str = Field(..., min_length=1, description="Item name")
    category: str = Field(..., min_length=1, description="Product category")
    description: Optional[str] = Field(None)
    quantity: int = Field(0, ge=0, description="Quantity received")
    rate: float = Field(0, ge=0, description="Unit cost price")
    selling_price: Optional[float] = Field(None, ge=0, description="Unit selling price")
    stock: int = Field(0, ge=0, description="Units currently in stock")
    low_stock_threshold: int = Field(10, ge=0, description="Alert when stock falls to this level")
    sensitivity: str = Field("normal", description="Handling sensitivity label")
    status: Optional[str] = Field(None)
    sold_by: Optional[str] = Field(None)
    date: dt.date = Field(default_factory=dt.date.today)


class StationeryCreate(StationeryBase):
    """Create payload for a stationery item."""


class StationeryUpdate(BaseModel):
    """Partial update for a stationery item."""
    item: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=0)
    rate: Optional[float] = Field(None, ge=0)
    selling_price: Optional[float] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    sensitivity: Optional[str] = None
    status: Optional[str] = None
    sold_by: Optional[str] = None
    date: Optional[dt.date] = None


class StationeryRead(StationeryBase, _Audited):
    """Stationery item with derived profit per unit."""
    profit_per_unit: Optional[float] = Field(None, description="selling_price - rate")


# Gift store
class GiftStoreBase(BaseModel):
    item: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    description: Optional[str] = Field(None)
    quantity: int = Field(0, ge=0)
    rate: float = Field(0, ge=0, description="Unit cost price")
    selling_price: Optional[float] = Field(None, ge=0)
    status: Optional[str] = Field(None)
    sold_by: Optional[str] = Field(None)
    date: dt.date = Field(default_factory=dt.date.today)


class GiftStoreCreate(GiftStoreBase):
    """Create payload for a gift store item."""


class GiftStoreUpdate(BaseModel):
    item: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=0)
    rate: Optional[float] = Field(None, ge=0)
    selling_price: Optional[float] = Field(None, ge=0)
    status: Optional[str] = None
    sold_by: Optional[str] = None
    date: Optional[dt.date] = None


class GiftStoreRead(GiftStoreBase, _Audited):
    profit: Optional[float] = Field(None, description="selling_price - rate")


# Embroidery
class EmbroideryBase(BaseModel):
    job_description: str = Field(..., min_length=1)
    quotation: float = Field(0, ge=0, description="Price quoted to the customer")
    deposit: float = Field(0, ge=0, description="Amount paid up front")
    quantity: int = Field(1, ge=0)
    rate: float = Field(0, ge=0)
    expenditure: float = Field(0, ge=0, description="Material and labour cost")
    done_by: Optional[str] = Field(None)
    date: dt.date = Field(default_factory=dt.date.today)


class EmbroideryCreate(EmbroideryBase):
    """Create payload for an embroidery job."""


class EmbroideryUpdate(BaseModel):
    job_description: Optional[str] = Field(None, min_length=1)
    quotation: Optional[float] = Field(None, ge=0)
    deposit: Optional[float] = Field(None, ge=0)
    quantity: Optional[int] = Field(None, ge=0)
    rate: Optional[float] = Field(None, ge=0)
    expenditure: Optional[float] = Field(None, ge=0)
    done_by: Optional[str] = None
    date: Optional[dt.date] = None


class EmbroideryRead(EmbroideryBase, _Audited):
    balance: Optional[float] = None
    profit: Optional[float] = None
    sales: Optional[float] = None


# Machines
class MachineBase(BaseModel):
    machine_name: str = Field(..., min_length=1)
    service_description: str = Field(..., min_length=1)
    quantity: int = Field(1, ge=0)
    rate: float = Field(0, ge=0)
    done_by: Optional[str] = Field(None)
    date: dt.date = Field(default_factory=dt.date.today)


class MachineCreate(MachineBase):
    """Create payload for a machine service entry."""


class MachineUpdate(BaseModel):
    machine_name: Optional[str] = Field(None, min_length=1)
    service_description: Optional[str] = Field(None, min_length=1)
    quantity: Optional[int] = Field(None, ge=0)
    rate: Optional[float] = Field(None, ge=0)
    done_by: Optional[str] = None
    date: Optional[dt.date] = None


class MachineRead(MachineBase, _Audited):
    sales: Optional[float] = Field(None, description="quantity * rate")


# Art services
class ArtServiceBase(BaseModel):
    service_name: str = Field(..., min_length=1)
    description: Optional[str] = Field(None)
    quantity: int = Field(1, ge=0)
    rate: float = Field(0, ge=0)
    deposit: float = Field(0, ge=0)
    expenditure: float = Field(0, ge=0)
    done_by: Optional[str] = Field(None)
    date: dt.date = Field(default_factory=dt.date.today)


class ArtServiceCreate(ArtServiceBase):
    """Create payload for an art service job."""


class ArtServiceUpdate(BaseModel):
    service_name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=0)
    rate: Optional[float] = Field(None, ge=0)
    deposit: Optional[float] = Field(None, ge=0)
    expenditure: Optional[float] = Field(None, ge=0)
    done_by: Optional[str] = None
    date: Optional[dt.date] = None


class ArtServiceRead(ArtServiceBase, _Audited):
    quotation: Optional[float] = None
    balance: Optional[float] = None
    profit: Optional[float] = None
    sales: Optional[float] = None


# Product categories
class ProductCategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Category name")
    module: str = Field(..., description="Inventory module the category belongs to")
    description: Optional[str] = Field(None)


class ProductCategoryRead(ProductCategoryCreate, IDModel):
    class Config:
        from_attributes = True
