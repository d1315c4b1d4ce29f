from __future__ import annotations

import datetime as dt
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field

from .common import IDModel, Timestamps


# Stationery sales
class StationerySaleCreate(BaseModel):
    """Record a sale of a stationery item; rate/selling_price default from the item."""
    item_id: str = Field(..., description="Stationery item sold")
    quantity: int = Field(..., gt=0)
    rate: Optional[float] = Field(None, ge=0, description="Unit cost; defaults to the item's rate")
    selling_price: Optional[float] = Field(None, ge=0, description="Unit price; defaults to the item's selling price")
    description: Optional[str] = None
    sold_by: Optional[str] = None
    date: dt.date = Field(default_factory=dt.date.today)


class StationerySaleUpdate(BaseModel):
    quantity: Optional[int] = Field(None, gt=0)
    rate: Optional[float] = Field(None, ge=0)
    selling_price: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    sold_by: Optional[str] = None
    date: Optional[dt.date] = None


class StationerySaleRead(IDModel, Timestamps):
    item_id: str
    item_name: Optional[str] = Field(None, description="Name of the stationery item")
    quantity: int
    rate: Optional[float] = None
    selling_price: float
    total_amount: float
    profit: float
    description: Optional[str] = None
    sold_by: Optional[str] = None
    date: dt.date

    class Config:
        from_attributes = True


# Gift daily sales
class GiftSaleCreate(BaseModel):
    """Free-form gift store sale; bpx is the buying price, spx the selling price."""
    item: str = Field(..., min_length=1)
    code: Optional[str] = None
    description: Optional[str] = None
    quantity: int = Field(..., gt=0)
    unit: str = Field("pcs")
    bpx: float = Field(..., ge=0, description="Buying price per unit")
    spx: float = Field(..., ge=0, description="Selling price per unit")
    sold_by: Optional[str] = None
    date: dt.date = Field(default_factory=dt.date.today)


class GiftSaleUpdate(BaseModel):
    item: Optional[str] = Field(None, min_length=1)
    code: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[int] = Field(None, gt=0)
    unit: Optional[str] = None
    bpx: Optional[float] = Field(None, ge=0)
    spx: Optional[float] = Field(None, ge=0)
    sold_by: Optional[str] = None
    date: Optional[dt.date] = None


class GiftSaleRead(GiftSaleCreate, IDModel, Timestamps):
    total_amount: Optional[float] = None
    profit: Optional[float] = None

    class Config:
        from_attributes = True


class SalesSummary(BaseModel):
    """Totals over a ledger for a date range."""
    total_sales: float = 0
    total_profit: float = 0
    items_sold: int = 0
    transactions: int = 0


# Customers
CustomerType = Literal["individual", "business", "wholesale", "vip"]


class CustomerBase(BaseModel):
    full_name: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    company: Optional[str] = None
    customer_type: CustomerType = "individual"
    total_purchases: float = Field(0, ge=0)
    outstanding_balance: float = Field(0)
    credit_limit: float = Field(0, ge=0)
    preferred_contact: Optional[str] = None
    marketing_consent: bool = False
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    last_purchase_date: Optional[dt.date] = None


class CustomerCreate(CustomerBase):
    """Create payload for a customer."""


class CustomerUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    company: Optional[str] = None
    customer_type: Optional[CustomerType] = None
    total_purchases: Optional[float] = Field(None, ge=0)
    outstanding_balance: Optional[float] = None
    credit_limit: Optional[float] = Field(None, ge=0)
    preferred_contact: Optional[str] = None
    marketing_consent: Optional[bool] = None
    notes: Optional[str] = None
    tags: Optional[List[str]] = None
    last_purchase_date: Optional[dt.date] = None


class CustomerRead(CustomerBase, IDModel, Timestamps):
    # Stored addresses are not re-validated on the way out.
    email: Optional[str] = None

    class Config:
        from_attributes = True


class CustomerSummary(BaseModel):
    total_customers: int
    total_purchases: float
    outstanding_balance: float
    active_customers: int = Field(..., description="Customers with a purchase in the last 30 days")
