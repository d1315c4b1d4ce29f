from __future__ import annotations

import datetime as dt
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .common import IDModel, Timestamps

InvoiceStatus = Literal["draft", "sent", "paid", "cancelled"]


class InvoiceItemIn(BaseModel):
    """One invoice line; amount is computed server side."""
    particulars: str = Field(..., min_length=1)
    description: Optional[str] = None
    quantity: float = Field(..., gt=0)
    rate: float = Field(..., ge=0)


class InvoiceItemRead(InvoiceItemIn, IDModel):
    invoice_id: str
    serial_number: int
    amount: float

    class Config:
        from_attributes = True


class InvoiceCreate(BaseModel):
    customer_name: str = Field(..., min_length=1)
    invoice_date: dt.date = Field(default_factory=dt.date.today)
    status: InvoiceStatus = "draft"
    notes: Optional[str] = None
    items: List[InvoiceItemIn] = Field(..., min_length=1)


class InvoiceUpdate(BaseModel):
    """Header changes; when `items` is given the line items are replaced."""
    customer_name: Optional[str] = Field(None, min_length=1)
    invoice_date: Optional[dt.date] = None
    notes: Optional[str] = None
    items: Optional[List[InvoiceItemIn]] = Field(None, min_length=1)


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus


class InvoiceRead(IDModel, Timestamps):
    invoice_number: str
    reference_number: str
    customer_name: str
    invoice_date: dt.date
    total_amount: float
    amount_in_words: Optional[str] = None
    status: str
    notes: Optional[str] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    items: List[InvoiceItemRead] = Field(default_factory=list)

    class Config:
        from_attributes = True
