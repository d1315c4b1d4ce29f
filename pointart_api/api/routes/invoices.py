from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from fastapi.responses import StreamingResponse

from pointart_api.core.deps import get_current_active_user, get_data_client, require_roles
from pointart_api.db.client import DataClient
from pointart_api.schemas.invoices import (
    InvoiceCreate,
    InvoiceRead,
    InvoiceStatus,
    InvoiceStatusUpdate,
    InvoiceUpdate,
)
from pointart_api.services.base import Actor
from pointart_api.services.exports import MEDIA_TYPES, render_invoice_pdf
from pointart_api.services.invoices import InvoiceService

router = APIRouter(prefix="/invoices", tags=["Invoices"])


# PUBLIC_INTERFACE
@router.get("", response_model=List[InvoiceRead], summary="List invoices", description="Headers only, newest first.")
async def list_invoices(
    status_filter: Optional[InvoiceStatus] = Query(None, alias="status"),
    customer: Optional[str] = Query(None, description="Customer name search"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> List[InvoiceRead]:
    rows = await InvoiceService(client, user).list_invoices(
        status=status_filter, customer=customer, limit=limit, offset=offset
    )
    return [InvoiceRead.model_validate(r) for r in rows]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=InvoiceRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create invoice",
    description=(
        "Create an invoice with its line items. Invoice and reference numbers are generated, "
        "line amounts, total and amount in words are computed."
    ),
)
async def create_invoice(
    payload: InvoiceCreate,
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> InvoiceRead:
    return InvoiceRead.model_validate(await InvoiceService(client, user).create_invoice(payload))


# PUBLIC_INTERFACE
@router.get("/{invoice_id}", response_model=InvoiceRead, summary="Get invoice with items")
async def get_invoice(
    invoice_id: str = Path(...),
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> InvoiceRead:
    return InvoiceRead.model_validate(await InvoiceService(client, user).get_invoice(invoice_id))


# PUBLIC_INTERFACE
@router.get(
    "/{invoice_id}/pdf",
    summary="Printable invoice",
    description="Render one invoice as a PDF download.",
    response_class=StreamingResponse,
)
async def invoice_pdf(
    invoice_id: str = Path(...),
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> StreamingResponse:
    invoice = await InvoiceService(client, user).get_invoice(invoice_id)
    content = render_invoice_pdf(invoice)
    filename = f"invoice-{invoice['invoice_number']}.pdf"
    return StreamingResponse(
        iter([content]),
        media_type=MEDIA_TYPES["pdf"],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# PUBLIC_INTERFACE
@router.put(
    "/{invoice_id}",
    response_model=InvoiceRead,
    summary="Update invoice",
    description="Update header fields; when items are supplied they replace the existing lines.",
)
async def update_invoice(
    payload: InvoiceUpdate,
    invoice_id: str = Path(...),
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> InvoiceRead:
    return InvoiceRead.model_validate(await InvoiceService(client, user).update_invoice(invoice_id, payload))


# PUBLIC_INTERFACE
@router.patch("/{invoice_id}/status", response_model=InvoiceRead, summary="Change invoice status")
async def set_invoice_status(
    payload: InvoiceStatusUpdate,
    invoice_id: str = Path(...),
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> InvoiceRead:
    return InvoiceRead.model_validate(await InvoiceService(client, user).set_status(invoice_id, payload.status))


# PUBLIC_INTERFACE
@router.delete(
    "/{invoice_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete invoice",
    description="Delete an invoice and its line items. Requires admin role.",
)
async def delete_invoice(
    invoice_id: str = Path(...),
    admin: Actor = Depends(require_roles("admin")),
    client: DataClient = Depends(get_data_client),
) -> None:
    await InvoiceService(client, admin).delete_invoice(invoice_id)
