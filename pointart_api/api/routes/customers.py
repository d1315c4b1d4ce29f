from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from pointart_api.core.deps import get_current_active_user, get_data_client, require_roles
from pointart_api.db.client import DataClient
from pointart_api.schemas.sales import (
    CustomerCreate,
    CustomerRead,
    CustomerSummary,
    CustomerType,
    CustomerUpdate,
)
from pointart_api.services.base import Actor
from pointart_api.services.customers import CustomerService

router = APIRouter(prefix="/customers", tags=["Customers"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[CustomerRead],
    summary="List customers",
    description="Search by name and filter by customer type.",
)
async def list_customers(
    q: Optional[str] = Query(None, description="Search text"),
    customer_type: Optional[CustomerType] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> List[CustomerRead]:
    rows = await CustomerService(client, user).list_customers(
        q=q, customer_type=customer_type, limit=limit, offset=offset
    )
    return [CustomerRead.model_validate(r) for r in rows]


# PUBLIC_INTERFACE
@router.get("/summary", response_model=CustomerSummary, summary="Customer summary")
async def customer_summary(
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> CustomerSummary:
    return await CustomerService(client, user).summary()


# PUBLIC_INTERFACE
@router.get("/{customer_id}", response_model=CustomerRead, summary="Get customer")
async def get_customer(
    customer_id: str = Path(...),
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> CustomerRead:
    return CustomerRead.model_validate(await CustomerService(client, user).get_customer(customer_id))


# PUBLIC_INTERFACE
@router.post("", response_model=CustomerRead, status_code=status.HTTP_201_CREATED, summary="Create customer")
async def create_customer(
    payload: CustomerCreate,
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> CustomerRead:
    return CustomerRead.model_validate(await CustomerService(client, user).create_customer(payload))


# PUBLIC_INTERFACE
@router.patch("/{customer_id}", response_model=CustomerRead, summary="Update customer")
async def update_customer(
    payload: CustomerUpdate,
    customer_id: str = Path(...),
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> CustomerRead:
    return CustomerRead.model_validate(await CustomerService(client, user).update_customer(customer_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/{customer_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete customer",
    description="Requires admin role.",
)
async def delete_customer(
    customer_id: str = Path(...),
    admin: Actor = Depends(require_roles("admin")),
    client: DataClient = Depends(get_data_client),
) -> None:
    await CustomerService(client, admin).delete_customer(customer_id)
