from __future__ import annotations

from datetime import date
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from pointart_api.core.deps import get_current_active_user, get_data_client, require_roles
from pointart_api.db.client import DataClient
from pointart_api.schemas.sales import (
    GiftSaleCreate,
    GiftSaleRead,
    GiftSaleUpdate,
    SalesSummary,
    StationerySaleCreate,
    StationerySaleRead,
    StationerySaleUpdate,
)
from pointart_api.services.base import Actor
from pointart_api.services.sales import SalesService

router = APIRouter(prefix="/sales", tags=["Sales"])


# PUBLIC_INTERFACE
@router.get(
    "/stationery",
    response_model=List[StationerySaleRead],
    summary="List stationery sales",
    description="Stationery sales newest first, optionally within a date range.",
)
async def list_stationery_sales(
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> List[StationerySaleRead]:
    rows = await SalesService(client, user).list_stationery_sales(date_from, date_to, limit=limit, offset=offset)
    return [StationerySaleRead.model_validate(r) for r in rows]


# PUBLIC_INTERFACE
@router.post(
    "/stationery",
    response_model=StationerySaleRead,
    status_code=status.HTTP_201_CREATED,
    summary="Record stationery sale",
    description="Record a sale and take the units out of stock. Fails with 422 when stock is insufficient.",
)
async def record_stationery_sale(
    payload: StationerySaleCreate,
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> StationerySaleRead:
    return StationerySaleRead.model_validate(await SalesService(client, user).record_stationery_sale(payload))


# PUBLIC_INTERFACE
@router.patch("/stationery/{sale_id}", response_model=StationerySaleRead, summary="Update stationery sale")
async def update_stationery_sale(
    payload: StationerySaleUpdate,
    sale_id: str = Path(...),
    admin: Actor = Depends(require_roles("admin")),
    client: DataClient = Depends(get_data_client),
) -> StationerySaleRead:
    return StationerySaleRead.model_validate(
        await SalesService(client, admin).update_stationery_sale(sale_id, payload)
    )


# PUBLIC_INTERFACE
@router.delete(
    "/stationery/{sale_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete stationery sale",
    description="Delete a sale and return its units to stock.",
)
async def delete_stationery_sale(
    sale_id: str = Path(...),
    admin: Actor = Depends(require_roles("admin")),
    client: DataClient = Depends(get_data_client),
) -> None:
    await SalesService(client, admin).delete_stationery_sale(sale_id)


# PUBLIC_INTERFACE
@router.get("/gift-store", response_model=List[GiftSaleRead], summary="List gift store daily sales")
async def list_gift_sales(
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> List[GiftSaleRead]:
    rows = await SalesService(client, user).list_gift_sales(date_from, date_to, limit=limit, offset=offset)
    return [GiftSaleRead.model_validate(r) for r in rows]


# PUBLIC_INTERFACE
@router.post(
    "/gift-store",
    response_model=GiftSaleRead,
    status_code=status.HTTP_201_CREATED,
    summary="Record gift store sale",
)
async def record_gift_sale(
    payload: GiftSaleCreate,
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> GiftSaleRead:
    return GiftSaleRead.model_validate(await SalesService(client, user).record_gift_sale(payload))


# PUBLIC_INTERFACE
@router.patch("/gift-store/{sale_id}", response_model=GiftSaleRead, summary="Update gift store sale")
async def update_gift_sale(
    payload: GiftSaleUpdate,
    sale_id: str = Path(...),
    admin: Actor = Depends(require_roles("admin")),
    client: DataClient = Depends(get_data_client),
) -> GiftSaleRead:
    return GiftSaleRead.model_validate(await SalesService(client, admin).update_gift_sale(sale_id, payload))


# PUBLIC_INTERFACE
@router.delete("/gift-store/{sale_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete gift store sale")
async def delete_gift_sale(
    sale_id: str = Path(...),
    admin: Actor = Depends(require_roles("admin")),
    client: DataClient = Depends(get_data_client),
) -> None:
    await SalesService(client, admin).delete_gift_sale(sale_id)


# PUBLIC_INTERFACE
@router.get(
    "/{ledger}/summary",
    response_model=SalesSummary,
    summary="Sales summary",
    description="Total sales, total profit, items sold and transaction count for one ledger.",
)
async def sales_summary(
    ledger: Literal["stationery", "gift-store"] = Path(...),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> SalesSummary:
    key = "stationery" if ledger == "stationery" else "gift_store"
    return await SalesService(client, user).summary(key, date_from, date_to)
