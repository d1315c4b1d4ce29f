"""
Inventory category routers.

One router per category is built from the category registry so the five
tables share list/get/create/update/delete endpoints while keeping their own
request and response schemas in the OpenAPI document.
"""

# Endpoint signatures reference per-category schema classes held in closures,
# so annotations must stay real objects here.

import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from pointart_api.core.deps import get_current_active_user, get_data_client, require_roles
from pointart_api.db.client import DataClient
from pointart_api.schemas.inventory import ProductCategoryCreate, ProductCategoryRead
from pointart_api.services.base import Actor
from pointart_api.services.inventory import CATEGORIES, InventoryCategory, InventoryService

router = APIRouter(prefix="/inventory", tags=["Inventory"])


# PUBLIC_INTERFACE
@router.get(
    "/categories",
    response_model=List[ProductCategoryRead],
    summary="List product categories",
    description="Product categories, optionally only those of one inventory module.",
)
async def list_product_categories(
    module: Optional[str] = Query(None, description="Inventory module, e.g. stationery"),
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> List[ProductCategoryRead]:
    rows = await InventoryService(client, user).list_product_categories(module)
    return [ProductCategoryRead.model_validate(r) for r in rows]


# PUBLIC_INTERFACE
@router.post(
    "/categories",
    response_model=ProductCategoryRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create product category",
)
async def create_product_category(
    payload: ProductCategoryCreate,
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> ProductCategoryRead:
    row = await InventoryService(client, user).create_product_category(payload)
    return ProductCategoryRead.model_validate(row)


# PUBLIC_INTERFACE
def build_category_router(category: InventoryCategory) -> APIRouter:
    """Return the CRUD router for one inventory category, mounted at /inventory/<key>."""
    sub = APIRouter(prefix=f"/{category.key}")
    CreateSchema = category.create_schema
    UpdateSchema = category.update_schema
    ReadSchema = category.read_schema

    @sub.get(
        "",
        response_model=List[ReadSchema],
        summary=f"List {category.label} entries",
        description="Newest first. Search matches the category's name column (item, job, machine or service name).",
        name=f"list_{category.key}",
    )
    async def list_entries(
        q: Optional[str] = Query(None, description="Search text"),
        product_category: Optional[str] = Query(None, alias="category", description="Product category filter"),
        date_from: Optional[dt.date] = Query(None),
        date_to: Optional[dt.date] = Query(None),
        limit: int = Query(100, ge=1, le=1000),
        offset: int = Query(0, ge=0),
        user: Actor = Depends(get_current_active_user),
        client: DataClient = Depends(get_data_client),
    ):
        rows = await InventoryService(client, user).list_items(
            category,
            q=q,
            product_category=product_category,
            date_from=date_from,
            date_to=date_to,
            limit=limit,
            offset=offset,
        )
        return [ReadSchema.model_validate(r) for r in rows]

    @sub.get("/{item_id}", response_model=ReadSchema, summary=f"Get {category.label} entry",
             name=f"get_{category.key}")
    async def get_entry(
        item_id: str = Path(...),
        user: Actor = Depends(get_current_active_user),
        client: DataClient = Depends(get_data_client),
    ):
        return ReadSchema.model_validate(await InventoryService(client, user).get_item(category, item_id))

    @sub.post(
        "",
        response_model=ReadSchema,
        status_code=status.HTTP_201_CREATED,
        summary=f"Create {category.label} entry",
        name=f"create_{category.key}",
    )
    async def create_entry(
        payload: CreateSchema,
        user: Actor = Depends(get_current_active_user),
        client: DataClient = Depends(get_data_client),
    ):
        return ReadSchema.model_validate(await InventoryService(client, user).create_item(category, payload))

    @sub.patch(
        "/{item_id}",
        response_model=ReadSchema,
        summary=f"Update {category.label} entry",
        description="Partial update; derived amounts are recomputed. Requires admin role.",
        name=f"update_{category.key}",
    )
    async def update_entry(
        payload: UpdateSchema,
        item_id: str = Path(...),
        admin: Actor = Depends(require_roles("admin")),
        client: DataClient = Depends(get_data_client),
    ):
        return ReadSchema.model_validate(
            await InventoryService(client, admin).update_item(category, item_id, payload)
        )

    @sub.delete(
        "/{item_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary=f"Delete {category.label} entry",
        description="Requires admin role.",
        name=f"delete_{category.key}",
    )
    async def delete_entry(
        item_id: str = Path(...),
        admin: Actor = Depends(require_roles("admin")),
        client: DataClient = Depends(get_data_client),
    ) -> None:
        await InventoryService(client, admin).delete_item(category, item_id)

    return sub


for _category in CATEGORIES.values():
    router.include_router(build_category_router(_category))
