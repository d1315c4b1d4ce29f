from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from pointart_api.core.deps import get_current_active_user, get_data_client
from pointart_api.db.client import DataClient
from pointart_api.schemas.analytics import AnalyticsRange, DashboardStats, SalesAnalytics
from pointart_api.services.analytics import AnalyticsService
from pointart_api.services.base import Actor

router = APIRouter(prefix="/analytics", tags=["Analytics"])


# PUBLIC_INTERFACE
@router.get(
    "/dashboard",
    response_model=DashboardStats,
    summary="Dashboard statistics",
    description=(
        "Sales and profit across every module, items sold, entries per module, low-stock count "
        "and unread notifications. The same payload is pushed over /ws/dashboard."
    ),
)
async def dashboard(
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> DashboardStats:
    return await AnalyticsService(client, user).dashboard_stats()


# PUBLIC_INTERFACE
@router.get(
    "/sales",
    response_model=SalesAnalytics,
    summary="Sales analytics",
    description="Totals, daily series, growth and trend, category performance and top products for a range.",
)
async def sales_analytics(
    range_key: AnalyticsRange = Query("30days", alias="range"),
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> SalesAnalytics:
    return await AnalyticsService(client, user).sales_analytics(range_key)
