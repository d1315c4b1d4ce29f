"""
Dashboard statistics and sales analytics computed from the sales ledgers and
the service tables (embroidery, machines, art services).
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Tuple

from pointart_api.db.client import Record
from pointart_api.repositories.inventory import InventoryRepository
from pointart_api.repositories.system import NotificationRepository
from pointart_api.schemas.analytics import (
    CategoryPerformance,
    DailyPoint,
    DashboardStats,
    ModuleStats,
    SalesAnalytics,
    TopProduct,
)
from .base import BaseService
from .settings import SettingsService

logger = logging.getLogger(__name__)

RANGE_DAYS = {"7days": 7, "30days": 30, "90days": 90, "year": 365}
TREND_BAND = 5.0
TOP_PRODUCTS = 5

MODULE_LABELS = {
    "stationery": "Stationery",
    "gift_store": "Gift Store",
    "embroidery": "Embroidery",
    "machines": "Machines",
    "art_services": "Art Services",
}

# module -> (table, name column, sales column, profit column or None)
SERVICE_TABLES = {
    "embroidery": ("embroidery", "job_description", "sales", "profit"),
    "machines": ("machines", "machine_name", "sales", None),
    "art_services": ("art_services", "service_name", "sales", "profit"),
}


@dataclass
class SaleLine:
    """One revenue-bearing entry, whatever table it came from."""
    day: date
    module: str
    name: str
    quantity: int
    sales: float
    profit: float


def as_date(value) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _pct(part: float, whole: float) -> float:
    return round(part / whole * 100, 2) if whole else 0.0


# PUBLIC_INTERFACE
def growth_rate(current: float, previous: float) -> float:
    """Percentage change from previous to current; 100 when starting from zero."""
    if previous:
        return round((current - previous) / previous * 100, 2)
    return 100.0 if current > 0 else 0.0


# PUBLIC_INTERFACE
def trend_for(growth: float) -> str:
    if growth > TREND_BAND:
        return "up"
    if growth < -TREND_BAND:
        return "down"
    return "stable"


class AnalyticsService(BaseService):
    """Aggregations for the dashboard and the sales analytics screen."""

    async def _rows(self, table: str, date_from: Optional[date] = None, date_to: Optional[date] = None) -> List[Record]:
        query = self.client.table(table).select("*")
        if date_from:
            query = query.gte("date", date_from)
        if date_to:
            query = query.lte("date", date_to)
        res = await query.execute()
        return list(res.data)

    async def sale_lines(self, date_from: Optional[date] = None, date_to: Optional[date] = None) -> List[SaleLine]:
        """Every sale in the window from both ledgers and the service tables."""
        lines: List[SaleLine] = []

        items = await InventoryRepository(self.client, "stationery").all()
        names = {r["id"]: r.get("item") or "Unknown" for r in items}
        for r in await self._rows("stationery_sales", date_from, date_to):
            lines.append(SaleLine(
                as_date(r.get("date")), "stationery", names.get(r.get("item_id"), "Unknown"),
                int(r.get("quantity") or 0), float(r.get("total_amount") or 0), float(r.get("profit") or 0),
            ))

        for r in await self._rows("gift_daily_sales", date_from, date_to):
            lines.append(SaleLine(
                as_date(r.get("date")), "gift_store", r.get("item") or "Unknown",
                int(r.get("quantity") or 0), float(r.get("total_amount") or 0), float(r.get("profit") or 0),
            ))

        for module, (table, name_col, sales_col, profit_col) in SERVICE_TABLES.items():
            for r in await self._rows(table, date_from, date_to):
                lines.append(SaleLine(
                    as_date(r.get("date")), module, r.get(name_col) or "Unknown",
                    int(r.get("quantity") or 0),
                    float(r.get(sales_col) or 0),
                    float(r.get(profit_col) or 0) if profit_col else 0.0,
                ))
        return lines

    async def low_stock_count(self) -> int:
        settings = await SettingsService(self.client).notification_settings()
        stationery = await InventoryRepository(self.client, "stationery").low_stock_stationery()
        gifts = await InventoryRepository(self.client, "gift_store").at_or_below("quantity", settings.low_stock_threshold)
        return len(stationery) + len(gifts)

    # PUBLIC_INTERFACE
    async def dashboard_stats(self) -> DashboardStats:
        """Lifetime totals per module plus stock and notification counters."""
        modules: Dict[str, ModuleStats] = {key: ModuleStats() for key in MODULE_LABELS}
        items_sold = 0
        for line in await self.sale_lines():
            m = modules[line.module]
            m.sales += line.sales
            m.profit += line.profit
            m.entries += 1
            if line.module in ("stationery", "gift_store"):
                items_sold += line.quantity

        for m in modules.values():
            m.sales = round(m.sales, 2)
            m.profit = round(m.profit, 2)

        return DashboardStats(
            total_sales=round(sum(m.sales for m in modules.values()), 2),
            total_profit=round(sum(m.profit for m in modules.values()), 2),
            items_sold=items_sold,
            low_stock_count=await self.low_stock_count(),
            unread_notifications=await NotificationRepository(self.client).unread_count(),
            modules=modules,
        )

    # PUBLIC_INTERFACE
    async def sales_analytics(self, range_key: str = "30days", today: Optional[date] = None) -> SalesAnalytics:
        """
        Sales analytics over the last N days ending today.

        Growth always compares the last 7 days with the 7 before them, so the
        fetch window reaches back at least 14 days whatever the range.
        """
        today = today or date.today()
        days = RANGE_DAYS[range_key]
        start = today - timedelta(days=days - 1)
        fetch_from = min(start, today - timedelta(days=13))
        lines = await self.sale_lines(fetch_from, today)

        in_range = [ln for ln in lines if start <= ln.day <= today]
        total_sales = sum(ln.sales for ln in in_range)
        total_profit = sum(ln.profit for ln in in_range)

        daily: Dict[date, DailyPoint] = {
            start + timedelta(days=i): DailyPoint(date=start + timedelta(days=i)) for i in range(days)
        }
        for ln in in_range:
            point = daily[ln.day]
            point.sales = round(point.sales + ln.sales, 2)
            point.profit = round(point.profit + ln.profit, 2)
            point.transactions += 1

        last7 = sum(ln.sales for ln in lines if today - timedelta(days=6) <= ln.day <= today)
        prev7 = sum(ln.sales for ln in lines if today - timedelta(days=13) <= ln.day <= today - timedelta(days=7))
        growth = growth_rate(last7, prev7)

        by_module: Dict[str, Tuple[float, float]] = defaultdict(lambda: (0.0, 0.0))
        by_product: Dict[Tuple[str, str], Tuple[int, float]] = defaultdict(lambda: (0, 0.0))
        for ln in in_range:
            s, p = by_module[ln.module]
            by_module[ln.module] = (s + ln.sales, p + ln.profit)
            q, r = by_product[(ln.name, ln.module)]
            by_product[(ln.name, ln.module)] = (q + ln.quantity, r + ln.sales)

        categories = [
            CategoryPerformance(
                category=MODULE_LABELS[module],
                sales=round(s, 2),
                profit=round(p, 2),
                share=_pct(s, total_sales),
            )
            for module, (s, p) in sorted(by_module.items(), key=lambda kv: kv[1][0], reverse=True)
        ]
        top = sorted(by_product.items(), key=lambda kv: kv[1][1], reverse=True)[:TOP_PRODUCTS]
        top_products = [
            TopProduct(name=name, module=module, quantity=q, revenue=round(r, 2))
            for (name, module), (q, r) in top
        ]

        transactions = len(in_range)
        return SalesAnalytics(
            range=range_key,
            start_date=start,
            end_date=today,
            total_sales=round(total_sales, 2),
            total_profit=round(total_profit, 2),
            transactions=transactions,
            average_order_value=round(total_sales / transactions, 2) if transactions else 0.0,
            profit_margin=_pct(total_profit, total_sales),
            growth_rate=growth,
            trend=trend_for(growth),
            daily=[daily[d] for d in sorted(daily)],
            categories=categories,
            top_products=top_products,
        )
