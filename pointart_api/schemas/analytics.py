from __future__ import annotations

import datetime as dt
from typing import Dict, List, Literal

from pydantic import BaseModel, Field

AnalyticsRange = Literal["7days", "30days", "90days", "year"]


class ModuleStats(BaseModel):
    """Per-module totals on the dashboard."""
    sales: float = 0
    profit: float = 0
    entries: int = 0


class DashboardStats(BaseModel):
    """Headline numbers for the dashboard and its periodic push."""
    total_sales: float = 0
    total_profit: float = 0
    items_sold: int = 0
    low_stock_count: int = 0
    unread_notifications: int = 0
    modules: Dict[str, ModuleStats] = Field(default_factory=dict)
    at: dt.datetime = Field(default_factory=lambda: dt.datetime.now(dt.timezone.utc))


class DailyPoint(BaseModel):
    date: dt.date
    sales: float = 0
    profit: float = 0
    transactions: int = 0


class CategoryPerformance(BaseModel):
    category: str
    sales: float = 0
    profit: float = 0
    share: float = Field(0, description="Share of total sales, percent")


class TopProduct(BaseModel):
    name: str
    module: str
    quantity: int = 0
    revenue: float = 0


class SalesAnalytics(BaseModel):
    range: AnalyticsRange
    start_date: dt.date
    end_date: dt.date
    total_sales: float = 0
    total_profit: float = 0
    transactions: int = 0
    average_order_value: float = 0
    profit_margin: float = Field(0, description="Profit as a percentage of sales")
    growth_rate: float = Field(0, description="Last 7 days vs the previous 7, percent")
    trend: Literal["up", "down", "stable"] = "stable"
    daily: List[DailyPoint] = Field(default_factory=list)
    categories: List[CategoryPerformance] = Field(default_factory=list)
    top_products: List[TopProduct] = Field(default_factory=list)
