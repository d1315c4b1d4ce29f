import asyncio
from datetime import date, timedelta

import pytest

from pointart_api.db.mock_client import MockDataClient
from pointart_api.services.analytics import AnalyticsService, growth_rate, trend_for

TODAY = date(2024, 6, 30)


def _seed(db, table, rows):
    asyncio.run(db.table(table).insert(rows).execute())


@pytest.mark.parametrize(
    "current, previous, expected",
    [(150, 100, 50.0), (50, 100, -50.0), (10, 0, 100.0), (0, 0, 0.0)],
)
def test_growth_rate(current, previous, expected):
    assert growth_rate(current, previous) == expected


def test_trend_band():
    assert trend_for(5.01) == "up"
    assert trend_for(5) == "stable"
    assert trend_for(-5) == "stable"
    assert trend_for(-7) == "down"


def test_daily_series_is_zero_filled():
    db = MockDataClient()
    _seed(db, "gift_daily_sales", [
        {"item": "Mug", "quantity": 2, "total_amount": 20000, "profit": 8000, "date": TODAY},
    ])
    result = asyncio.run(AnalyticsService(db).sales_analytics("7days", today=TODAY))
    assert [p.date for p in result.daily] == [TODAY - timedelta(days=6 - i) for i in range(7)]
    assert [p.sales for p in result.daily] == [0, 0, 0, 0, 0, 0, 20000]
    assert result.start_date == TODAY - timedelta(days=6)


def test_sales_analytics_totals_categories_and_growth():
    db = MockDataClient()
    _seed(db, "stationery", [{"id": "pen", "item": "Pen", "stock": 100}])
    _seed(db, "stationery_sales", [
        {"item_id": "pen", "quantity": 10, "total_amount": 5000, "profit": 2000, "date": TODAY},
        {"item_id": "pen", "quantity": 4, "total_amount": 2000, "profit": 800, "date": TODAY - timedelta(days=9)},
    ])
    _seed(db, "embroidery", [
        {"job_description": "Badges", "quantity": 1, "sales": 15000, "profit": 5000, "date": TODAY - timedelta(days=2)},
    ])
    # Outside the 30 day window; must not count.
    _seed(db, "machines", [
        {"machine_name": "Printer", "quantity": 1, "sales": 99999, "date": TODAY - timedelta(days=45)},
    ])

    result = asyncio.run(AnalyticsService(db).sales_analytics("30days", today=TODAY))
    assert result.total_sales == 22000
    assert result.total_profit == 7800
    assert result.transactions == 3
    assert result.average_order_value == round(22000 / 3, 2)
    assert [c.category for c in result.categories] == ["Embroidery", "Stationery"]
    assert result.categories[0].share == round(15000 / 22000 * 100, 2)
    assert result.top_products[0].name == "Badges"
    assert (result.top_products[1].name, result.top_products[1].quantity) == ("Pen", 14)
    # last 7 days: 20000, previous 7: 2000
    assert result.growth_rate == 900.0
    assert result.trend == "up"


def test_dashboard_stats(client, user_headers, db):
    _seed(db, "gift_daily_sales", [
        {"item": "Card", "quantity": 3, "total_amount": 9000, "profit": 3000, "date": TODAY},
    ])
    _seed(db, "machines", [{"machine_name": "Laminator", "quantity": 2, "sales": 4000, "date": TODAY}])
    _seed(db, "stationery", [{"item": "Glue", "category": "Adhesives", "stock": 1, "low_stock_threshold": 5}])

    stats = client.get("/api/v1/analytics/dashboard", headers=user_headers).json()
    assert stats["total_sales"] == 13000
    assert stats["total_profit"] == 3000
    assert stats["items_sold"] == 3
    assert stats["low_stock_count"] == 1
    assert stats["modules"]["machines"]["entries"] == 1


def test_sales_analytics_endpoint_rejects_unknown_range(client, user_headers):
    assert client.get("/api/v1/analytics/sales", params={"range": "forever"}, headers=user_headers).status_code == 422
    resp = client.get("/api/v1/analytics/sales", params={"range": "7days"}, headers=user_headers)
    assert resp.status_code == 200
    assert len(resp.json()["daily"]) == 7
