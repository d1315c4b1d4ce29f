import asyncio
from datetime import date, timedelta

from pointart_api.core.settings import get_app_settings
from pointart_api.db.mock_client import MockDataClient
from pointart_api.schemas.notifications import NotificationCreate
from pointart_api.services.notifications import NotificationService, describe_items

TODAY = date(2024, 6, 12)


def run(coro):
    return asyncio.run(coro)


def test_describe_items():
    assert describe_items(["Pen"]) == "Pen"
    assert describe_items(["A", "B", "C"]) == "A, B, C"
    assert describe_items(["A", "B", "C", "D", "E"]) == "A, B, C and 2 more"


def test_low_stock_check_groups_by_module():
    db = MockDataClient()
    run(db.table("stationery").insert([
        {"item": "Glue", "stock": 0, "low_stock_threshold": 5},
        {"item": "Pencil", "stock": 3, "low_stock_threshold": 5},
        {"item": "Ruler", "stock": 40, "low_stock_threshold": 5},
    ]).execute())
    run(db.table("gift_store").insert([{"item": "Mug", "quantity": 2}, {"item": "Frame", "quantity": 30}]).execute())

    created = run(NotificationService(db).check_low_stock(gift_threshold=10))
    by_title = {n["title"]: n for n in created}
    stationery = by_title["Low Stock Alert: Stationery"]
    assert stationery["priority"] == "high"
    assert stationery["message"].startswith("2 item(s) running low: ")
    assert {i["name"] for i in stationery["data"]["items"]} == {"Glue", "Pencil"}
    gifts = by_title["Low Stock Alert: Gift Store"]
    assert gifts["priority"] == "medium"
    assert gifts["message"] == "1 item(s) running low: Mug"
    assert run(NotificationService(db).unread_count()) == 2


def _seed_sales(db, amount, day=TODAY):
    run(db.table("gift_daily_sales").insert({"item": "Hamper", "quantity": 1, "total_amount": amount,
                                             "date": day}).execute())


def test_milestones_are_announced_once():
    db = MockDataClient()
    _seed_sales(db, 1_200_000)
    service = NotificationService(db)

    created = run(service.check_sales_milestones(TODAY))
    titles = sorted(n["title"] for n in created)
    assert titles == ["Daily Sales Target Achieved!", "Revenue Milestone Reached!"]
    daily = next(n for n in created if n["title"].startswith("Daily"))
    assert daily["message"] == (
        "You've reached today's sales target of UGX 500,000. Total sales: UGX 1,200,000"
    )
    assert daily["data"] == {"type": "daily_target", "target": 500000, "achieved": 1200000}

    assert run(service.check_sales_milestones(TODAY)) == []

    # The lifetime milestone comes back the next day; the daily target does not.
    created = run(service.check_sales_milestones(TODAY + timedelta(days=1)))
    assert [n["data"]["type"] for n in created] == ["revenue_milestone"]


def test_checks_respect_notification_settings(client, admin_headers, db):
    _seed_sales(db, 600_000, day=date.today())
    run(db.table("gift_store").insert({"item": "Mug", "quantity": 1}).execute())

    resp = client.put("/api/v1/notifications/settings", json={"low_stock_alerts": False}, headers=admin_headers)
    assert resp.status_code == 200
    created = client.post("/api/v1/notifications/check", headers=admin_headers).json()["created"]
    assert [n["type"] for n in created] == ["sales_milestone"]


def test_notifications_are_trimmed(monkeypatch):
    monkeypatch.setattr(get_app_settings(), "MAX_NOTIFICATIONS", 3)
    db = MockDataClient()
    service = NotificationService(db)
    for i in range(5):
        run(service.create(NotificationCreate(type="system_event", title=f"Note {i}", message="hello")))
    assert len(db.store["notifications"]) == 3


def test_read_and_clear_endpoints(client, user_headers):
    api = "/api/v1/notifications"
    for title in ("First", "Second"):
        resp = client.post(api, json={"type": "system_event", "title": title, "message": "m"}, headers=user_headers)
        assert resp.status_code == 201, resp.text
    first = client.get(api, headers=user_headers).json()[-1]

    assert client.post(f"{api}/{first['id']}/read", headers=user_headers).json()["read"] is True
    assert client.get(f"{api}/unread-count", headers=user_headers).json() == {"unread": 1}
    assert client.post(f"{api}/missing/read", headers=user_headers).status_code == 404

    assert client.post(f"{api}/read-all", headers=user_headers).json()["details"] == {"updated": 1}
    assert client.get(api, params={"unread_only": True}, headers=user_headers).json() == []
    assert client.delete(api, headers=user_headers).json()["details"] == {"deleted": 2}
