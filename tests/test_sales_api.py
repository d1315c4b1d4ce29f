import datetime as dt

from pointart_api.services import sales as sales_service

SALES = "/api/v1/sales"


def _stock_item(client, headers, stock=10):
    resp = client.post("/api/v1/inventory/stationery", json={
        "item": "Exercise Book", "category": "Books", "quantity": stock, "stock": stock,
        "rate": 1200, "selling_price": 2000,
    }, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def _stock_of(client, headers, item_id):
    return client.get(f"/api/v1/inventory/stationery/{item_id}", headers=headers).json()["stock"]


def test_stationery_sale_takes_units_out_of_stock(client, user_headers):
    item = _stock_item(client, user_headers)
    resp = client.post(f"{SALES}/stationery", json={"item_id": item["id"], "quantity": 3}, headers=user_headers)
    assert resp.status_code == 201, resp.text
    sale = resp.json()
    assert sale["item_name"] == "Exercise Book"
    assert sale["selling_price"] == 2000
    assert sale["total_amount"] == 6000
    assert sale["profit"] == 2400
    assert _stock_of(client, user_headers, item["id"]) == 7


def test_stationery_sale_rejects_insufficient_stock(client, user_headers):
    item = _stock_item(client, user_headers, stock=2)
    resp = client.post(f"{SALES}/stationery", json={"item_id": item["id"], "quantity": 5}, headers=user_headers)
    assert resp.status_code == 422
    assert resp.json()["error"]["message"] == "Only 2 units available for Exercise Book"
    assert _stock_of(client, user_headers, item["id"]) == 2


def test_unknown_item_is_not_found(client, user_headers):
    resp = client.post(f"{SALES}/stationery", json={"item_id": "nope", "quantity": 1}, headers=user_headers)
    assert resp.status_code == 404


def test_update_and_delete_adjust_stock(client, admin_headers):
    item = _stock_item(client, admin_headers)
    sale = client.post(f"{SALES}/stationery", json={"item_id": item["id"], "quantity": 2}, headers=admin_headers).json()

    resp = client.patch(f"{SALES}/stationery/{sale['id']}", json={"quantity": 5}, headers=admin_headers)
    assert resp.status_code == 200, resp.text
    assert resp.json()["total_amount"] == 10000
    assert _stock_of(client, admin_headers, item["id"]) == 5

    assert client.delete(f"{SALES}/stationery/{sale['id']}", headers=admin_headers).status_code == 204
    assert _stock_of(client, admin_headers, item["id"]) == 10


def test_gift_sale_totals_and_summary(client, user_headers):
    today = dt.date.today().isoformat()
    for qty, bpx, spx in ((2, 5000, 8000), (1, 10000, 15000)):
        resp = client.post(f"{SALES}/gift-store", json={
            "item": "Teddy Bear", "quantity": qty, "bpx": bpx, "spx": spx, "date": today,
        }, headers=user_headers)
        assert resp.status_code == 201, resp.text
    first = client.get(f"{SALES}/gift-store", headers=user_headers).json()[-1]
    assert first["total_amount"] == 16000
    assert first["profit"] == 6000

    summary = client.get(f"{SALES}/gift-store/summary", headers=user_headers).json()
    assert summary == {"total_sales": 31000, "total_profit": 11000, "items_sold": 3, "transactions": 2}


def test_summary_respects_date_range(client, user_headers):
    for day in ("2024-01-05", "2024-02-05"):
        client.post(f"{SALES}/gift-store", json={
            "item": "Card", "quantity": 1, "bpx": 1000, "spx": 3000, "date": day,
        }, headers=user_headers)
    summary = client.get(
        f"{SALES}/gift-store/summary", params={"date_from": "2024-02-01"}, headers=user_headers
    ).json()
    assert summary["transactions"] == 1
    assert summary["total_sales"] == 3000


def test_unknown_ledger_summary(client, user_headers):
    assert client.get(f"{SALES}/machines/summary", headers=user_headers).status_code == 422


def test_rejected_sale_leaves_no_sale_row(client, user_headers):
    item = _stock_item(client, user_headers, stock=2)
    client.post(f"{SALES}/stationery", json={"item_id": item["id"], "quantity": 5}, headers=user_headers)
    assert client.get(f"{SALES}/stationery", headers=user_headers).json() == []


def test_consecutive_sales_never_take_stock_below_zero(client, user_headers):
    item = _stock_item(client, user_headers, stock=3)
    first = client.post(f"{SALES}/stationery", json={"item_id": item["id"], "quantity": 2}, headers=user_headers)
    second = client.post(f"{SALES}/stationery", json={"item_id": item["id"], "quantity": 2}, headers=user_headers)
    assert first.status_code == 201
    assert second.status_code == 422
    assert second.json()["error"]["message"] == "Only 1 units available for Exercise Book"
    assert _stock_of(client, user_headers, item["id"]) == 1
    assert len(client.get(f"{SALES}/stationery", headers=user_headers).json()) == 1


def test_update_beyond_stock_keeps_the_sale_unchanged(client, admin_headers):
    item = _stock_item(client, admin_headers, stock=4)
    sale = client.post(f"{SALES}/stationery", json={"item_id": item["id"], "quantity": 2}, headers=admin_headers).json()
    resp = client.patch(f"{SALES}/stationery/{sale['id']}", json={"quantity": 9}, headers=admin_headers)
    assert resp.status_code == 422
    assert client.get(f"{SALES}/stationery", headers=admin_headers).json()[0]["quantity"] == 2
    assert _stock_of(client, admin_headers, item["id"]) == 2


def test_failed_dashboard_push_does_not_fail_the_sale(client, user_headers, monkeypatch):
    async def broken_stats(self):
        raise RuntimeError("stats unavailable")

    monkeypatch.setattr(sales_service.broadcast_manager, "subscriber_count", lambda topic: 1)
    monkeypatch.setattr(sales_service.AnalyticsService, "dashboard_stats", broken_stats)
    item = _stock_item(client, user_headers)
    resp = client.post(f"{SALES}/stationery", json={"item_id": item["id"], "quantity": 1}, headers=user_headers)
    assert resp.status_code == 201, resp.text
    assert _stock_of(client, user_headers, item["id"]) == 9
