API = "/api/v1/inventory"


def _stationery(**overrides):
    body = {
        "item": "Ballpoint Pen",
        "category": "Writing",
        "quantity": 50,
        "rate": 300,
        "selling_price": 500,
        "stock": 50,
        "low_stock_threshold": 5,
    }
    body.update(overrides)
    return body


def test_requires_authentication(client):
    resp = client.get(f"{API}/stationery")
    assert resp.status_code == 401
    assert resp.json()["error"]["type"] == "http_error"


def test_create_stationery_derives_profit(client, user_headers):
    resp = client.post(f"{API}/stationery", json=_stationery(), headers=user_headers)
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["profit_per_unit"] == 200
    assert body["updated_by"]

    listed = client.get(f"{API}/stationery", headers=user_headers).json()
    assert [r["item"] for r in listed] == ["Ballpoint Pen"]


def test_service_categories_derive_money_columns(client, user_headers):
    emb = client.post(
        f"{API}/embroidery",
        json={"job_description": "School badges", "quotation": 120000, "deposit": 50000, "expenditure": 40000},
        headers=user_headers,
    ).json()
    assert (emb["sales"], emb["balance"], emb["profit"]) == (120000, 70000, 80000)

    machine = client.post(
        f"{API}/machines",
        json={"machine_name": "Printer", "service_description": "A4 colour copies", "quantity": 20, "rate": 500},
        headers=user_headers,
    ).json()
    assert machine["sales"] == 10000

    art = client.post(
        f"{API}/art_services",
        json={"service_name": "Portrait", "quantity": 2, "rate": 75000, "deposit": 50000, "expenditure": 30000},
        headers=user_headers,
    ).json()
    assert art["quotation"] == 150000
    assert art["balance"] == 100000
    assert art["profit"] == 120000


def test_update_requires_admin(client, admin_headers, user_headers):
    item = client.post(f"{API}/stationery", json=_stationery(), headers=user_headers).json()
    resp = client.patch(f"{API}/stationery/{item['id']}", json={"rate": 350}, headers=user_headers)
    assert resp.status_code == 403
    assert resp.json()["error"]["message"] == "Insufficient role"


def test_admin_update_recomputes_derived_fields(client, admin_headers):
    item = client.post(f"{API}/gift_store", json={
        "item": "Photo Frame", "category": "Frames", "quantity": 4, "rate": 8000, "selling_price": 12000,
    }, headers=admin_headers).json()
    assert item["profit"] == 4000

    resp = client.patch(f"{API}/gift_store/{item['id']}", json={"rate": 9000}, headers=admin_headers)
    assert resp.status_code == 200, resp.text
    assert resp.json()["profit"] == 3000
    assert resp.json()["selling_price"] == 12000


def test_delete_and_missing_entry(client, admin_headers):
    item = client.post(f"{API}/stationery", json=_stationery(), headers=admin_headers).json()
    assert client.delete(f"{API}/stationery/{item['id']}", headers=admin_headers).status_code == 204
    resp = client.get(f"{API}/stationery/{item['id']}", headers=admin_headers)
    assert resp.status_code == 404
    assert resp.json()["error"]["type"] == "not_found"


def test_search_and_category_filter(client, user_headers):
    client.post(f"{API}/stationery", json=_stationery(item="Pencil HB", category="Writing"), headers=user_headers)
    client.post(f"{API}/stationery", json=_stationery(item="Glue Stick", category="Adhesives"), headers=user_headers)

    found = client.get(f"{API}/stationery", params={"q": "pencil"}, headers=user_headers).json()
    assert [r["item"] for r in found] == ["Pencil HB"]
    found = client.get(f"{API}/stationery", params={"category": "Adhesives"}, headers=user_headers).json()
    assert [r["item"] for r in found] == ["Glue Stick"]


def test_search_treats_wildcards_as_text(client, user_headers):
    client.post(f"{API}/stationery", json=_stationery(item="A4_Paper 100%"), headers=user_headers)
    client.post(f"{API}/stationery", json=_stationery(item="A4 Paper"), headers=user_headers)

    assert [r["item"] for r in client.get(f"{API}/stationery", params={"q": "%"}, headers=user_headers).json()] == [
        "A4_Paper 100%"
    ]
    found = client.get(f"{API}/stationery", params={"q": "A4_"}, headers=user_headers).json()
    assert [r["item"] for r in found] == ["A4_Paper 100%"]


def test_validation_error_envelope(client, user_headers):
    resp = client.post(f"{API}/stationery", json=_stationery(rate=-1), headers=user_headers)
    assert resp.status_code == 422
    assert resp.json()["error"]["type"] == "validation_error"


def test_product_category_conflict(client, user_headers):
    body = {"name": "Frames", "module": "gift_store"}
    assert client.post(f"{API}/categories", json=body, headers=user_headers).status_code == 201
    resp = client.post(f"{API}/categories", json=body, headers=user_headers)
    assert resp.status_code == 409
    listed = client.get(f"{API}/categories", params={"module": "gift_store"}, headers=user_headers).json()
    assert [c["name"] for c in listed] == ["Frames"]


def test_changes_are_audited(client, admin_headers):
    item = client.post(f"{API}/stationery", json=_stationery(), headers=admin_headers).json()
    client.patch(f"{API}/stationery/{item['id']}", json={"stock": 10}, headers=admin_headers)

    entries = client.get(
        "/api/v1/audit", params={"table_name": "stationery"}, headers=admin_headers
    ).json()
    assert [e["action"] for e in entries] == ["update", "create"]
    assert entries[0]["record_id"] == item["id"]
    assert entries[0]["old_values"]["stock"] == 50
    assert entries[0]["new_values"]["stock"] == 10
    assert entries[0]["user_name"] == "Shop Owner"
