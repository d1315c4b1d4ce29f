API = "/api/v1/invoices"

ITEMS = [
    {"particulars": "Wedding card printing", "quantity": 100, "rate": 1500},
    {"particulars": "Envelopes", "quantity": 100, "rate": 500},
]


def _create(client, headers, **overrides):
    body = {"customer_name": "St. Mary's School", "invoice_date": "2024-03-01", "items": ITEMS}
    body.update(overrides)
    resp = client.post(API, json=body, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_create_invoice_computes_totals_and_words(client, user_headers):
    invoice = _create(client, user_headers)
    assert invoice["total_amount"] == 200000
    assert invoice["amount_in_words"] == "Two Hundred Thousand Shillings Only"
    assert invoice["status"] == "draft"
    assert len(invoice["invoice_number"]) == 5
    assert len(invoice["reference_number"]) == 10
    assert [(i["serial_number"], i["amount"]) for i in invoice["items"]] == [(1, 150000), (2, 50000)]


def test_invoice_needs_items(client, user_headers):
    resp = client.post(API, json={"customer_name": "X", "items": []}, headers=user_headers)
    assert resp.status_code == 422


def test_replacing_items_recomputes_total(client, user_headers):
    invoice = _create(client, user_headers)
    resp = client.put(f"{API}/{invoice['id']}", json={
        "notes": "Revised",
        "items": [{"particulars": "Banner", "quantity": 1, "rate": 85000}],
    }, headers=user_headers)
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["total_amount"] == 85000
    assert body["amount_in_words"] == "Eighty Five Thousand Shillings Only"
    assert body["notes"] == "Revised"
    assert [i["particulars"] for i in body["items"]] == ["Banner"]


def test_status_change_and_filter(client, user_headers):
    invoice = _create(client, user_headers)
    _create(client, user_headers, customer_name="Kampala Traders")
    resp = client.patch(f"{API}/{invoice['id']}/status", json={"status": "paid"}, headers=user_headers)
    assert resp.json()["status"] == "paid"

    paid = client.get(API, params={"status": "paid"}, headers=user_headers).json()
    assert [i["id"] for i in paid] == [invoice["id"]]
    bad = client.patch(f"{API}/{invoice['id']}/status", json={"status": "lost"}, headers=user_headers)
    assert bad.status_code == 422


def test_invoice_pdf_download(client, user_headers):
    invoice = _create(client, user_headers)
    resp = client.get(f"{API}/{invoice['id']}/pdf", headers=user_headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert f"invoice-{invoice['invoice_number']}.pdf" in resp.headers["content-disposition"]
    assert resp.content.startswith(b"%PDF")


def test_delete_invoice_removes_items(client, admin_headers, db):
    invoice = _create(client, admin_headers)
    assert client.delete(f"{API}/{invoice['id']}", headers=admin_headers).status_code == 204
    assert client.get(f"{API}/{invoice['id']}", headers=admin_headers).status_code == 404
    assert db.store["invoice_items"] == []
