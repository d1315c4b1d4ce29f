import csv
import io

from pointart_api.services.exports import DATASETS, format_records

API = "/api/v1/reports"


def _add_pen(client, headers):
    client.post("/api/v1/inventory/stationery", json={
        "item": "Pen, blue", "category": "Writing", "quantity": 10, "stock": 10, "rate": 300, "selling_price": 1500,
    }, headers=headers)


def test_lists_datasets(client, user_headers):
    names = [d["name"] for d in client.get(API, headers=user_headers).json()["datasets"]]
    assert "stationery_sales" in names
    assert "invoices" in names


def test_csv_export_formats_money_and_headers(client, user_headers):
    _add_pen(client, user_headers)
    resp = client.get(f"{API}/stationery", params={"include_timestamp": False}, headers=user_headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert 'filename="stationery.csv"' in resp.headers["content-disposition"]

    rows = list(csv.DictReader(io.StringIO(resp.text)))
    assert len(rows) == 1
    assert rows[0]["Item"] == "Pen, blue"
    assert rows[0]["Selling Price"] == "UGX 1,500"
    assert rows[0]["Profit Per Unit"] == "UGX 1,200"
    assert len(rows[0]["Created At"]) == len("2024-01-01 00:00:00")


def test_date_range_filter(client, user_headers):
    for day in ("2024-01-10", "2024-03-10"):
        client.post("/api/v1/sales/gift-store", json={
            "item": "Card", "quantity": 1, "bpx": 1000, "spx": 2500, "date": day,
        }, headers=user_headers)
    resp = client.get(f"{API}/gift_daily_sales", params={"start": "2024-03-01", "end": "2024-03-31"},
                      headers=user_headers)
    rows = list(csv.DictReader(io.StringIO(resp.text)))
    assert [r["Date"] for r in rows] == ["2024-03-10"]


def test_excel_and_pdf_exports(client, user_headers):
    _add_pen(client, user_headers)
    xlsx = client.get(f"{API}/stationery", params={"format": "xlsx"}, headers=user_headers)
    assert xlsx.status_code == 200
    assert xlsx.content[:2] == b"PK"
    pdf = client.get(f"{API}/stationery", params={"format": "pdf"}, headers=user_headers)
    assert pdf.content.startswith(b"%PDF")


def test_unknown_dataset(client, user_headers):
    resp = client.get(f"{API}/payroll", headers=user_headers)
    assert resp.status_code == 404
    assert resp.json()["error"]["type"] == "not_found"


def test_format_records_leaves_missing_money_empty():
    records = format_records(DATASETS["customers"], [{"full_name": "Ann", "credit_limit": None}])
    assert records[0]["credit_limit"] is None
    assert records[0]["full_name"] == "Ann"
