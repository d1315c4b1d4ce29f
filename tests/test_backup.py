import json
from datetime import datetime

from pointart_api.core.errors import DataAccessError
from pointart_api.services.backup import backup_filename, format_size, validate_backup

API = "/api/v1/backup"


def _document(**data):
    tables = {"stationery": [], "gift_store": [], "stationery_sales": []}
    tables.update(data)
    return {
        "metadata": {"created_at": "2024-05-01T10:00:00Z", "version": "1.0.0", "tables": list(tables)},
        "data": tables,
    }


def test_validate_accepts_minimal_backup():
    result = validate_backup(_document())
    assert result.valid
    assert result.errors == []


def test_validate_reports_problems():
    assert validate_backup({}).errors == ["Backup file is empty or corrupted"]

    doc = _document()
    del doc["data"]["gift_store"]
    doc["data"]["customers"] = "oops"
    doc["metadata"].pop("version")
    result = validate_backup(doc)
    assert not result.valid
    assert "Missing version information" in result.errors
    assert "Missing critical tables: gift_store" in result.errors
    assert "Invalid data format for table: customers" in result.errors


def test_validate_warns_about_unknown_tables():
    result = validate_backup(_document(legacy_orders=[]))
    assert result.valid
    assert result.warnings == ["Unknown table will be ignored: legacy_orders"]


def test_format_size_and_filename():
    assert format_size(2048) == "2.0 KB"
    assert format_size(3 * 1024 * 1024) == "3.00 MB"
    assert backup_filename(now=datetime(2024, 5, 1, 9, 5, 7)) == "point-art-hub-full-backup-2024-05-01-09-05-07.json"


def _export(client, headers):
    resp = client.post(f"{API}/export", json={"description": "before stocktake"}, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp


def test_export_downloads_backup_and_records_history(client, admin_headers):
    client.post("/api/v1/inventory/stationery", json={"item": "Ruler", "category": "Maths"}, headers=admin_headers)
    resp = _export(client, admin_headers)
    assert "point-art-hub-full-backup-" in resp.headers["content-disposition"]
    document = resp.json()
    assert document["metadata"]["description"] == "before stocktake"
    assert document["metadata"]["record_counts"]["stationery"] == 1
    assert [r["item"] for r in document["data"]["stationery"]] == ["Ruler"]

    history = client.get(f"{API}/history", headers=admin_headers).json()
    assert len(history) == 1
    assert history[0]["checksum"] == resp.headers["x-backup-checksum"]
    assert history[0]["size"].endswith("KB")


def test_history_is_capped_by_max_backups(client, admin_headers):
    resp = client.put(f"{API}/settings", json={"max_backups": 2}, headers=admin_headers)
    assert resp.status_code == 200
    for _ in range(3):
        _export(client, admin_headers)
    assert len(client.get(f"{API}/history", headers=admin_headers).json()) == 2


def test_backup_endpoints_require_admin(client, user_headers):
    assert client.post(f"{API}/export", headers=user_headers).status_code == 403


def test_validate_endpoint_rejects_non_json(client, admin_headers):
    resp = client.post(f"{API}/validate", files={"file": ("b.json", b"not json", "application/json")},
                       headers=admin_headers)
    assert resp.status_code == 422
    resp = client.post(f"{API}/validate", files={"file": ("b.json", json.dumps(_document()), "application/json")},
                       headers=admin_headers)
    assert resp.json()["valid"] is True


def test_restore_merge_skips_existing_records(client, admin_headers):
    item = client.post("/api/v1/inventory/stationery", json={"item": "Ruler", "category": "Maths"},
                       headers=admin_headers).json()
    backup = _export(client, admin_headers).content
    client.delete(f"/api/v1/inventory/stationery/{item['id']}", headers=admin_headers)

    files = {"file": ("backup.json", backup, "application/json")}
    result = client.post(f"{API}/restore", files=files, data={"mode": "merge"}, headers=admin_headers).json()
    assert result["restored"]["stationery"] == 1
    assert result["restored"]["profiles"] == 1
    assert result["warnings"] == []
    restored = client.get(f"/api/v1/inventory/stationery/{item['id']}", headers=admin_headers)
    assert restored.json()["item"] == "Ruler"

    again = client.post(f"{API}/restore", files=files, data={"mode": "merge"}, headers=admin_headers).json()
    assert again["restored"]["stationery"] == 0
    assert again["skipped"]["stationery"] == 1


def test_restore_replace_clears_tables_first(client, admin_headers):
    client.post("/api/v1/inventory/stationery", json={"item": "Ruler", "category": "Maths"}, headers=admin_headers)
    backup = _export(client, admin_headers).content
    client.post("/api/v1/inventory/stationery", json={"item": "Compass", "category": "Maths"}, headers=admin_headers)

    files = {"file": ("backup.json", backup, "application/json")}
    result = client.post(f"{API}/restore", files=files, data={"mode": "replace"}, headers=admin_headers).json()
    assert result["mode"] == "replace"
    items = client.get("/api/v1/inventory/stationery", headers=admin_headers).json()
    assert [i["item"] for i in items] == ["Ruler"]


def test_restore_rejects_invalid_backup(client, admin_headers):
    files = {"file": ("backup.json", json.dumps({"metadata": {}}), "application/json")}
    resp = client.post(f"{API}/restore", files=files, headers=admin_headers)
    assert resp.status_code == 422
    assert resp.json()["error"]["message"] == "Invalid backup file"


def test_restore_rejects_bad_records_before_writing(client, admin_headers):
    client.post("/api/v1/inventory/stationery", json={"item": "Ruler", "category": "Maths"}, headers=admin_headers)
    document = _document(stationery=[
        {"item": "Compass", "category": "Maths"},
        {"item": "Protractor", "category": "Maths", "quantity": "lots"},
        {"category": "Maths"},
    ])
    files = {"file": ("backup.json", json.dumps(document), "application/json")}
    resp = client.post(f"{API}/restore", files=files, data={"mode": "replace"}, headers=admin_headers)
    assert resp.status_code == 422
    body = resp.json()["error"]
    assert body["message"] == "Backup contains invalid records"
    assert body["details"]["errors"] == ["stationery row 2: quantity: invalid literal for int() with base 10: 'lots'",
                                         "stationery row 3: item: missing"]
    items = client.get("/api/v1/inventory/stationery", headers=admin_headers).json()
    assert [i["item"] for i in items] == ["Ruler"]


def test_failed_replace_rolls_back_cleared_tables(client, admin_headers, db, monkeypatch):
    client.post("/api/v1/inventory/stationery", json={"item": "Ruler", "category": "Maths"}, headers=admin_headers)
    backup = _export(client, admin_headers).content
    client.post("/api/v1/inventory/stationery", json={"item": "Compass", "category": "Maths"}, headers=admin_headers)

    async def failing_profiles(self, rows):
        raise DataAccessError("profiles table locked")

    monkeypatch.setattr("pointart_api.services.backup.BackupService._restore_profiles", failing_profiles)
    files = {"file": ("backup.json", backup, "application/json")}
    resp = client.post(f"{API}/restore", files=files, data={"mode": "replace"}, headers=admin_headers)
    assert resp.status_code == 503
    assert sorted(r["item"] for r in db.store["stationery"]) == ["Compass", "Ruler"]


def test_restore_reports_validation_warnings(client, admin_headers):
    files = {"file": ("backup.json", json.dumps(_document(legacy_orders=[])), "application/json")}
    result = client.post(f"{API}/restore", files=files, headers=admin_headers).json()
    assert result["warnings"] == ["Unknown table will be ignored: legacy_orders"]
