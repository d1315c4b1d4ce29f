def test_health_reports_backend(client):
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Healthy", "details": {"backend": "mock"}}
    assert resp.headers["x-correlation-id"]


def test_correlation_id_is_echoed(client):
    resp = client.get("/api/v1/health", headers={"X-Correlation-ID": "abc-123"})
    assert resp.headers["x-correlation-id"] == "abc-123"


def test_websocket_info(client):
    info = client.get("/api/v1/websocket-info").json()
    assert info["endpoints"][0]["path"] == "/ws/dashboard"


def test_settings_round_trip(client, admin_headers, user_headers):
    resp = client.put("/api/v1/settings/theme", json={"value": {"mode": "dark"}}, headers=admin_headers)
    assert resp.json() == {"key": "theme", "value": {"mode": "dark"}}
    assert client.get("/api/v1/settings/theme", headers=user_headers).json()["value"] == {"mode": "dark"}
    assert "theme" in client.get("/api/v1/settings", headers=user_headers).json()["keys"]
    assert client.get("/api/v1/settings/unknown", headers=user_headers).json() == {"key": "unknown", "value": None}


def test_settings_write_requires_admin(client, user_headers):
    resp = client.put("/api/v1/settings/theme", json={"value": "dark"}, headers=user_headers)
    assert resp.status_code == 403


def test_audit_log_requires_admin(client, user_headers):
    assert client.get("/api/v1/audit", headers=user_headers).status_code == 403
