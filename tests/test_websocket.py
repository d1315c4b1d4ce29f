from contextlib import asynccontextmanager

import pytest
from starlette.websockets import WebSocketDisconnect

from pointart_api.api.main import app
from pointart_api.core.deps import get_client_scope
from pointart_api.core.settings import get_app_settings


def _token(headers):
    return headers["Authorization"].split(" ", 1)[1]


def test_initial_stats_and_ping(client, admin_headers):
    with client.websocket_connect(f"/ws/dashboard?token={_token(admin_headers)}") as ws:
        first = ws.receive_json()
        assert first["type"] == "dashboard.stats"
        assert first["payload"]["total_sales"] == 0
        ws.send_text("ping")
        assert ws.receive_text() == "pong"


@pytest.mark.parametrize("query", ["", "?token=not-a-jwt"])
def test_rejects_missing_or_bad_token(client, query):
    with client.websocket_connect(f"/ws/dashboard{query}") as ws:
        with pytest.raises(WebSocketDisconnect) as exc:
            ws.receive_text()
    assert exc.value.code == 4401


def test_sale_pushes_fresh_stats(client, admin_headers):
    with client.websocket_connect(f"/ws/dashboard?token={_token(admin_headers)}") as ws:
        ws.receive_json()
        resp = client.post("/api/v1/sales/gift-store", json={
            "item": "Teddy Bear", "quantity": 2, "bpx": 5000, "spx": 9000,
        }, headers=admin_headers)
        assert resp.status_code == 201
        pushed = ws.receive_json()
        assert pushed["type"] == "dashboard.stats"
        assert pushed["payload"]["total_sales"] == 18000


def test_sign_out_notifies_open_connections(client, admin_headers):
    with client.websocket_connect(f"/ws/dashboard?token={_token(admin_headers)}") as ws:
        ws.receive_json()
        client.post("/api/v1/auth/logout", headers=admin_headers)
        notice = ws.receive_json()
        assert notice["type"] == "auth.signed_out"
        assert notice["user_id"]
        assert notice["payload"]["session_id"]


def test_periodic_push(client, admin_headers, monkeypatch):
    monkeypatch.setattr(get_app_settings(), "DASHBOARD_REFRESH_SECONDS", 0.05)
    with client.websocket_connect(f"/ws/dashboard?token={_token(admin_headers)}") as ws:
        assert ws.receive_json()["type"] == "dashboard.stats"
        assert ws.receive_json()["type"] == "dashboard.stats"


def test_socket_holds_no_data_client_between_pushes(client, admin_headers, db):
    scopes = {"opened": 0, "open": 0}

    @asynccontextmanager
    async def counting_scope():
        scopes["opened"] += 1
        scopes["open"] += 1
        try:
            yield db
        finally:
            scopes["open"] -= 1

    app.dependency_overrides[get_client_scope] = lambda: counting_scope
    with client.websocket_connect(f"/ws/dashboard?token={_token(admin_headers)}") as ws:
        assert ws.receive_json()["type"] == "dashboard.stats"
        assert scopes == {"opened": 2, "open": 0}
