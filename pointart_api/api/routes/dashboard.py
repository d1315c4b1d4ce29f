"""
Live dashboard socket.

Clients connect to /ws/dashboard?token=<access token>. The server sends a
`dashboard.stats` envelope right away and then every DASHBOARD_REFRESH_SECONDS,
pushes another after each recorded sale, and sends `auth.signed_out` when one
of the user's sessions ends. A text "ping" is answered with "pong".
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect

from pointart_api.core.deps import ClientScope, get_client_scope, resolve_actor
from pointart_api.core.settings import get_app_settings
from pointart_api.db.client import DataClient
from pointart_api.schemas.realtime import WsEnvelope
from pointart_api.services.analytics import AnalyticsService
from pointart_api.services.base import Actor
from pointart_api.services.realtime import DASHBOARD_TOPIC, broadcast_manager, session_topic

logger = logging.getLogger(__name__)

# Close codes
WS_UNAUTHORIZED = 4401
WS_FORBIDDEN = 4403

WEBSOCKET_ENDPOINTS: List[Dict[str, Any]] = [
    {
        "path": "/ws/dashboard",
        "summary": "Dashboard statistics pushed on connect and periodically; sign-out notices.",
        "query": ["token"],
        "messages": {
            "client_to_server": ["ping"],
            "server_to_client": ["dashboard.stats", "auth.signed_out", "pong"],
        },
    },
]

router = APIRouter()


# PUBLIC_INTERFACE
@router.get(
    "/api/v1/websocket-info",
    response_model=Dict[str, Any],
    summary="WebSocket Usage Information",
    description="Connection details for the dashboard WebSocket endpoint.",
    tags=["WebSocket"],
)
def websocket_info() -> Dict[str, Any]:
    """Describe the socket endpoints, which the OpenAPI schema cannot express."""
    endpoints = [
        {**endpoint, "refresh_seconds": get_app_settings().DASHBOARD_REFRESH_SECONDS}
        for endpoint in WEBSOCKET_ENDPOINTS
    ]
    return {
        "usage": (
            "Connect with a valid access token as a 'token' query parameter. Messages are JSON: "
            "{ type: string, payload: object, at: ISO-8601, user_id?: string }."
        ),
        "security": {
            "token": f"Access JWT of an open sign-in session; closes with {WS_UNAUTHORIZED} otherwise.",
        },
        "endpoints": endpoints,
    }


async def _authenticate(websocket: WebSocket, client: DataClient) -> Actor:
    """Resolve the token query param, closing the socket when it is not acceptable."""
    token = websocket.query_params.get("token")
    code = WS_UNAUTHORIZED
    if token:
        try:
            actor = await resolve_actor(
                client,
                token,
                ip_address=websocket.client.host if websocket.client else None,
                user_agent=websocket.headers.get("user-agent"),
            )
        except HTTPException:
            pass
        else:
            if actor.is_active:
                return actor
            code = WS_FORBIDDEN
    await websocket.close(code=code)
    raise WebSocketDisconnect(code=code)


async def _send_stats(websocket: WebSocket, open_client: ClientScope) -> None:
    async with open_client() as client:
        stats = await AnalyticsService(client).dashboard_stats()
    envelope = WsEnvelope(type="dashboard.stats", payload=stats.model_dump(mode="json"))
    await websocket.send_json(envelope.model_dump(mode="json"))


async def _refresh_loop(websocket: WebSocket, open_client: ClientScope, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        try:
            await _send_stats(websocket, open_client)
        except Exception:
            logger.warning("Periodic dashboard push failed; stopping", exc_info=True)
            return


# PUBLIC_INTERFACE
@router.websocket("/ws/dashboard")
async def dashboard_socket(websocket: WebSocket, open_client: ClientScope = Depends(get_client_scope)) -> None:
    """
    Dashboard statistics stream for one signed-in user.

    No database session is held between pushes; each one opens its own.
    """
    await websocket.accept()
    try:
        async with open_client() as client:
            actor = await _authenticate(websocket, client)
    except WebSocketDisconnect:
        return

    await broadcast_manager.subscribe(websocket, [DASHBOARD_TOPIC, session_topic(actor.user_id)])
    try:
        await _send_stats(websocket, open_client)
    except Exception:
        logger.exception("Failed to send initial dashboard statistics")

    refresher = asyncio.create_task(
        _refresh_loop(websocket, open_client, get_app_settings().DASHBOARD_REFRESH_SECONDS)
    )
    try:
        while True:
            text = await websocket.receive_text()
            if text.strip().lower() == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        pass
    finally:
        refresher.cancel()
        await broadcast_manager.unsubscribe(websocket)
