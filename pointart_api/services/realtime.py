from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Dict, Iterable, Set

from starlette.websockets import WebSocket, WebSocketState

from pointart_api.schemas.analytics import DashboardStats
from pointart_api.schemas.realtime import WsEnvelope

logger = logging.getLogger(__name__)

DASHBOARD_TOPIC = "dashboard"


def session_topic(user_id: str) -> str:
    """Auth-state topic for one user's connections."""
    return f"session:{user_id}"


def _is_open(ws: WebSocket) -> bool:
    return WebSocketState.DISCONNECTED not in (ws.application_state, ws.client_state)


class BroadcastManager:
    """
    In-process fan-out of JSON messages to subscribed dashboard sockets.

    A socket subscribes to the dashboard topic and to its user's session
    topic; `unsubscribe` drops it from every topic it joined. Sockets whose
    send fails are dropped from the topic being published.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[str, Set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()

    # PUBLIC_INTERFACE
    def subscriber_count(self, topic: str) -> int:
        return len(self._subscribers.get(topic, ()))

    # PUBLIC_INTERFACE
    async def subscribe(self, websocket: WebSocket, topics: Iterable[str]) -> None:
        async with self._lock:
            for topic in topics:
                self._subscribers[topic].add(websocket)
        logger.info("Dashboard socket subscribed; dashboard subscribers=%d", self.subscriber_count(DASHBOARD_TOPIC))

    # PUBLIC_INTERFACE
    async def unsubscribe(self, websocket: WebSocket) -> None:
        async with self._lock:
            for topic in [t for t, sockets in self._subscribers.items() if websocket in sockets]:
                self._subscribers[topic].discard(websocket)
                if not self._subscribers[topic]:
                    del self._subscribers[topic]
        logger.info("Dashboard socket left; dashboard subscribers=%d", self.subscriber_count(DASHBOARD_TOPIC))

    async def publish(self, topic: str, envelope: WsEnvelope) -> int:
        """Send one envelope to every open socket on the topic; return how many received it."""
        message = envelope.model_dump(mode="json")
        async with self._lock:
            targets = list(self._subscribers.get(topic, ()))
        delivered = 0
        stale = []
        for ws in targets:
            if not _is_open(ws):
                stale.append(ws)
                continue
            try:
                await ws.send_json(message)
                delivered += 1
            except Exception:
                logger.warning("Dropping socket after failed send on topic=%s", topic, exc_info=True)
                stale.append(ws)
        if stale:
            async with self._lock:
                for ws in stale:
                    self._subscribers[topic].discard(ws)
        return delivered

    # PUBLIC_INTERFACE
    async def publish_dashboard_stats(self, stats: DashboardStats) -> None:
        """Push fresh dashboard statistics to every dashboard client."""
        await self.publish(DASHBOARD_TOPIC, WsEnvelope(type="dashboard.stats", payload=stats.model_dump(mode="json")))

    # PUBLIC_INTERFACE
    async def publish_signed_out(self, user_id: str, session_id: str) -> None:
        """Tell a user's open connections that one of their sign-in sessions ended."""
        envelope = WsEnvelope(type="auth.signed_out", payload={"session_id": session_id}, user_id=user_id)
        await self.publish(session_topic(user_id), envelope)


broadcast_manager = BroadcastManager()
