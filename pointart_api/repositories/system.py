from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pointart_api.db.client import Record
from .base import TableRepository


class NotificationRepository(TableRepository):
    table_name = "notifications"

    async def latest(self, *, unread_only: bool = False, limit: int = 100) -> List[Record]:
        query = self.query().select("*")
        if unread_only:
            query = query.eq("read", False)
        res = await query.order("created_at", desc=True).limit(limit).execute()
        return list(res.data)

    async def unread_count(self) -> int:
        res = await self.query().select("id", count="exact").eq("read", False).execute()
        return int(res.count or 0)

    async def mark_all_read(self) -> int:
        # Mock updates touch one record per call, so go row by row.
        unread = await self.latest(unread_only=True, limit=10_000)
        for row in unread:
            await self.update(row["id"], {"read": True})
        return len(unread)

    async def clear(self) -> int:
        res = await self.query().delete().execute()
        return int(res.count or 0)

    async def trim(self, keep: int) -> int:
        """Delete everything older than the newest `keep` notifications."""
        rows = await self.query().select("id").order("created_at", desc=True).offset(keep).execute()
        ids = [r["id"] for r in rows.data]
        if not ids:
            return 0
        res = await self.query().delete().in_("id", ids).execute()
        return int(res.count or 0)


class AuditRepository(TableRepository):
    table_name = "audit_log"

    async def search(
        self,
        *,
        action: Optional[str] = None,
        table_name: Optional[str] = None,
        since: Optional[datetime] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Record]:
        query = self.query().select("*")
        if action:
            query = query.eq("action", action)
        if table_name:
            query = query.eq("table_name", table_name)
        if since:
            query = query.gte("created_at", since)
        res = await query.order("created_at", desc=True).range(offset, offset + limit - 1).execute()
        return list(res.data)


class SettingsRepository(TableRepository):
    table_name = "app_settings"

    async def get_value(self, key: str, default: Any = None) -> Any:
        res = await self.query().select("*").eq("key", key).maybe_single().execute()
        return default if res.data is None else res.data.get("value")

    async def set_value(self, key: str, value: Any) -> Record:
        existing = await self.query().select("id").eq("key", key).maybe_single().execute()
        if existing.data:
            res = await self.query().update({"value": value}).eq("key", key).single().execute()
        else:
            res = await self.query().insert({"key": key, "value": value}).single().execute()
        return res.data

    async def keys(self) -> List[str]:
        res = await self.query().select("key").order("key").execute()
        return [r["key"] for r in res.data]
