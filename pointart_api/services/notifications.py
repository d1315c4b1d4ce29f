from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Dict, List, Optional

from pointart_api.core.errors import NotFoundError
from pointart_api.core.settings import get_app_settings
from pointart_api.db.client import Record
from pointart_api.repositories.inventory import InventoryRepository
from pointart_api.repositories.system import NotificationRepository
from pointart_api.schemas.notifications import NotificationCreate
from .analytics import as_date
from .base import BaseService, jsonable
from .invoices import format_currency
from .settings import MILESTONES_KEY, SettingsService

logger = logging.getLogger(__name__)

REVENUE_MILESTONES = (1_000_000, 5_000_000, 10_000_000, 20_000_000, 50_000_000)
NAMES_LISTED = 3


def describe_items(names: List[str]) -> str:
    """"A, B, C and 2 more" style listing."""
    shown = ", ".join(names[:NAMES_LISTED])
    rest = len(names) - NAMES_LISTED
    return f"{shown} and {rest} more" if rest > 0 else shown


class NotificationService(BaseService):
    """Stored notifications plus the low-stock and sales milestone checks."""

    def _repo(self) -> NotificationRepository:
        return NotificationRepository(self.client)

    async def list_notifications(self, *, unread_only: bool = False, limit: int = 100) -> List[Record]:
        return await self._repo().latest(unread_only=unread_only, limit=limit)

    async def unread_count(self) -> int:
        return await self._repo().unread_count()

    # PUBLIC_INTERFACE
    async def create(self, payload: NotificationCreate) -> Record:
        """Store a notification and trim the list to the newest MAX_NOTIFICATIONS."""
        values = payload.model_dump()
        values["data"] = jsonable(values.get("data"))
        values["read"] = False
        row = await self._repo().create(values)
        removed = await self._repo().trim(get_app_settings().MAX_NOTIFICATIONS)
        if removed:
            logger.debug("Trimmed %d old notifications", removed)
        return row

    async def mark_read(self, notification_id: str) -> Record:
        row = await self._repo().update(notification_id, {"read": True})
        if row is None:
            raise NotFoundError("Notification not found")
        return row

    async def mark_all_read(self) -> int:
        return await self._repo().mark_all_read()

    async def clear_all(self) -> int:
        return await self._repo().clear()

    # PUBLIC_INTERFACE
    async def run_checks(self, today: Optional[date] = None) -> List[Record]:
        """Run the low-stock and sales milestone checks; return the notifications created."""
        settings = await SettingsService(self.client, self.actor).notification_settings()
        created: List[Record] = []
        if settings.low_stock_alerts:
            created += await self.check_low_stock(settings.low_stock_threshold)
        if settings.sales_milestone_alerts:
            created += await self.check_sales_milestones(today or date.today())
        return created

    async def check_low_stock(self, gift_threshold: int) -> List[Record]:
        created: List[Record] = []
        stationery = await InventoryRepository(self.client, "stationery").low_stock_stationery()
        gifts = await InventoryRepository(self.client, "gift_store").at_or_below("quantity", gift_threshold)

        for module, label, rows, level in (
            ("stationery", "Stationery", stationery, "stock"),
            ("gift_store", "Gift Store", gifts, "quantity"),
        ):
            if not rows:
                continue
            names = [r.get("item") or "Unnamed" for r in rows]
            out_of_stock = any(int(r.get(level) or 0) == 0 for r in rows)
            created.append(await self.create(NotificationCreate(
                type="low_stock",
                title=f"Low Stock Alert: {label}",
                message=f"{len(rows)} item(s) running low: {describe_items(names)}",
                priority="high" if out_of_stock else "medium",
                data={
                    "module": module,
                    "items": [{"id": r["id"], "name": r.get("item"), level: r.get(level)} for r in rows],
                },
            )))
        return created

    async def _ledger_sales(self) -> List[tuple]:
        lines = []
        for table in ("stationery_sales", "gift_daily_sales"):
            res = await self.client.table(table).select("*").execute()
            lines += [(as_date(r.get("date")), float(r.get("total_amount") or 0)) for r in res.data]
        return lines

    async def check_sales_milestones(self, today: date) -> List[Record]:
        """
        Period targets are announced once per period; lifetime revenue
        milestones at most once per day each.
        """
        app = get_app_settings()
        settings_svc = SettingsService(self.client, self.actor)
        announced: Dict[str, str] = dict(await settings_svc.get(MILESTONES_KEY) or {})

        lines = await self._ledger_sales()
        week_start = today - timedelta(days=(today.weekday() + 1) % 7)  # weeks start on Sunday
        month_start = today.replace(day=1)

        def total_since(start: Optional[date]) -> float:
            return sum(v for d, v in lines if d is not None and (start is None or start <= d <= today))

        periods = (
            ("daily_target", "Daily", today, app.DAILY_SALES_TARGET, today.isoformat(), "today's"),
            ("weekly_target", "Weekly", week_start, app.WEEKLY_SALES_TARGET, week_start.isoformat(), "this week's"),
            ("monthly_target", "Monthly", month_start, app.MONTHLY_SALES_TARGET, month_start.isoformat(), "this month's"),
        )

        created: List[Record] = []
        for kind, label, start, target, period_key, phrase in periods:
            achieved = total_since(start)
            if achieved < target or announced.get(kind) == period_key:
                continue
            created.append(await self.create(NotificationCreate(
                type="sales_milestone",
                title=f"{label} Sales Target Achieved!",
                message=(
                    f"You've reached {phrase} sales target of {format_currency(target)}. "
                    f"Total sales: {format_currency(achieved)}"
                ),
                data={"type": kind, "target": target, "achieved": achieved},
            )))
            announced[kind] = period_key

        lifetime = total_since(None)
        for milestone in REVENUE_MILESTONES:
            key = f"revenue_{milestone}"
            if lifetime < milestone or announced.get(key) == today.isoformat():
                continue
            created.append(await self.create(NotificationCreate(
                type="sales_milestone",
                title="Revenue Milestone Reached!",
                message=(
                    f"You've reached a revenue milestone of {format_currency(milestone)}. "
                    f"Total lifetime revenue: {format_currency(lifetime)}"
                ),
                data={"type": "revenue_milestone", "target": milestone, "achieved": lifetime},
            )))
            announced[key] = today.isoformat()

        if created:
            await settings_svc.put(MILESTONES_KEY, announced, audit=False)
        return created
