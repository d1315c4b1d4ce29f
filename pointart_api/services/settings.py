from __future__ import annotations

from typing import Any, List

from pointart_api.core.settings import get_app_settings
from pointart_api.repositories.system import SettingsRepository
from pointart_api.schemas.backup import BackupSettings
from pointart_api.schemas.notifications import NotificationSettings
from .audit import AuditService
from .base import BaseService, jsonable

NOTIFICATION_SETTINGS_KEY = "notification_settings"
BACKUP_SETTINGS_KEY = "backup_settings"
BACKUP_HISTORY_KEY = "backup_history"
MILESTONES_KEY = "milestones_announced"


class SettingsService(BaseService):
    """Key/value application settings (logo, theme, notification and backup settings...)."""

    def _repo(self) -> SettingsRepository:
        return SettingsRepository(self.client)

    async def get(self, key: str, default: Any = None) -> Any:
        return await self._repo().get_value(key, default)

    async def put(self, key: str, value: Any, *, audit: bool = True) -> Any:
        stored = jsonable({"value": value})["value"]
        old = await self._repo().get_value(key)
        await self._repo().set_value(key, stored)
        if audit:
            await AuditService(self.client, self.actor).record(
                "settings_update", "app_settings", key, old_values={"value": old}, new_values={"value": stored}
            )
        return stored

    async def keys(self) -> List[str]:
        return await self._repo().keys()

    # Typed helpers
    async def notification_settings(self) -> NotificationSettings:
        raw = await self.get(NOTIFICATION_SETTINGS_KEY)
        if raw is None:
            return NotificationSettings(low_stock_threshold=get_app_settings().LOW_STOCK_THRESHOLD)
        return NotificationSettings.model_validate(raw)

    async def backup_settings(self) -> BackupSettings:
        raw = await self.get(BACKUP_SETTINGS_KEY)
        return BackupSettings() if raw is None else BackupSettings.model_validate(raw)
