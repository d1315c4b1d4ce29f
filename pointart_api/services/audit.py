from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pointart_api.repositories.system import AuditRepository
from .base import BaseService, jsonable

logger = logging.getLogger(__name__)


class AuditService(BaseService):
    """Writes audit_log entries for data changes made by the current actor."""

    # PUBLIC_INTERFACE
    async def record(
        self,
        action: str,
        table_name: Optional[str] = None,
        record_id: Optional[str] = None,
        *,
        old_values: Optional[Dict[str, Any]] = None,
        new_values: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Record one audit entry.

        Failures are logged and swallowed: auditing must never break the write
        it describes.
        """
        actor = self.actor
        entry = {
            "user_id": actor.user_id if actor else None,
            "user_name": actor.display_name if actor else None,
            "action": action,
            "table_name": table_name,
            "record_id": record_id,
            "old_values": jsonable(old_values),
            "new_values": jsonable(new_values),
            "ip_address": actor.ip_address if actor else None,
            "user_agent": actor.user_agent if actor else None,
        }
        try:
            await AuditRepository(self.client).create(entry)
        except Exception:
            logger.exception("Failed to write audit entry action=%s table=%s id=%s", action, table_name, record_id)
