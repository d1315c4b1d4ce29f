from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from .common import IDModel, Timestamps

NotificationType = Literal["low_stock", "sales_milestone", "system_event", "backup_reminder", "report"]
Priority = Literal["low", "medium", "high", "critical"]


class NotificationCreate(BaseModel):
    type: NotificationType
    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    priority: Priority = "medium"
    data: Optional[Dict[str, Any]] = None


class NotificationRead(NotificationCreate, IDModel, Timestamps):
    read: bool = False

    class Config:
        from_attributes = True


class NotificationSettings(BaseModel):
    """Stored under the `notification_settings` app setting."""
    low_stock_alerts: bool = True
    low_stock_threshold: int = Field(10, ge=0)
    sales_milestone_alerts: bool = True
    daily_reports: bool = False
    weekly_reports: bool = False
    email_notifications: bool = False


class UnreadCount(BaseModel):
    unread: int


class CheckResult(BaseModel):
    """Notifications raised by one run of the stock and milestone checks."""
    created: List[NotificationRead] = Field(default_factory=list)
