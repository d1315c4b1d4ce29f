from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import Boolean, Text, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from pointart_api.db.base import Base, TimestampMixin, UUIDPkMixin


class Notification(UUIDPkMixin, TimestampMixin, Base):
    """In-app notification (low stock, milestones, system events...)."""
    __tablename__ = "notifications"

    type: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[str] = mapped_column(Text, nullable=False, server_default=text("'medium'"))
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("false"))
    data: Mapped[Optional[dict]] = mapped_column(JSONB, nullable=True)


class AuditLogEntry(UUIDPkMixin, TimestampMixin, Base):
    """Who changed what."""
    __tablename__ = "audit_log"

    user_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    user_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    action: Mapped[str] = mapped_column(Text, nullable=False)
    table_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    record_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    old_values: Mapped[Optional[dict]] = mapped_column(JSONB, nullable=True)
    new_values: Mapped[Optional[dict]] = mapped_column(JSONB, nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class AppSetting(UUIDPkMixin, TimestampMixin, Base):
    """Key/value application setting (logo, theme, notification and backup settings)."""
    __tablename__ = "app_settings"

    key: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    value: Mapped[Any] = mapped_column(JSONB, nullable=True)
