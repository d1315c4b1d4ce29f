from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Path, Query, status

from pointart_api.core.deps import get_current_active_user, get_data_client, require_roles
from pointart_api.db.client import DataClient
from pointart_api.schemas.common import MessageResponse
from pointart_api.schemas.notifications import (
    CheckResult,
    NotificationCreate,
    NotificationRead,
    NotificationSettings,
    UnreadCount,
)
from pointart_api.services.base import Actor
from pointart_api.services.notifications import NotificationService
from pointart_api.services.settings import NOTIFICATION_SETTINGS_KEY, SettingsService

router = APIRouter(prefix="/notifications", tags=["Notifications"])


# PUBLIC_INTERFACE
@router.get("", response_model=List[NotificationRead], summary="List notifications", description="Newest first.")
async def list_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(100, ge=1, le=1000),
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> List[NotificationRead]:
    rows = await NotificationService(client, user).list_notifications(unread_only=unread_only, limit=limit)
    return [NotificationRead.model_validate(r) for r in rows]


# PUBLIC_INTERFACE
@router.get("/unread-count", response_model=UnreadCount, summary="Unread notification count")
async def unread_count(
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> UnreadCount:
    return UnreadCount(unread=await NotificationService(client, user).unread_count())


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=NotificationRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create notification",
    description="Store a notification. Only the newest 100 are kept.",
)
async def create_notification(
    payload: NotificationCreate,
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> NotificationRead:
    return NotificationRead.model_validate(await NotificationService(client, user).create(payload))


# PUBLIC_INTERFACE
@router.post(
    "/check",
    response_model=CheckResult,
    summary="Run notification checks",
    description="Run the low-stock and sales milestone checks and return the notifications they raised.",
)
async def run_checks(
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> CheckResult:
    created = await NotificationService(client, user).run_checks()
    return CheckResult(created=[NotificationRead.model_validate(r) for r in created])


# PUBLIC_INTERFACE
@router.post("/read-all", response_model=MessageResponse, summary="Mark all notifications read")
async def mark_all_read(
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> MessageResponse:
    count = await NotificationService(client, user).mark_all_read()
    return MessageResponse(message="Notifications marked as read", details={"updated": count})


# PUBLIC_INTERFACE
@router.post("/{notification_id}/read", response_model=NotificationRead, summary="Mark notification read")
async def mark_read(
    notification_id: str = Path(...),
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> NotificationRead:
    return NotificationRead.model_validate(await NotificationService(client, user).mark_read(notification_id))


# PUBLIC_INTERFACE
@router.delete("", response_model=MessageResponse, summary="Clear all notifications")
async def clear_notifications(
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> MessageResponse:
    count = await NotificationService(client, user).clear_all()
    return MessageResponse(message="Notifications cleared", details={"deleted": count})


# PUBLIC_INTERFACE
@router.get("/settings", response_model=NotificationSettings, summary="Read notification settings")
async def read_settings(
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> NotificationSettings:
    return await SettingsService(client, user).notification_settings()


# PUBLIC_INTERFACE
@router.put("/settings", response_model=NotificationSettings, summary="Update notification settings")
async def write_settings(
    payload: NotificationSettings,
    admin: Actor = Depends(require_roles("admin")),
    client: DataClient = Depends(get_data_client),
) -> NotificationSettings:
    await SettingsService(client, admin).put(NOTIFICATION_SETTINGS_KEY, payload.model_dump())
    return payload
