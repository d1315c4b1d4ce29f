from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query

from pointart_api.core.deps import get_current_active_user, get_data_client, require_roles
from pointart_api.db.client import DataClient
from pointart_api.repositories.system import AuditRepository
from pointart_api.schemas.system import AuditEntryRead, SettingKeys, SettingValue, SettingWrite
from pointart_api.services.base import Actor
from pointart_api.services.settings import SettingsService

router = APIRouter(tags=["System"])


# PUBLIC_INTERFACE
@router.get(
    "/audit",
    response_model=List[AuditEntryRead],
    summary="List audit log",
    description="Audit entries newest first, filtered by action, table or start time. Requires admin role.",
)
async def list_audit_entries(
    action: Optional[str] = Query(None),
    table_name: Optional[str] = Query(None),
    since: Optional[datetime] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    admin: Actor = Depends(require_roles("admin")),
    client: DataClient = Depends(get_data_client),
) -> List[AuditEntryRead]:
    rows = await AuditRepository(client).search(
        action=action, table_name=table_name, since=since, limit=limit, offset=offset
    )
    return [AuditEntryRead.model_validate(r) for r in rows]


# PUBLIC_INTERFACE
@router.get("/settings", response_model=SettingKeys, summary="List setting keys")
async def list_setting_keys(
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> SettingKeys:
    return SettingKeys(keys=await SettingsService(client, user).keys())


# PUBLIC_INTERFACE
@router.get("/settings/{key}", response_model=SettingValue, summary="Read setting")
async def read_setting(
    key: str = Path(..., description="Setting key, e.g. theme or custom_logo"),
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> SettingValue:
    return SettingValue(key=key, value=await SettingsService(client, user).get(key))


# PUBLIC_INTERFACE
@router.put(
    "/settings/{key}",
    response_model=SettingValue,
    summary="Write setting",
    description="Store any JSON value under a key. Requires admin role.",
)
async def write_setting(
    payload: SettingWrite,
    key: str = Path(...),
    admin: Actor = Depends(require_roles("admin")),
    client: DataClient = Depends(get_data_client),
) -> SettingValue:
    return SettingValue(key=key, value=await SettingsService(client, admin).put(key, payload.value))
