from __future__ import annotations

import io
from typing import List, Literal, Optional

from fastapi import APIRouter, Body, Depends, File, Form, UploadFile
from fastapi.responses import StreamingResponse

from pointart_api.core.deps import get_data_client, require_roles
from pointart_api.db.client import DataClient
from pointart_api.schemas.backup import BackupHistoryEntry, BackupSettings, BackupValidation, RestoreResult
from pointart_api.services.backup import BackupService, parse_backup, validate_backup
from pointart_api.services.base import Actor
from pointart_api.services.settings import BACKUP_SETTINGS_KEY, SettingsService

router = APIRouter(prefix="/backup", tags=["Backup"])


# PUBLIC_INTERFACE
@router.post(
    "/export",
    summary="Download full backup",
    description="Build a JSON backup of every business table, record it in the history and download it.",
    response_class=StreamingResponse,
)
async def export_backup(
    description: Optional[str] = Body(None, embed=True),
    admin: Actor = Depends(require_roles("admin")),
    client: DataClient = Depends(get_data_client),
) -> StreamingResponse:
    filename, content, entry = await BackupService(client, admin).export_backup(description)
    headers = {
        "Content-Disposition": f'attachment; filename="{filename}"',
        "X-Backup-Checksum": entry.checksum,
    }
    return StreamingResponse(io.BytesIO(content), media_type="application/json", headers=headers)


# PUBLIC_INTERFACE
@router.post(
    "/validate",
    response_model=BackupValidation,
    summary="Validate backup file",
    description="Check an uploaded backup for metadata, critical tables and table data format.",
)
async def validate_backup_file(
    file: UploadFile = File(...),
    admin: Actor = Depends(require_roles("admin")),
) -> BackupValidation:
    return validate_backup(parse_backup(await file.read()))


# PUBLIC_INTERFACE
@router.post(
    "/restore",
    response_model=RestoreResult,
    summary="Restore from backup file",
    description=(
        "Restore an uploaded backup. 'merge' inserts records whose id is not present; "
        "'replace' clears each backed-up table first. All records are checked before anything is "
        "written and the restore runs in one transaction."
    ),
)
async def restore_backup(
    file: UploadFile = File(...),
    mode: Literal["merge", "replace"] = Form("merge"),
    admin: Actor = Depends(require_roles("admin")),
    client: DataClient = Depends(get_data_client),
) -> RestoreResult:
    document = parse_backup(await file.read())
    return await BackupService(client, admin).restore(document, mode)


# PUBLIC_INTERFACE
@router.get("/history", response_model=List[BackupHistoryEntry], summary="Backup history")
async def backup_history(
    admin: Actor = Depends(require_roles("admin")),
    client: DataClient = Depends(get_data_client),
) -> List[BackupHistoryEntry]:
    return await BackupService(client, admin).history()


# PUBLIC_INTERFACE
@router.get("/settings", response_model=BackupSettings, summary="Read backup settings")
async def read_backup_settings(
    admin: Actor = Depends(require_roles("admin")),
    client: DataClient = Depends(get_data_client),
) -> BackupSettings:
    return await SettingsService(client, admin).backup_settings()


# PUBLIC_INTERFACE
@router.put("/settings", response_model=BackupSettings, summary="Update backup settings")
async def write_backup_settings(
    payload: BackupSettings,
    admin: Actor = Depends(require_roles("admin")),
    client: DataClient = Depends(get_data_client),
) -> BackupSettings:
    await SettingsService(client, admin).put(BACKUP_SETTINGS_KEY, payload.model_dump())
    return payload
