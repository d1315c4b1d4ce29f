from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class BackupMetadata(BaseModel):
    created_at: datetime
    version: str
    description: Optional[str] = None
    tables: List[str]
    total_records: int
    record_counts: Dict[str, int] = Field(default_factory=dict)
    backup_type: str = "full"


class BackupDocument(BaseModel):
    metadata: BackupMetadata
    data: Dict[str, List[Dict[str, Any]]]


class BackupValidation(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class RestoreResult(BaseModel):
    mode: Literal["merge", "replace"]
    restored: Dict[str, int] = Field(default_factory=dict, description="Inserted records per table")
    skipped: Dict[str, int] = Field(default_factory=dict, description="Records already present (merge mode)")
    warnings: List[str] = Field(default_factory=list, description="Backup validation warnings, e.g. ignored tables")


class BackupHistoryEntry(BaseModel):
    id: str
    name: str
    created_at: datetime
    size: str = Field(..., description='Human readable size, e.g. "12.4 KB"')
    tables: List[str]
    version: str
    type: str
    checksum: str = Field(..., description="sha256 of the file contents")


class BackupSettings(BaseModel):
    """Stored under the `backup_settings` app setting."""
    auto_backup: bool = False
    frequency: Literal["daily", "weekly", "monthly"] = "weekly"
    max_backups: int = Field(10, ge=1)
    backup_time: str = Field("02:00", pattern=r"^\d{2}:\d{2}$")
