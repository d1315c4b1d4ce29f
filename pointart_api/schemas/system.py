from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .common import IDModel, Timestamps


class AuditEntryRead(IDModel, Timestamps):
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    action: str
    table_name: Optional[str] = None
    record_id: Optional[str] = None
    old_values: Optional[Dict[str, Any]] = None
    new_values: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    class Config:
        from_attributes = True


class SettingValue(BaseModel):
    key: str
    value: Any = None


class SettingWrite(BaseModel):
    value: Any = Field(..., description="Any JSON value")


class SettingKeys(BaseModel):
    keys: List[str] = Field(default_factory=list)
