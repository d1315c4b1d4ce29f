"""
Full backups of the business tables as one JSON document, with validation,
restore (merge or replace) and a download history kept in app settings.
"""

from __future__ import annotations

import hashlib
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, Tuple

from pointart_api.core.errors import ValidationFailed
from pointart_api.db.base import Base
from pointart_api.db.client import Record
from pointart_api.db.coerce import coerce_record, coerce_value
from pointart_api.schemas.backup import (
    BackupDocument,
    BackupHistoryEntry,
    BackupMetadata,
    BackupValidation,
    RestoreResult,
)
from .audit import AuditService
from .base import BaseService
from .settings import BACKUP_HISTORY_KEY, SettingsService

logger = logging.getLogger(__name__)

BACKUP_VERSION = "1.0.0"

# Parents before children; replace mode clears in reverse.
BACKUP_TABLES: Tuple[str, ...] = (
    "stationery",
    "gift_store",
    "embroidery",
    "machines",
    "art_services",
    "stationery_sales",
    "gift_daily_sales",
    "customers",
    "invoices",
    "invoice_items",
    "product_categories",
    "profiles",
)
CRITICAL_TABLES: Tuple[str, ...] = ("stationery", "gift_store", "stationery_sales")
RESTORE_BATCH_SIZE = 100

RestoreMode = Literal["merge", "replace"]


# PUBLIC_INTERFACE
def format_size(size_bytes: int) -> str:
    """"12.4 KB" below one megabyte, "1.25 MB" from there on."""
    megabytes = size_bytes / (1024 * 1024)
    if megabytes < 1:
        return f"{size_bytes / 1024:.1f} KB"
    return f"{megabytes:.2f} MB"


# PUBLIC_INTERFACE
def backup_filename(backup_type: str = "full", now: Optional[datetime] = None) -> str:
    stamp = (now or datetime.now()).strftime("%Y-%m-%d-%H-%M-%S")
    return f"point-art-hub-{backup_type}-backup-{stamp}.json"


# PUBLIC_INTERFACE
def validate_backup(document: Any) -> BackupValidation:
    """
    Structural checks on an uploaded backup.

    Reports missing metadata fields, missing critical tables and tables whose
    data is not a list. Tables this server does not know are only warned about.
    """
    errors: List[str] = []
    warnings: List[str] = []
    if not isinstance(document, dict) or not document:
        return BackupValidation(valid=False, errors=["Backup file is empty or corrupted"])

    metadata = document.get("metadata")
    if not isinstance(metadata, dict):
        errors.append("Missing backup metadata")
    else:
        if not metadata.get("created_at"):
            errors.append("Missing creation date")
        if not metadata.get("version"):
            errors.append("Missing version information")
        if not isinstance(metadata.get("tables"), list):
            errors.append("Invalid tables list")

    data = document.get("data")
    if not isinstance(data, dict):
        errors.append("Missing or invalid backup data")
    else:
        missing = [t for t in CRITICAL_TABLES if t not in data]
        if missing:
            errors.append(f"Missing critical tables: {', '.join(missing)}")
        for table, rows in data.items():
            if not isinstance(rows, list):
                errors.append(f"Invalid data format for table: {table}")
            elif table not in BACKUP_TABLES:
                warnings.append(f"Unknown table will be ignored: {table}")

    return BackupValidation(valid=not errors, errors=errors, warnings=warnings)


# PUBLIC_INTERFACE
def parse_backup(raw: bytes) -> Dict[str, Any]:
    """Decode an uploaded backup file; raises ValidationFailed when it is not JSON."""
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValidationFailed("Backup file is not valid JSON", details={"reason": str(exc)})


_PROFILE_KEYS = frozenset({"id", "user_id", "created_at", "updated_at"})


def _prepare_profile(row: Any) -> Tuple[Record, List[str]]:
    if not isinstance(row, dict):
        return {}, ["record is not an object"]
    columns = Base.metadata.tables["profiles"].columns
    clean: Record = {"user_id": row.get("user_id")}
    problems: List[str] = []
    for column in columns:
        if column.name in _PROFILE_KEYS or column.name not in row:
            continue
        try:
            clean[column.name] = coerce_value(column, row[column.name])
        except (TypeError, ValueError) as exc:
            problems.append(str(exc))
    return clean, problems


def _prepare_tables(data: Dict[str, Any], tables: List[str]) -> Tuple[Dict[str, List[Record]], List[str]]:
    """Convert every record to its table's column types; collect what cannot be."""
    prepared: Dict[str, List[Record]] = {}
    problems: List[str] = []
    for table in tables + (["profiles"] if "profiles" in data else []):
        rows: List[Record] = []
        for number, row in enumerate(data[table], start=1):
            clean, row_problems = _prepare_profile(row) if table == "profiles" else coerce_record(table, row)
            problems.extend(f"{table} row {number}: {problem}" for problem in row_problems)
            rows.append(clean)
        prepared[table] = rows
    return prepared, problems


class BackupService(BaseService):
    """Creates and restores full backups; keeps the backup history."""

    # PUBLIC_INTERFACE
    async def create_backup(self, description: Optional[str] = None, backup_type: str = "manual") -> BackupDocument:
        data: Dict[str, List[Record]] = {}
        for table in BACKUP_TABLES:
            res = await self.client.table(table).select("*").execute()
            data[table] = list(res.data)

        counts = {t: len(rows) for t, rows in data.items()}
        now = datetime.now(timezone.utc)
        metadata = BackupMetadata(
            created_at=now,
            version=BACKUP_VERSION,
            description=description or f"{backup_type} backup created on {now:%Y-%m-%d %H:%M:%S} UTC",
            tables=list(BACKUP_TABLES),
            total_records=sum(counts.values()),
            record_counts=counts,
            backup_type="full",
        )
        logger.info("Backup created: %d records across %d tables", metadata.total_records, len(BACKUP_TABLES))
        return BackupDocument(metadata=metadata, data=data)

    # PUBLIC_INTERFACE
    async def export_backup(
        self, description: Optional[str] = None, backup_type: str = "manual"
    ) -> Tuple[str, bytes, BackupHistoryEntry]:
        """Build the backup file, record it in the history and return (filename, content, entry)."""
        document = await self.create_backup(description, backup_type)
        content = document.model_dump_json(indent=2).encode("utf-8")
        filename = backup_filename(document.metadata.backup_type)
        entry = BackupHistoryEntry(
            id=str(uuid.uuid4()),
            name=filename,
            created_at=document.metadata.created_at,
            size=format_size(len(content)),
            tables=document.metadata.tables,
            version=document.metadata.version,
            type=backup_type,
            checksum=hashlib.sha256(content).hexdigest(),
        )
        await self._remember(entry)
        await AuditService(self.client, self.actor).record(
            "backup_export", None, entry.id, new_values={"name": filename, "records": document.metadata.total_records}
        )
        return filename, content, entry

    async def _remember(self, entry: BackupHistoryEntry) -> None:
        settings = SettingsService(self.client, self.actor)
        limit = (await settings.backup_settings()).max_backups
        history = [entry.model_dump(mode="json")] + list(await settings.get(BACKUP_HISTORY_KEY) or [])
        await settings.put(BACKUP_HISTORY_KEY, history[:limit], audit=False)

    async def history(self) -> List[BackupHistoryEntry]:
        raw = await SettingsService(self.client, self.actor).get(BACKUP_HISTORY_KEY) or []
        return [BackupHistoryEntry.model_validate(item) for item in raw]

    # PUBLIC_INTERFACE
    async def restore(self, document: Dict[str, Any], mode: RestoreMode = "merge") -> RestoreResult:
        """
        Restore the known tables of a validated backup.

        merge inserts records whose id is not present yet; replace clears each
        table before inserting. Profiles are always merged and only for
        accounts that exist on this server.

        Every record is checked against its table before anything is written;
        a single bad record rejects the whole file with a 422. The writes then
        run in one transaction, so a failure part way leaves the data as it was.
        """
        validation = validate_backup(document)
        if not validation.valid:
            raise ValidationFailed("Invalid backup file", details={"errors": validation.errors})

        data: Dict[str, List[Record]] = document["data"]
        tables = [t for t in BACKUP_TABLES if t in data and t != "profiles"]
        prepared, problems = _prepare_tables(data, tables)
        if problems:
            raise ValidationFailed("Backup contains invalid records", details={"errors": problems})

        result = RestoreResult(mode=mode, warnings=validation.warnings)
        async with self.client.transaction():
            if mode == "replace":
                for table in reversed(tables):
                    await self.client.table(table).delete().execute()
            for table in tables:
                restored, skipped = await self._restore_table(table, prepared[table], check_existing=mode == "merge")
                result.restored[table] = restored
                result.skipped[table] = skipped
            if "profiles" in prepared:
                restored, skipped = await self._restore_profiles(prepared["profiles"])
                result.restored["profiles"] = restored
                result.skipped["profiles"] = skipped

        logger.info("Restore (%s) finished: %s", mode, result.restored)
        await AuditService(self.client, self.actor).record(
            "backup_restore", None, None, new_values={"mode": mode, "restored": result.restored},
        )
        return result

    async def _existing_ids(self, table: str) -> set:
        res = await self.client.table(table).select("id").execute()
        return {str(r["id"]) for r in res.data}

    async def _restore_table(self, table: str, rows: List[Record], *, check_existing: bool) -> Tuple[int, int]:
        existing = await self._existing_ids(table) if check_existing else set()
        records = []
        skipped = 0
        for row in rows:
            if row.get("id") is not None and str(row["id"]) in existing:
                skipped += 1
                continue
            records.append(row)

        for start in range(0, len(records), RESTORE_BATCH_SIZE):
            await self.client.table(table).insert(records[start:start + RESTORE_BATCH_SIZE]).execute()
        return len(records), skipped

    async def _restore_profiles(self, rows: List[Record]) -> Tuple[int, int]:
        users = await self._existing_ids("users")
        restored = skipped = 0
        for row in rows:
            user_id = str(row.get("user_id") or "")
            if user_id not in users:
                skipped += 1
                continue
            values = {k: v for k, v in row.items() if k not in _PROFILE_KEYS}
            current = await self.client.table("profiles").select("id").eq("user_id", user_id).maybe_single().execute()
            if current.data:
                await self.client.table("profiles").update(values).eq("user_id", user_id).execute()
            else:
                await self.client.table("profiles").insert({**values, "user_id": user_id}).execute()
            restored += 1
        return restored, skipped
