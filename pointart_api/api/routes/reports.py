from __future__ import annotations

import io
from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import StreamingResponse

from pointart_api.core.deps import get_current_active_user, get_data_client
from pointart_api.db.client import DataClient
from pointart_api.services.base import Actor
from pointart_api.services.exports import (
    DATASETS,
    MEDIA_TYPES,
    export_filename,
    fetch_rows,
    format_records,
    get_dataset,
    render_dataset,
)

# PUBLIC_INTERFACE
router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
)

ExportFormat = Literal["csv", "xlsx", "pdf"]


def _export(content: bytes, filename: str, export_format: str) -> StreamingResponse:
    """Wrap rendered bytes in a download response."""
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return StreamingResponse(io.BytesIO(content), media_type=MEDIA_TYPES[export_format], headers=headers)


# PUBLIC_INTERFACE
@router.get(
    "",
    summary="List report datasets",
    description="Names of the datasets available for export.",
)
async def list_datasets(user: Actor = Depends(get_current_active_user)) -> dict:
    return {"datasets": [{"name": d.table, "title": d.title} for d in DATASETS.values()]}


# PUBLIC_INTERFACE
@router.get(
    "/{dataset}",
    summary="Export dataset",
    description=(
        "Export an inventory category, a sales ledger, customers or invoices as CSV, Excel or PDF. "
        "Money columns are formatted as currency and timestamps as YYYY-MM-DD HH:MM:SS. "
        "The date range applies to `date` for ledgers and inventory, `created_at` for customers and invoices."
    ),
    response_class=StreamingResponse,
)
async def export_dataset(
    dataset: str = Path(..., description="Dataset name, e.g. stationery or stationery_sales"),
    format: ExportFormat = Query("csv", description="csv | xlsx | pdf"),
    start: Optional[date] = Query(None, description="Start date (inclusive)"),
    end: Optional[date] = Query(None, description="End date (inclusive)"),
    include_timestamp: bool = Query(True, description="Append the export time to the filename"),
    user: Actor = Depends(get_current_active_user),
    client: DataClient = Depends(get_data_client),
) -> StreamingResponse:
    ds = get_dataset(dataset)
    rows = await fetch_rows(client, ds, start, end)
    content = render_dataset(ds, format_records(ds, rows), format)
    return _export(content, export_filename(ds.table, format, include_timestamp), format)
