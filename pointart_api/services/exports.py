"""
Tabular exports (CSV, Excel, PDF) of the business tables and the printable
invoice.

DataFrames are built with pandas; Excel goes through openpyxl and PDF through
reportlab.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from pointart_api.core.errors import NotFoundError, ValidationFailed
from pointart_api.db.client import DataClient, Record
from .invoices import format_currency

logger = logging.getLogger(__name__)

MEDIA_TYPES = {
    "csv": "text/csv",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "pdf": "application/pdf",
}

TIMESTAMP_COLUMNS = ("created_at", "updated_at")


# PUBLIC_INTERFACE
def convert_to_csv(records: Sequence[Mapping[str, Any]], headers: Optional[Mapping[str, str]] = None) -> str:
    """
    Render records as CSV text.

    Columns are the union of keys in first-seen order; `headers` maps keys to
    display names. None becomes an empty cell, values containing a comma, quote
    or newline are quoted with inner quotes doubled, and rows are joined by
    "\\n" without a trailing newline. No records gives "".
    """
    if not records:
        return ""
    columns: List[str] = []
    for record in records:
        for key in record:
            if key not in columns:
                columns.append(key)

    df = pd.DataFrame([[r.get(c) for c in columns] for r in records], columns=columns, dtype=object)
    if headers:
        df = df.rename(columns=lambda c: headers.get(c, c))
    text = df.to_csv(index=False, na_rep="", lineterminator="\n")
    return text[:-1] if text.endswith("\n") else text


@dataclass(frozen=True)
class Dataset:
    """An exportable table: its columns, display headers and money columns."""
    table: str
    title: str
    columns: Tuple[str, ...]
    money: Tuple[str, ...] = ()
    date_column: str = "date"
    headers: Dict[str, str] = field(default_factory=dict)


def _ds(table: str, title: str, columns: str, money: str = "", date_column: str = "date") -> Dataset:
    cols = tuple(c.strip() for c in columns.split(","))
    return Dataset(
        table=table,
        title=title,
        columns=cols,
        money=tuple(c.strip() for c in money.split(",") if c.strip()),
        date_column=date_column,
        headers={c: c.replace("_", " ").title() for c in cols},
    )


DATASETS: Dict[str, Dataset] = {
    d.table: d
    for d in (
        _ds("stationery", "Stationery Inventory",
            "item, category, description, quantity, stock, rate, selling_price, profit_per_unit, "
            "low_stock_threshold, sold_by, date, created_at",
            "rate, selling_price, profit_per_unit"),
        _ds("gift_store", "Gift Store Inventory",
            "item, category, description, quantity, rate, selling_price, profit, sold_by, date, created_at",
            "rate, selling_price, profit"),
        _ds("embroidery", "Embroidery Jobs",
            "job_description, quantity, rate, quotation, deposit, balance, expenditure, profit, sales, done_by, date, "
            "created_at",
            "rate, quotation, deposit, balance, expenditure, profit, sales"),
        _ds("machines", "Machine Services",
            "machine_name, service_description, quantity, rate, sales, done_by, date, created_at",
            "rate, sales"),
        _ds("art_services", "Art Services",
            "service_name, description, quantity, rate, quotation, deposit, balance, expenditure, profit, sales, "
            "done_by, date, created_at",
            "rate, quotation, deposit, balance, expenditure, profit, sales"),
        _ds("stationery_sales", "Stationery Sales",
            "item_id, quantity, rate, selling_price, total_amount, profit, description, sold_by, date, created_at",
            "rate, selling_price, total_amount, profit"),
        _ds("gift_daily_sales", "Gift Store Daily Sales",
            "item, code, description, quantity, unit, bpx, spx, total_amount, profit, sold_by, date, created_at",
            "bpx, spx, total_amount, profit"),
        _ds("customers", "Customers",
            "full_name, email, phone, company, customer_type, total_purchases, outstanding_balance, credit_limit, "
            "last_purchase_date, created_at",
            "total_purchases, outstanding_balance, credit_limit", date_column="created_at"),
        _ds("invoices", "Invoices",
            "invoice_number, reference_number, customer_name, invoice_date, total_amount, amount_in_words, status, "
            "created_at",
            "total_amount", date_column="created_at"),
    )
}


# PUBLIC_INTERFACE
def get_dataset(name: str) -> Dataset:
    try:
        return DATASETS[name]
    except KeyError:
        raise NotFoundError(f"Unknown report dataset '{name}'")


# PUBLIC_INTERFACE
def export_filename(dataset: str, ext: str, include_timestamp: bool = True, now: Optional[datetime] = None) -> str:
    """<dataset>[-YYYY-MM-DD-HH-MM-SS].<ext>"""
    if not include_timestamp:
        return f"{dataset}.{ext}"
    stamp = (now or datetime.now()).strftime("%Y-%m-%d-%H-%M-%S")
    return f"{dataset}-{stamp}.{ext}"


def _format_timestamp(value: Any) -> Any:
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    return value


def format_records(dataset: Dataset, rows: Iterable[Record]) -> List[Record]:
    """Project rows onto the dataset columns with money and timestamps formatted for display."""
    out: List[Record] = []
    for row in rows:
        record: Record = {}
        for col in dataset.columns:
            value = row.get(col)
            if col in dataset.money and value is not None:
                value = format_currency(value)
            elif col in TIMESTAMP_COLUMNS:
                value = _format_timestamp(value)
            record[col] = value
        out.append(record)
    return out


async def fetch_rows(
    client: DataClient, dataset: Dataset, start: Optional[date] = None, end: Optional[date] = None
) -> List[Record]:
    query = client.table(dataset.table).select("*")
    if dataset.date_column == "created_at":
        if start:
            query = query.gte("created_at", start)
        if end:
            query = query.lt("created_at", end + timedelta(days=1))
    else:
        if start:
            query = query.gte(dataset.date_column, start)
        if end:
            query = query.lte(dataset.date_column, end)
    res = await query.order(dataset.date_column, desc=True).execute()
    return list(res.data)


def _dataframe(dataset: Dataset, records: List[Record]) -> pd.DataFrame:
    df = pd.DataFrame(records, columns=list(dataset.columns), dtype=object)
    return df.rename(columns=dataset.headers)


def render_table_pdf(title: str, columns: List[str], rows: List[List[Any]]) -> bytes:
    """Simple landscape table: title, generation time, header row and body rows."""
    from reportlab.lib import colors
    from reportlab.lib.pagesizes import landscape, letter
    from reportlab.lib.styles import getSampleStyleSheet
    from reportlab.platypus import Paragraph, SimpleDocTemplate, Table, TableStyle

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=landscape(letter), leftMargin=18, rightMargin=18, topMargin=18, bottomMargin=18
    )
    styles = getSampleStyleSheet()
    generated = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    elements: list = [
        Paragraph(title, styles["Title"]),
        Paragraph(f"Generated {generated}", styles["Normal"]),
    ]
    data = [columns] + [["" if v is None else str(v) for v in row] for row in rows]
    table = Table(data, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.black),
                ("ALIGN", (0, 0), (-1, -1), "LEFT"),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 7),
                ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ]
        )
    )
    elements.append(table)
    doc.build(elements)
    return buffer.getvalue()


# PUBLIC_INTERFACE
def render_dataset(dataset: Dataset, records: List[Record], export_format: str) -> bytes:
    """Render formatted records as csv, xlsx or pdf bytes."""
    export_format = (export_format or "csv").lower()
    if export_format == "csv":
        return convert_to_csv(records, dataset.headers).encode("utf-8")

    if export_format == "xlsx":
        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            _dataframe(dataset, records).to_excel(writer, index=False, sheet_name=dataset.title[:31])
        return buffer.getvalue()

    if export_format == "pdf":
        df = _dataframe(dataset, records)
        return render_table_pdf(dataset.title, list(df.columns), df.where(df.notna(), None).values.tolist())

    raise ValidationFailed(f"Unsupported export format '{export_format}'")


# PUBLIC_INTERFACE
def render_invoice_pdf(invoice: Record) -> bytes:
    """Printable invoice: header block, line items table, total and amount in words."""
    from reportlab.lib import colors
    from reportlab.lib.pagesizes import A4
    from reportlab.lib.styles import getSampleStyleSheet
    from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, leftMargin=36, rightMargin=36, topMargin=36, bottomMargin=36)
    styles = getSampleStyleSheet()
    elements: list = [
        Paragraph("Point Art Hub", styles["Title"]),
        Paragraph(f"Invoice No. {invoice['invoice_number']}", styles["Heading2"]),
        Paragraph(f"Reference: {invoice['reference_number']}", styles["Normal"]),
        Paragraph(f"Date: {invoice['invoice_date']}", styles["Normal"]),
        Paragraph(f"Bill to: {invoice['customer_name']}", styles["Normal"]),
        Spacer(1, 12),
    ]

    data = [["S/N", "Particulars", "Qty", "Rate", "Amount"]]
    for item in invoice.get("items", []):
        particulars = item["particulars"]
        if item.get("description"):
            particulars = f"{particulars} - {item['description']}"
        data.append([
            str(item["serial_number"]),
            particulars,
            f"{float(item['quantity']):g}",
            format_currency(item["rate"]),
            format_currency(item["amount"]),
        ])
    data.append(["", "", "", "Total", format_currency(invoice["total_amount"])])

    table = Table(data, repeatRows=1, colWidths=[36, 230, 50, 90, 100])
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTNAME", (3, -1), (-1, -1), "Helvetica-Bold"),
                ("ALIGN", (2, 1), (-1, -1), "RIGHT"),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("GRID", (0, 0), (-1, -2), 0.25, colors.grey),
            ]
        )
    )
    elements += [table, Spacer(1, 12)]
    if invoice.get("amount_in_words"):
        elements.append(Paragraph(f"Amount in words: {invoice['amount_in_words']}", styles["Normal"]))
    if invoice.get("notes"):
        elements.append(Paragraph(f"Notes: {invoice['notes']}", styles["Normal"]))
    doc.build(elements)
    return buffer.getvalue()
