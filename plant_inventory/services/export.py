"""
Tabular exports shared by the report and purchase-list endpoints.

DataFrames are rendered as CSV (pandas), XLSX (openpyxl engine) or a simple
PDF table (reportlab) and streamed back as file attachments.
"""
from __future__ import annotations

import io
from datetime import datetime, timezone
from typing import Iterable, List, Optional

import pandas as pd
from fastapi.responses import StreamingResponse

from plant_inventory.schemas.reorder import ReorderEntry, ReorderMode, RecommendationsResult

EXPORT_FORMATS = ("csv", "xlsx", "pdf")

REORDER_CSV_SEPARATOR = ";"

COL_ITEM = "Item"
COL_STOCK = "Current stock"
COL_REQUIRED = "Required (machines)"
COL_THRESHOLD = "Threshold"
COL_TO_BUY = "Quantity to buy (calculated)"
COL_AI = "Quantity to buy (AI)"


def _csv_text(df: pd.DataFrame, separator: str) -> str:
    return df.to_csv(index=False, sep=separator, lineterminator="\n")


def _format_quantity(value: Optional[float]) -> str:
    if value is None:
        return ""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


# PUBLIC_INTERFACE
def reorder_dataframe(
    entries: Iterable[ReorderEntry],
    mode: ReorderMode | str,
    recommendations: Optional[RecommendationsResult] = None,
) -> pd.DataFrame:
    """
    Build the purchase list table.

    The required column only exists in filter mode; the AI column only when
    suggestions were supplied, left empty for items the model did not cover.
    """
    mode = ReorderMode(mode)
    columns: List[str] = [COL_ITEM, COL_STOCK]
    if mode == ReorderMode.filter:
        columns.append(COL_REQUIRED)
    columns += [COL_THRESHOLD, COL_TO_BUY]
    if recommendations is not None:
        columns.append(COL_AI)

    rows = []
    for entry in entries:
        row = {
            COL_ITEM: entry.item.name,
            COL_STOCK: entry.item.stock,
            COL_THRESHOLD: entry.item.threshold,
            COL_TO_BUY: entry.quantity_to_buy,
        }
        if mode == ReorderMode.filter:
            row[COL_REQUIRED] = entry.total_required
        if recommendations is not None:
            row[COL_AI] = _format_quantity(recommendations.quantity_for(entry.item.name))
        rows.append(row)
    return pd.DataFrame(rows, columns=columns)


# PUBLIC_INTERFACE
def export_reorder_csv(
    entries: Iterable[ReorderEntry],
    mode: ReorderMode | str,
    recommendations: Optional[RecommendationsResult] = None,
) -> str:
    """Render the purchase list as semicolon-delimited CSV, one row per item."""
    df = reorder_dataframe(entries, mode, recommendations)
    return _csv_text(df, REORDER_CSV_SEPARATOR)


def _pdf_bytes(df: pd.DataFrame, title: str) -> io.BytesIO:
    from reportlab.lib import colors
    from reportlab.lib.pagesizes import letter, landscape
    from reportlab.lib.styles import getSampleStyleSheet
    from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=landscape(letter), leftMargin=18, rightMargin=18, topMargin=18, bottomMargin=18
    )
    styles = getSampleStyleSheet()
    stamp = datetime.now(tz=timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    elements: list = [Paragraph(f"{title} ({stamp})", styles["Title"])]

    data = [list(df.columns)] + df.astype(str).values.tolist()
    table = Table(data, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.black),
                ("ALIGN", (0, 0), (-1, -1), "LEFT"),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
                ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ]
        )
    )
    elements.append(table)
    doc.build(elements)
    buffer.seek(0)
    return buffer


# PUBLIC_INTERFACE
def export_dataframe(
    df: pd.DataFrame,
    filename_base: str,
    export_format: str,
    csv_separator: str = ",",
) -> StreamingResponse:
    """
    Convert DataFrame to the requested format and return a StreamingResponse.

    Supported formats:
      - csv: text/csv
      - xlsx: application/vnd.openxmlformats-officedocument.spreadsheetml.sheet
      - pdf: application/pdf (simple tabular rendering)
    Unknown formats fall back to CSV.
    """
    export_format = (export_format or "csv").lower()

    if export_format in ("xlsx", "excel"):
        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Report")
        buffer.seek(0)
        return StreamingResponse(
            buffer,
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={"Content-Disposition": f'attachment; filename="{filename_base}.xlsx"'},
        )

    if export_format == "pdf":
        buffer = _pdf_bytes(df, filename_base.replace("_", " ").title())
        return StreamingResponse(
            buffer,
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{filename_base}.pdf"'},
        )

    text = _csv_text(df, csv_separator)
    return StreamingResponse(
        io.StringIO(text),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename_base}.csv"'},
    )
