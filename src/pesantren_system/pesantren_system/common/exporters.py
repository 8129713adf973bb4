"""Export laporan ke Excel, CSV dan PDF.

Semua exporter menerima `columns` berupa daftar (key, judul kolom) dan `rows`
berupa list of dict; nilai diambil dengan key tersebut. Baris sudah berisi
nilai siap tampil (angka tetap angka agar bisa dijumlah di Excel).
"""

from __future__ import annotations

import csv
import io
from typing import Any, Iterable, Mapping, Sequence
from xml.sax.saxutils import escape

import pandas as pd
from flask import send_file
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..core.exceptions import ValidationError

Column = tuple[str, str]

EXPORT_FORMATS = {"xlsx", "csv", "pdf"}

_MIMETYPES = {
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "csv": "text/csv",
    "pdf": "application/pdf",
}


def _cell(row: Mapping[str, Any], key: str) -> Any:
    value = row.get(key)
    return "" if value is None else value


def rows_to_csv(rows: Iterable[Mapping[str, Any]], columns: Sequence[Column]) -> bytes:
    out = io.StringIO()
    writer = csv.writer(out)
    writer.writerow([title for _, title in columns])
    for row in rows:
        writer.writerow([_cell(row, key) for key, _ in columns])
    return out.getvalue().encode("utf-8-sig")


def rows_to_excel(rows: Iterable[Mapping[str, Any]], columns: Sequence[Column], *, sheet_name: str = "Laporan") -> bytes:
    data = [[_cell(row, key) for key, _ in columns] for row in rows]
    df = pd.DataFrame(data, columns=[title for _, title in columns])

    out = io.BytesIO()
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name[:31])
    return out.getvalue()


def rows_to_pdf(
    *,
    title: str,
    columns: Sequence[Column],
    rows: Iterable[Mapping[str, Any]],
    subtitle_lines: Sequence[str] = (),
) -> bytes:
    output = io.BytesIO()
    wide = len(columns) > 6
    doc = SimpleDocTemplate(output, pagesize=landscape(A4) if wide else A4)
    styles = getSampleStyleSheet()
    small_style = ParagraphStyle("small", parent=styles["Normal"], fontSize=8, leading=10)

    # Paragraph membaca teks sebagai markup; isi dari pengguna di-escape
    elements: list[Any] = [Paragraph(escape(title), styles["Title"])]
    for line in subtitle_lines:
        elements.append(Paragraph(escape(line), styles["Normal"]))
    elements.append(Spacer(1, 8))

    table_data = [[Paragraph(f"<b>{escape(t)}</b>", small_style) for _, t in columns]]
    for row in rows:
        table_data.append([Paragraph(escape(str(_cell(row, key))), small_style) for key, _ in columns])

    table = Table(table_data, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#0f766e")),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f1f5f9")]),
            ]
        )
    )
    elements.append(table)
    doc.build(elements)
    return output.getvalue()


def render_export(
    fmt: str,
    *,
    title: str,
    columns: Sequence[Column],
    rows: Sequence[Mapping[str, Any]],
    subtitle_lines: Sequence[str] = (),
) -> bytes:
    fmt = (fmt or "").lower()
    if fmt == "xlsx":
        return rows_to_excel(rows, columns, sheet_name=title)
    if fmt == "csv":
        return rows_to_csv(rows, columns)
    if fmt == "pdf":
        return rows_to_pdf(title=title, columns=columns, rows=rows, subtitle_lines=subtitle_lines)
    raise ValidationError("Format export tidak dikenal")


def export_response(
    fmt: str,
    *,
    filename: str,
    title: str,
    columns: Sequence[Column],
    rows: Sequence[Mapping[str, Any]],
    subtitle_lines: Sequence[str] = (),
):
    """Flask download response for the given format (xlsx/csv/pdf)."""
    payload = render_export(fmt, title=title, columns=columns, rows=rows, subtitle_lines=subtitle_lines)
    return send_file(
        io.BytesIO(payload),
        mimetype=_MIMETYPES[fmt.lower()],
        as_attachment=True,
        download_name=f"{filename}.{fmt.lower()}",
    )
