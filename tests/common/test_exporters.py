from __future__ import annotations

import io

import pandas as pd
import pytest

from src.pesantren_system.pesantren_system.common.exporters import render_export, rows_to_csv
from src.pesantren_system.pesantren_system.core.exceptions import ValidationError

COLUMNS = [("no", "No"), ("nama", "Nama Santri"), ("nominal", "Nominal")]
ROWS = [{"no": 1, "nama": "Ali", "nominal": 150000}, {"no": 2, "nama": "Bilal", "nominal": None}]


def test_csv_has_header_and_blank_for_missing_values():
    text = rows_to_csv(ROWS, COLUMNS).decode("utf-8-sig").splitlines()

    assert text == ["No,Nama Santri,Nominal", "1,Ali,150000", "2,Bilal,"]


def test_excel_keeps_numbers_numeric():
    payload = render_export("XLSX", title="Laporan Penyaluran OTA", columns=COLUMNS, rows=ROWS)

    df = pd.read_excel(io.BytesIO(payload), engine="openpyxl")
    assert list(df.columns) == ["No", "Nama Santri", "Nominal"]
    assert df.loc[0, "Nominal"] == 150000


def test_pdf_is_generated():
    payload = render_export("pdf", title="Rekap", columns=COLUMNS, rows=ROWS, subtitle_lines=["Periode: Januari 2025"])
    assert payload.startswith(b"%PDF")


def test_unknown_format_rejected():
    with pytest.raises(ValidationError):
        render_export("docx", title="x", columns=COLUMNS, rows=ROWS)


@pytest.mark.parametrize("keterangan", ["Kegiatan <b>santri", "Rp 5.000 <br", "Infaq & sedekah </para>"])
def test_pdf_accepts_text_that_looks_like_markup(keterangan):
    columns = [("no", "No"), ("keterangan", "Keterangan <catatan>")]

    payload = render_export(
        "pdf",
        title="Pengeluaran <OTA>",
        columns=columns,
        rows=[{"no": 1, "keterangan": keterangan}],
        subtitle_lines=["Periode: <semua>"],
    )

    assert payload.startswith(b"%PDF")
