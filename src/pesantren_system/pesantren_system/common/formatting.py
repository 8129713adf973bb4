"""Format tampilan: rupiah dan tanggal berbahasa Indonesia."""

from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

NAMA_BULAN = [
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
]
NAMA_BULAN_SINGKAT = ["Jan", "Feb", "Mar", "Apr", "Mei", "Jun", "Jul", "Agu", "Sep", "Okt", "Nov", "Des"]
NAMA_HARI = ["Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu"]


def format_rupiah(amount: Any) -> str:
    """1250000 -> 'Rp 1.250.000'. Tanpa desimal, pemisah ribuan titik."""
    value = Decimal(str(amount or 0)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    grouped = f"{abs(int(value)):,}".replace(",", ".")
    return f"{sign}Rp {grouped}"


def nama_bulan(month: int) -> str:
    return NAMA_BULAN[int(month) - 1]


def _as_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value)[:10], "%Y-%m-%d").date()


def format_tanggal(value: Any) -> str:
    """'2025-01-05' -> '05 Jan 2025'."""
    d = _as_date(value)
    if not d:
        return "-"
    return f"{d.day:02d} {NAMA_BULAN_SINGKAT[d.month - 1]} {d.year}"


def format_tanggal_panjang(value: Any) -> str:
    """'2025-01-06' -> 'Senin, 6 Januari 2025'."""
    d = _as_date(value)
    if not d:
        return "-"
    return f"{NAMA_HARI[d.weekday()]}, {d.day} {NAMA_BULAN[d.month - 1]} {d.year}"


def register_filters(app) -> None:
    app.jinja_env.filters["rupiah"] = format_rupiah
    app.jinja_env.filters["tanggal"] = format_tanggal
    app.jinja_env.filters["tanggal_panjang"] = format_tanggal_panjang
    app.jinja_env.filters["nama_bulan"] = nama_bulan
