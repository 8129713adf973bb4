"""Perhitungan keuangan OTA.

Fungsi murni di atas list entitas ledger (Pemasukan/Pengeluaran/Penyaluran),
tanpa akses database, supaya gampang dipakai ulang oleh laporan, dashboard
dan validasi saldo.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Optional, Sequence

from ..common.datetime_utils import in_period
from ..common.formatting import format_rupiah
from ..core.constants import DEFAULT_TOP_DONORS
from ..core.exceptions import ValidationError
from .model import DonorTotal, Pemasukan

ZERO = Decimal("0")


def _amount(row: Any, field: str) -> Decimal:
    value = getattr(row, field, None)
    if value is None:
        return ZERO
    return value if isinstance(value, Decimal) else Decimal(str(value))


def total(rows: Iterable[Any], field: str = "jumlah") -> Decimal:
    return sum((_amount(r, field) for r in rows), ZERO)


def filter_period(
    rows: Iterable[Any], *, year: Optional[int], month: Optional[int] = None, ota_id: Optional[int] = None
) -> list:
    """Rows in the year/month; `ota_id` only filters rows that carry an ota_id field."""
    out = []
    for r in rows:
        if year is not None and not in_period(r.tanggal, year, month):
            continue
        if ota_id is not None and hasattr(r, "ota_id") and r.ota_id != ota_id:
            continue
        out.append(r)
    return out


def balance(income: Iterable[Any], expense: Iterable[Any]) -> Decimal:
    return total(income) - total(expense)


def available_balance(pemasukan: Iterable[Any], pengeluaran: Iterable[Any], penyaluran: Iterable[Any]) -> Decimal:
    return total(pemasukan) - total(pengeluaran) - total(penyaluran, "nominal")


def usage_percent(part: Decimal, whole: Decimal, *, cap: Optional[int] = None) -> int:
    if not whole:
        return 0
    percent = int((Decimal(part) / Decimal(whole) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    if cap is not None:
        percent = min(percent, cap)
    return percent


def top_donors(pemasukan: Iterable[Pemasukan], n: int = DEFAULT_TOP_DONORS) -> list[DonorTotal]:
    totals: dict[int, Decimal] = {}
    names: dict[int, str] = {}
    for p in pemasukan:
        totals[p.ota_id] = totals.get(p.ota_id, ZERO) + _amount(p, "jumlah")
        names.setdefault(p.ota_id, p.ota_nama or "Unknown")
    ranked = sorted(totals.items(), key=lambda kv: kv[1], reverse=True)[:n]
    return [DonorTotal(ota_id=ota_id, nama=names[ota_id], total=amount) for ota_id, amount in ranked]


def is_low_balance(saldo: Decimal, threshold: Decimal) -> bool:
    """Peringatan saldo hampir habis: 0 <= saldo < threshold."""
    return ZERO <= Decimal(saldo) < Decimal(threshold)


def recent(rows: Sequence[Any], n: int) -> list:
    return sorted(rows, key=lambda r: r.tanggal, reverse=True)[:n]


def ensure_expense_allowed(
    *, total_pemasukan: Decimal, total_pengeluaran: Decimal, jumlah: Decimal, current_edit: Decimal = ZERO
) -> None:
    """Pengeluaran baru tidak boleh membuat total pengeluaran melebihi total pemasukan.

    Saat edit, jumlah lama baris tersebut dihitung sebagai saldo tersedia.
    """
    tersedia = total_pemasukan - total_pengeluaran + current_edit
    if jumlah > tersedia:
        raise ValidationError(f"Saldo tidak mencukupi! Saldo tersedia: {format_rupiah(tersedia)}")


def ensure_disbursement_allowed(*, saldo_tersedia: Decimal, nominal: Decimal, current_edit: Decimal = ZERO) -> None:
    tersedia = saldo_tersedia + current_edit
    if nominal > tersedia:
        raise ValidationError(f"Saldo tidak mencukupi! Saldo tersedia: {format_rupiah(tersedia)}")
