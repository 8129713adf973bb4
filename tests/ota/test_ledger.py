from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from src.pesantren_system.pesantren_system.core.exceptions import ValidationError
from src.pesantren_system.pesantren_system.ota import ledger
from src.pesantren_system.pesantren_system.ota.model import Pemasukan, Pengeluaran, Penyaluran


def _in(pid: int, ota_id: int, tanggal: date, jumlah: int, nama: str = "Donatur") -> Pemasukan:
    return Pemasukan(pemasukan_id=pid, ota_id=ota_id, tanggal=tanggal, jumlah=Decimal(jumlah), ota_nama=nama)


def test_total_and_balance():
    income = [_in(1, 1, date(2025, 1, 5), 500_000), _in(2, 2, date(2025, 2, 5), 250_000)]
    expense = [Pengeluaran(pengeluaran_id=1, tanggal=date(2025, 1, 10), keperluan="SPP", jumlah=Decimal("300000"))]

    assert ledger.total(income) == Decimal("750000")
    assert ledger.total([]) == Decimal("0")
    assert ledger.balance(income, expense) == Decimal("450000")


def test_available_balance_counts_penyaluran_nominal():
    income = [_in(1, 1, date(2025, 1, 5), 1_000_000)]
    expense = [Pengeluaran(pengeluaran_id=1, tanggal=date(2025, 1, 10), keperluan="Buku", jumlah=Decimal("200000"))]
    out = [Penyaluran(penyaluran_id=1, santri_id=7, tanggal=date(2025, 1, 12), nominal=Decimal("300000"))]

    assert ledger.available_balance(income, expense, out) == Decimal("500000")


def test_filter_period_by_year_month_and_donor():
    rows = [
        _in(1, 1, date(2025, 1, 5), 100),
        _in(2, 2, date(2025, 1, 20), 200),
        _in(3, 1, date(2025, 3, 1), 300),
        _in(4, 1, date(2024, 1, 5), 400),
    ]

    assert [r.pemasukan_id for r in ledger.filter_period(rows, year=2025)] == [1, 2, 3]
    assert [r.pemasukan_id for r in ledger.filter_period(rows, year=2025, month=1)] == [1, 2]
    assert [r.pemasukan_id for r in ledger.filter_period(rows, year=2025, month=1, ota_id=1)] == [1]
    assert len(ledger.filter_period(rows, year=None)) == 4


def test_filter_period_ignores_donor_filter_for_rows_without_ota():
    rows = [Penyaluran(penyaluran_id=1, santri_id=3, tanggal=date(2025, 4, 1), nominal=Decimal("10"))]
    assert ledger.filter_period(rows, year=2025, ota_id=99) == rows


def test_usage_percent_rounds_and_caps():
    assert ledger.usage_percent(Decimal("1"), Decimal("3")) == 33
    assert ledger.usage_percent(Decimal("2"), Decimal("3")) == 67
    assert ledger.usage_percent(Decimal("150"), Decimal("100")) == 150
    assert ledger.usage_percent(Decimal("150"), Decimal("100"), cap=100) == 100
    assert ledger.usage_percent(Decimal("10"), Decimal("0")) == 0


def test_top_donors_sums_per_donor_and_ranks():
    rows = [
        _in(1, 1, date(2025, 1, 1), 100, "Ahmad"),
        _in(2, 2, date(2025, 1, 2), 500, "Budi"),
        _in(3, 1, date(2025, 1, 3), 600, "Ahmad"),
        _in(4, 3, date(2025, 1, 4), 50, "Citra"),
    ]

    top = ledger.top_donors(rows, 2)

    assert [(d.nama, d.total) for d in top] == [("Ahmad", Decimal("700")), ("Budi", Decimal("500"))]


def test_is_low_balance_bounds():
    threshold = Decimal("100000")
    assert ledger.is_low_balance(Decimal("0"), threshold)
    assert ledger.is_low_balance(Decimal("99999"), threshold)
    assert not ledger.is_low_balance(Decimal("100000"), threshold)
    assert not ledger.is_low_balance(Decimal("-5"), threshold)


def test_recent_sorted_by_date_desc():
    rows = [_in(1, 1, date(2025, 1, 1), 1), _in(2, 1, date(2025, 3, 1), 1), _in(3, 1, date(2025, 2, 1), 1)]
    assert [r.pemasukan_id for r in ledger.recent(rows, 2)] == [2, 3]


def test_expense_rejected_above_income():
    with pytest.raises(ValidationError) as exc:
        ledger.ensure_expense_allowed(
            total_pemasukan=Decimal("500000"), total_pengeluaran=Decimal("400000"), jumlah=Decimal("150000")
        )
    assert "Saldo tidak mencukupi! Saldo tersedia: Rp 100.000" in str(exc.value)


def test_expense_edit_counts_old_amount_as_available():
    ledger.ensure_expense_allowed(
        total_pemasukan=Decimal("500000"),
        total_pengeluaran=Decimal("500000"),
        jumlah=Decimal("200000"),
        current_edit=Decimal("200000"),
    )


def test_disbursement_limit():
    ledger.ensure_disbursement_allowed(saldo_tersedia=Decimal("100"), nominal=Decimal("100"))
    with pytest.raises(ValidationError):
        ledger.ensure_disbursement_allowed(saldo_tersedia=Decimal("100"), nominal=Decimal("101"))
