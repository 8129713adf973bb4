from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from urllib.parse import unquote

import pytest

from src.pesantren_system.pesantren_system.common.datetime_utils import in_period, month_bounds, resolve_period
from src.pesantren_system.pesantren_system.common.formatting import (
    format_rupiah,
    format_tanggal,
    format_tanggal_panjang,
    nama_bulan,
)
from src.pesantren_system.pesantren_system.common.validators import (
    parse_amount,
    parse_optional_int,
    require_non_empty,
    require_positive_amount,
)
from src.pesantren_system.pesantren_system.common.whatsapp import (
    donation_confirmation_message,
    format_phone_number,
    whatsapp_url,
)
from src.pesantren_system.pesantren_system.core.exceptions import ValidationError


@pytest.mark.parametrize(
    "amount, expected",
    [
        (1250000, "Rp 1.250.000"),
        (Decimal("150000.00"), "Rp 150.000"),
        (0, "Rp 0"),
        (None, "Rp 0"),
        (-5000, "-Rp 5.000"),
        (Decimal("999.5"), "Rp 1.000"),
    ],
)
def test_format_rupiah(amount, expected):
    assert format_rupiah(amount) == expected


def test_tanggal_formats():
    assert format_tanggal(date(2025, 1, 5)) == "05 Jan 2025"
    assert format_tanggal("2025-08-17") == "17 Agu 2025"
    assert format_tanggal(None) == "-"
    assert format_tanggal_panjang(datetime(2025, 1, 6, 9, 30)) == "Senin, 6 Januari 2025"
    assert nama_bulan(12) == "Desember"


@pytest.mark.parametrize(
    "phone, expected",
    [("0812-3456-7890", "6281234567890"), ("+62 812 3456", "628123456"), ("8123456", "628123456"), ("", "")],
)
def test_format_phone_number(phone, expected):
    assert format_phone_number(phone) == expected


def test_whatsapp_url_encodes_message():
    message = donation_confirmation_message(
        nama_donatur="Pak Budi", tanggal=date(2025, 1, 6), jumlah=Decimal("500000"), metode="Transfer"
    )

    url = whatsapp_url("081234", message)

    assert url.startswith("https://wa.me/6281234?text=")
    text = unquote(url.split("text=", 1)[1])
    assert text.startswith("Assalamu'alaikum Pak Budi")
    assert "Nominal: Rp 500.000" in text
    assert "Metode: Transfer" in text
    assert whatsapp_url("", message) is None


def test_parse_amount_accepts_indonesian_grouping():
    assert parse_amount("1.250.000") == Decimal("1250000")
    assert parse_amount("Rp 75.000") == Decimal("75000")
    assert parse_amount("12500,50") == Decimal("12500.50")
    assert parse_amount(2000) == Decimal("2000")
    assert parse_amount("") == Decimal("0")
    with pytest.raises(ValidationError):
        parse_amount("seratus")


def test_require_positive_amount():
    assert require_positive_amount("10") == Decimal("10")
    with pytest.raises(ValidationError) as exc:
        require_positive_amount("-10")
    assert str(exc.value) == "Nominal harus lebih dari 0"


def test_require_non_empty_and_optional_int():
    assert require_non_empty("  Ali ", "Nama") == "Ali"
    with pytest.raises(ValidationError) as exc:
        require_non_empty("   ", "Nama")
    assert str(exc.value) == "Nama wajib diisi"
    assert parse_optional_int(" 7 ") == 7
    assert parse_optional_int("all") is None
    assert parse_optional_int("") is None
    assert parse_optional_int(None) is None


def test_period_helpers():
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert in_period(datetime(2025, 3, 1, 10), 2025, 3)
    assert in_period(date(2025, 3, 1), 2025)
    assert not in_period(date(2025, 3, 1), 2025, 4)


@pytest.mark.parametrize(
    "tahun, bulan, expected",
    [
        ("2025", "3", (2025, 3)),
        (None, None, (2026, 10)),
        ("2025", "13", (2025, 10)),
        ("2025", "0", (2025, 10)),
        ("abc", "-2", (2026, 10)),
        ("99999", "5", (2026, 5)),
    ],
)
def test_resolve_period_falls_back_to_today(tahun, bulan, expected):
    assert resolve_period(tahun, bulan, today=date(2026, 10, 19)) == expected
