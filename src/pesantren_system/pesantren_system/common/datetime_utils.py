from __future__ import annotations

import calendar
from datetime import date, datetime
from typing import Any, Optional

from .validators import parse_optional_int

# batas tahun untuk filter periode (grid kalender ikut menyentuh tahun sebelah)
MIN_YEAR = 1900
MAX_YEAR = 2100


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_optional_date(value: Optional[str]) -> Optional[date]:
    if not value or not value.strip():
        return None
    return parse_iso_date(value.strip())


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last_day = calendar.monthrange(int(year), int(month))[1]
    return date(int(year), int(month), 1), date(int(year), int(month), last_day)


def year_bounds(year: int) -> tuple[date, date]:
    return date(int(year), 1, 1), date(int(year), 12, 31)


def in_period(value: date, year: int, month: Optional[int] = None) -> bool:
    """True when `value` falls in the year (and month, if given)."""
    if isinstance(value, datetime):
        value = value.date()
    if value.year != int(year):
        return False
    return month is None or value.month == int(month)


def resolve_period(tahun: Any, bulan: Any, *, today: Optional[date] = None) -> tuple[int, int]:
    """(year, month) dari query string; nilai kosong atau di luar rentang -> bulan berjalan."""
    today = today or date.today()
    year = parse_optional_int(tahun) or today.year
    month = parse_optional_int(bulan) or today.month
    if not MIN_YEAR <= year <= MAX_YEAR:
        year = today.year
    if not 1 <= month <= 12:
        month = today.month
    return year, month
