from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} wajib diisi")
    return value.strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} minimal {min_len} karakter")
    return value


def optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def parse_optional_int(value: Any) -> Optional[int]:
    """Form/query value -> int, or None for blank/'all'/non-numeric input."""
    if value is None:
        return None
    s = str(value).strip()
    if not s or not s.lstrip("-").isdigit():
        return None
    return int(s)


def parse_amount(value: Any) -> Decimal:
    """Parse nominal rupiah from form input ("1.250.000", "1250000", 1250000)."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    s = str(value).strip().replace("Rp", "").replace(" ", "").replace(".", "").replace(",", ".")
    if not s:
        return Decimal("0")
    try:
        return Decimal(s)
    except InvalidOperation:
        raise ValidationError("Nominal tidak valid")


def require_positive_amount(value: Any, message: str = "Nominal harus lebih dari 0") -> Decimal:
    amount = parse_amount(value)
    if amount <= 0:
        raise ValidationError(message)
    return amount
