"""Tautan wa.me untuk konfirmasi donasi ke donatur."""

from __future__ import annotations

import re
from typing import Mapping, Optional
from urllib.parse import quote

from .formatting import format_rupiah, format_tanggal_panjang


def format_phone_number(phone: Optional[str]) -> str:
    digits = re.sub(r"\D", "", phone or "")
    if not digits:
        return ""
    if digits.startswith("0"):
        return "62" + digits[1:]
    if not digits.startswith("62"):
        return "62" + digits
    return digits


def create_message(
    *,
    intro: str,
    data: Mapping[str, str],
    greeting: str = "Assalamu'alaikum Wr. Wb.",
    closing: str = "Terima kasih, Jazakumullah Khairan.",
    signature: str = "Admin Pesantren",
) -> str:
    lines = [greeting, "", intro, ""]
    lines.extend(f"{label}: {value}" for label, value in data.items())
    lines.extend(["", closing, "", signature])
    return "\n".join(lines)


def whatsapp_url(phone: str, message: str) -> Optional[str]:
    number = format_phone_number(phone)
    if not number:
        return None
    return f"https://wa.me/{number}?text={quote(message)}"


def donation_confirmation_message(*, nama_donatur: str, tanggal, jumlah, metode: Optional[str]) -> str:
    data = {
        "Nama": nama_donatur,
        "Tanggal": format_tanggal_panjang(tanggal),
        "Nominal": format_rupiah(jumlah),
    }
    if metode:
        data["Metode"] = metode
    return create_message(
        greeting=f"Assalamu'alaikum {nama_donatur}",
        intro="Terima kasih, donasi Bapak/Ibu telah kami terima dengan rincian:",
        data=data,
    )
