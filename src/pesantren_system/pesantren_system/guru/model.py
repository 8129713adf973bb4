from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Guru:
    guru_id: int
    nama: str
    nip: Optional[str] = None
    email: Optional[str] = None
    no_hp: Optional[str] = None
    jabatan: Optional[str] = None
    status: str = "Aktif"
