from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Halaqoh:
    halaqoh_id: int
    nama: str
    musyrif_id: Optional[int] = None
    waktu: Optional[str] = None
    keterangan: Optional[str] = None
    musyrif_nama: Optional[str] = None
    jumlah_santri: int = 0
