from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional

from ..core.enums import Hari


@dataclass(frozen=True)
class Mapel:
    mapel_id: int
    nama: str
    kode: Optional[str] = None


@dataclass(frozen=True)
class Jadwal:
    """Satu slot jadwal pelajaran mingguan."""

    jadwal_id: int
    kelas_id: int
    mapel_id: int
    guru_id: int
    hari: Hari
    jam_ke: int
    jam_mulai: time
    jam_selesai: time
    tahun_ajaran: str
    kelas_nama: Optional[str] = None
    mapel_nama: Optional[str] = None
    guru_nama: Optional[str] = None

    @property
    def jam(self) -> str:
        return f"{self.jam_mulai.strftime('%H:%M')} - {self.jam_selesai.strftime('%H:%M')}"
