from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

STATUS_AKTIF = "Aktif"
STATUS_SANTRI = ("Aktif", "Cuti", "Lulus", "Keluar")


@dataclass(frozen=True)
class Kelas:
    kelas_id: int
    nama: str
    wali_kelas_id: Optional[int] = None
    wali_kelas_nama: Optional[str] = None
    jumlah_santri: int = 0


@dataclass(frozen=True)
class Santri:
    """Data santri; nama kelas/halaqoh/wali ikut terbawa dari join untuk tampilan."""

    santri_id: int
    nis: str
    nama: str
    jenis_kelamin: Optional[str] = None
    kelas_id: Optional[int] = None
    halaqoh_id: Optional[int] = None
    wali_id: Optional[int] = None
    status: str = STATUS_AKTIF
    kelas_nama: Optional[str] = None
    halaqoh_nama: Optional[str] = None
    wali_nama: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_AKTIF
