from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import StatusPesan

KATEGORI_PESAN = ("Umum", "Akademik", "Keuangan", "Izin", "Keluhan", "Lainnya")
KATEGORI_PENGUMUMAN = ("Umum", "Akademik", "Keuangan", "Kegiatan", "Libur", "Ujian")


@dataclass(frozen=True)
class PesanWali:
    pesan_id: int
    wali_id: int
    judul: str
    isi: str
    kategori: str = "Umum"
    status: StatusPesan = StatusPesan.TERKIRIM
    santri_id: Optional[int] = None
    balasan: Optional[str] = None
    dibalas_oleh: Optional[int] = None
    created_at: Optional[datetime] = None
    wali_nama: Optional[str] = None
    santri_nama: Optional[str] = None

    @property
    def sudah_dibalas(self) -> bool:
        return self.status == StatusPesan.DIBALAS


@dataclass(frozen=True)
class Pengumuman:
    pengumuman_id: int
    judul: str
    isi: str
    kategori: str = "Umum"
    prioritas: int = 0
    mulai_tampil: Optional[date] = None
    selesai_tampil: Optional[date] = None
    is_active: bool = True
    is_archived: bool = False
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None

    def tampil_pada(self, day: date) -> bool:
        """Aktif, tidak diarsip, dan `day` berada dalam rentang tampil."""
        if not self.is_active or self.is_archived:
            return False
        if self.mulai_tampil and day < self.mulai_tampil:
            return False
        if self.selesai_tampil and day > self.selesai_tampil:
            return False
        return True
