from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.enums import StatusJurnal, StatusKehadiranMapel
from ..jadwal.model import Jadwal


@dataclass(frozen=True)
class JurnalHeader:
    """Jurnal mengajar satu jadwal pada satu tanggal (tabel presensi_mapel)."""

    jurnal_id: int
    jadwal_id: int
    kelas_id: int
    guru_id: int
    mapel_id: int
    tanggal: date
    materi: Optional[str] = None
    catatan: Optional[str] = None
    status: StatusJurnal = StatusJurnal.TERLAKSANA
    created_by: Optional[int] = None


@dataclass(frozen=True)
class JurnalDetail:
    santri_id: int
    status: StatusKehadiranMapel = StatusKehadiranMapel.HADIR
    keterangan: Optional[str] = None


@dataclass(frozen=True)
class JurnalEntry:
    jadwal: Jadwal
    header: Optional[JurnalHeader] = None

    @property
    def sudah_diisi(self) -> bool:
        return self.header is not None


@dataclass(frozen=True)
class KehadiranRow:
    santri_id: int
    nis: str
    nama: str
    status: StatusKehadiranMapel = StatusKehadiranMapel.HADIR
    keterangan: str = ""


@dataclass(frozen=True)
class JurnalForm:
    jadwal: Jadwal
    tanggal: date
    header: Optional[JurnalHeader]
    rows: tuple[KehadiranRow, ...] = field(default_factory=tuple)
