from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.enums import StatusPresensi


@dataclass(frozen=True)
class PresensiRecord:
    """Satu baris tabel presensi (unik per santri per tanggal)."""

    santri_id: int
    tanggal: date
    status: StatusPresensi
    keterangan: Optional[str] = None
    presensi_id: Optional[int] = None


@dataclass(frozen=True)
class PresensiRow:
    """Baris lembar presensi: santri aktif beserta status yang sedang diisi."""

    santri_id: int
    nis: str
    nama: str
    status: StatusPresensi = StatusPresensi.HADIR
    keterangan: str = ""
    tersimpan: bool = False


@dataclass(frozen=True)
class PresensiSheet:
    kelas_id: int
    tanggal: date
    rows: tuple[PresensiRow, ...] = field(default_factory=tuple)

    def counts(self) -> dict[str, int]:
        out = {s.value: 0 for s in StatusPresensi}
        for r in self.rows:
            out[r.status.value] += 1
        return out


@dataclass(frozen=True)
class RekapSantri:
    santri_id: int
    nis: str
    nama: str
    hadir: int = 0
    izin: int = 0
    sakit: int = 0
    alpha: int = 0

    @property
    def total(self) -> int:
        return self.hadir + self.izin + self.sakit + self.alpha

    @property
    def persen_hadir(self) -> int:
        return round(self.hadir / self.total * 100) if self.total else 0


@dataclass(frozen=True)
class RekapBulanan:
    year: int
    month: int
    totals: dict[str, int]
    per_santri: tuple[RekapSantri, ...]
