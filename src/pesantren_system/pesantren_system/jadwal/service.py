from __future__ import annotations

from datetime import datetime, time
from typing import Iterable, Optional, Sequence

from ..common.validators import optional_text, require_non_empty
from ..core.constants import DEFAULT_TAHUN_AJARAN
from ..core.enums import Hari, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import Jadwal, Mapel
from .repository import JadwalRepository, MapelRepository

EDITOR_ROLES = (Role.ADMIN,)


def parse_jam(value, field_name: str) -> time:
    if isinstance(value, time):
        return value
    s = (value or "").strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(s, fmt).time()
        except ValueError:
            continue
    raise ValidationError(f"{field_name} tidak valid")


def group_by_day(rows: Iterable[Jadwal]) -> dict[Hari, list[Jadwal]]:
    """Every day Senin..Ahad is present (possibly empty), slots sorted by jam_ke."""
    grouped: dict[Hari, list[Jadwal]] = {h: [] for h in Hari.ordered()}
    for j in rows:
        grouped[j.hari].append(j)
    for slots in grouped.values():
        slots.sort(key=lambda j: (j.jam_ke, j.jam_mulai))
    return grouped


class JadwalService:
    def __init__(self, jadwal: JadwalRepository, default_tahun_ajaran: str = DEFAULT_TAHUN_AJARAN):
        self._jadwal = jadwal
        self._default_tahun_ajaran = default_tahun_ajaran

    @property
    def default_tahun_ajaran(self) -> str:
        return self._default_tahun_ajaran

    def get(self, jadwal_id: int) -> Jadwal:
        j = self._jadwal.get_by_id(int(jadwal_id))
        if not j:
            raise NotFoundError("Jadwal tidak ditemukan")
        return j

    def list(self, *, kelas_id: Optional[int] = None, tahun_ajaran: Optional[str] = None) -> Sequence[Jadwal]:
        return self._jadwal.list(kelas_id=kelas_id, tahun_ajaran=tahun_ajaran or None)

    def grouped_by_day(self, *, kelas_id: int, tahun_ajaran: Optional[str] = None) -> dict[Hari, list[Jadwal]]:
        return group_by_day(self.list(kelas_id=kelas_id, tahun_ajaran=tahun_ajaran))

    def for_day(self, *, hari: Hari, guru_id: Optional[int] = None) -> Sequence[Jadwal]:
        return self._jadwal.list(hari=hari, guru_id=guru_id)

    def save(
        self,
        *,
        current_role: Optional[Role],
        jadwal_id: Optional[int],
        kelas_id: Optional[int],
        mapel_id: Optional[int],
        guru_id: Optional[int],
        hari: str,
        jam_ke,
        jam_mulai,
        jam_selesai,
        tahun_ajaran: Optional[str] = None,
    ) -> int:
        if current_role not in EDITOR_ROLES:
            raise AuthorizationError("Anda tidak memiliki akses untuk mengubah jadwal")
        if not kelas_id:
            raise ValidationError("Pilih kelas terlebih dahulu")
        if not mapel_id:
            raise ValidationError("Pilih mata pelajaran")
        if not guru_id:
            raise ValidationError("Pilih guru pengajar")
        try:
            hari_enum = Hari(hari)
        except ValueError:
            raise ValidationError("Hari tidak valid")
        try:
            jam_ke_i = int(jam_ke)
        except (TypeError, ValueError):
            raise ValidationError("Jam ke tidak valid")
        if jam_ke_i < 1:
            raise ValidationError("Jam ke minimal 1")

        mulai = parse_jam(jam_mulai, "Jam mulai")
        selesai = parse_jam(jam_selesai, "Jam selesai")
        if selesai <= mulai:
            raise ValidationError("Jam selesai harus setelah jam mulai")

        data = {
            "kelas_id": int(kelas_id),
            "mapel_id": int(mapel_id),
            "guru_id": int(guru_id),
            "hari": hari_enum,
            "jam_ke": jam_ke_i,
            "jam_mulai": mulai,
            "jam_selesai": selesai,
            "tahun_ajaran": optional_text(tahun_ajaran) or self._default_tahun_ajaran,
        }
        if jadwal_id:
            self.get(jadwal_id)
            self._jadwal.update(int(jadwal_id), data)
            return int(jadwal_id)
        return self._jadwal.create(data)

    def delete(self, *, current_role: Optional[Role], jadwal_id: int) -> None:
        if current_role not in EDITOR_ROLES:
            raise AuthorizationError("Anda tidak memiliki akses untuk mengubah jadwal")
        if not self._jadwal.delete(int(jadwal_id)):
            raise ValidationError("Gagal menghapus jadwal")


class MapelService:
    def __init__(self, mapel: MapelRepository):
        self._mapel = mapel

    def list(self) -> Sequence[Mapel]:
        return self._mapel.list_all()

    def save(self, *, mapel_id: Optional[int], nama: str, kode: Optional[str]) -> int:
        nama = require_non_empty(nama, "Nama mapel")
        kode = optional_text(kode)
        if mapel_id:
            self._mapel.update(int(mapel_id), nama=nama, kode=kode)
            return int(mapel_id)
        return self._mapel.create(nama=nama, kode=kode)

    def delete(self, mapel_id: int) -> None:
        if not self._mapel.delete(int(mapel_id)):
            raise ValidationError("Gagal menghapus mapel")
