from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Hari
from .model import Jadwal, Mapel


class JadwalRepository(Protocol):
    def get_by_id(self, jadwal_id: int) -> Optional[Jadwal]:
        raise NotImplementedError

    def list(
        self,
        *,
        kelas_id: Optional[int] = None,
        guru_id: Optional[int] = None,
        hari: Optional[Hari] = None,
        tahun_ajaran: Optional[str] = None,
    ) -> Sequence[Jadwal]:
        """Ordered by hari (Senin first) then jam_ke."""

        raise NotImplementedError

    def create(self, data: dict) -> int:
        raise NotImplementedError

    def update(self, jadwal_id: int, data: dict) -> bool:
        raise NotImplementedError

    def delete(self, jadwal_id: int) -> bool:
        raise NotImplementedError


class MapelRepository(Protocol):
    def list_all(self) -> Sequence[Mapel]:
        raise NotImplementedError

    def create(self, *, nama: str, kode: Optional[str]) -> int:
        raise NotImplementedError

    def update(self, mapel_id: int, *, nama: str, kode: Optional[str]) -> bool:
        raise NotImplementedError

    def delete(self, mapel_id: int) -> bool:
        raise NotImplementedError
