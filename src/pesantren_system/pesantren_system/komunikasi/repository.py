from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import StatusPesan
from .model import Pengumuman, PesanWali


class PesanRepository(Protocol):
    def list(self, *, wali_id: Optional[int] = None, status: Optional[StatusPesan] = None) -> Sequence[PesanWali]:
        """Newest first."""

        raise NotImplementedError

    def get_by_id(self, pesan_id: int) -> Optional[PesanWali]:
        raise NotImplementedError

    def create(self, data: dict) -> int:
        raise NotImplementedError

    def set_status(self, pesan_id: int, status: StatusPesan) -> bool:
        raise NotImplementedError

    def reply(self, pesan_id: int, *, balasan: str, dibalas_oleh: Optional[int]) -> bool:
        raise NotImplementedError


class PengumumanRepository(Protocol):
    def list(self, *, archived: Optional[bool] = None, kategori: Optional[str] = None) -> Sequence[Pengumuman]:
        """Ordered by prioritas desc, then newest."""

        raise NotImplementedError

    def get_by_id(self, pengumuman_id: int) -> Optional[Pengumuman]:
        raise NotImplementedError

    def create(self, data: dict) -> int:
        raise NotImplementedError

    def update(self, pengumuman_id: int, data: dict) -> bool:
        raise NotImplementedError

    def set_archived(self, pengumuman_id: int, archived: bool) -> bool:
        raise NotImplementedError

    def delete(self, pengumuman_id: int) -> bool:
        raise NotImplementedError
