from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import StatusPenerima
from .model import OrangTuaAsuh, OtaKategori, OtaSantriLink, PenerimaOta, Pemasukan, Pengeluaran, Penyaluran


class DonorRepository(Protocol):
    def list(self, *, active_only: bool = False) -> Sequence[OrangTuaAsuh]:
        """Ordered by nama, with jumlah_santri filled."""

        raise NotImplementedError

    def get_by_id(self, ota_id: int) -> Optional[OrangTuaAsuh]:
        raise NotImplementedError

    def get_by_user_id(self, user_id: int) -> Optional[OrangTuaAsuh]:
        raise NotImplementedError

    def create(self, data: dict) -> int:
        raise NotImplementedError

    def update(self, ota_id: int, data: dict) -> bool:
        raise NotImplementedError

    def delete(self, ota_id: int) -> bool:
        raise NotImplementedError

    def set_user(self, ota_id: int, user_id: Optional[int]) -> bool:
        raise NotImplementedError

    def taken_user_ids(self) -> Sequence[int]:
        raise NotImplementedError


class KategoriRepository(Protocol):
    def list_all(self) -> Sequence[OtaKategori]:
        raise NotImplementedError

    def get_by_id(self, kategori_id: int) -> Optional[OtaKategori]:
        raise NotImplementedError

    def create(self, *, nama: str, keterangan: Optional[str]) -> int:
        raise NotImplementedError

    def update(self, kategori_id: int, *, nama: str, keterangan: Optional[str]) -> bool:
        raise NotImplementedError

    def delete(self, kategori_id: int) -> bool:
        raise NotImplementedError


class LinkRepository(Protocol):
    def list(self, *, ota_id: Optional[int] = None) -> Sequence[OtaSantriLink]:
        raise NotImplementedError

    def get_by_id(self, link_id: int) -> Optional[OtaSantriLink]:
        raise NotImplementedError

    def create(self, *, ota_id: int, santri_id: int) -> int:
        raise NotImplementedError

    def delete(self, link_id: int) -> bool:
        raise NotImplementedError

    def relink(self, *, santri_id: int, ota_id: Optional[int]) -> None:
        """Remove the santri's current link, then link to `ota_id` (if any), atomically."""

        raise NotImplementedError


class PenerimaRepository(Protocol):
    def list(self, *, status: Optional[StatusPenerima] = None) -> Sequence[PenerimaOta]:
        raise NotImplementedError

    def enroll(self, *, santri_id: int, tanggal_mulai: date, keterangan: Optional[str]) -> int:
        """Insert, or reactivate an existing enrollment for the santri."""

        raise NotImplementedError

    def set_status(self, penerima_id: int, status: StatusPenerima) -> bool:
        raise NotImplementedError

    def delete(self, penerima_id: int) -> bool:
        raise NotImplementedError


class PemasukanRepository(Protocol):
    def list(self, *, ota_id: Optional[int] = None) -> Sequence[Pemasukan]:
        """Newest tanggal first."""

        raise NotImplementedError

    def get_by_id(self, row_id: int) -> Optional[Pemasukan]:
        raise NotImplementedError

    def create(self, data: dict) -> int:
        raise NotImplementedError

    def update(self, row_id: int, data: dict) -> bool:
        raise NotImplementedError

    def delete(self, row_id: int) -> bool:
        raise NotImplementedError


class PengeluaranRepository(Protocol):
    def list(self, *, ota_id: Optional[int] = None) -> Sequence[Pengeluaran]:
        raise NotImplementedError

    def get_by_id(self, row_id: int) -> Optional[Pengeluaran]:
        raise NotImplementedError

    def create(self, data: dict) -> int:
        raise NotImplementedError

    def update(self, row_id: int, data: dict) -> bool:
        raise NotImplementedError

    def delete(self, row_id: int) -> bool:
        raise NotImplementedError


class PenyaluranRepository(Protocol):
    def list(self) -> Sequence[Penyaluran]:
        raise NotImplementedError

    def get_by_id(self, row_id: int) -> Optional[Penyaluran]:
        raise NotImplementedError

    def create(self, data: dict) -> int:
        raise NotImplementedError

    def update(self, row_id: int, data: dict) -> bool:
        raise NotImplementedError

    def delete(self, row_id: int) -> bool:
        raise NotImplementedError
