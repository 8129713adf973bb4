from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from .model import Kelas, Santri


class SantriRepository(Protocol):
    def get_by_id(self, santri_id: int) -> Optional[Santri]:
        raise NotImplementedError

    def get_by_nis(self, nis: str) -> Optional[Santri]:
        raise NotImplementedError

    def list(
        self,
        *,
        kelas_id: Optional[int] = None,
        halaqoh_id: Optional[int] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        wali_id: Optional[int] = None,
    ) -> Sequence[Santri]:
        """Ordered by nama."""

        raise NotImplementedError

    def search_by_name(self, query: str, *, exclude_ids: Iterable[int] = (), limit: int = 5) -> Sequence[Santri]:
        """Active santri whose nama contains `query` (case-insensitive)."""

        raise NotImplementedError

    def create(self, data: dict) -> int:
        raise NotImplementedError

    def update(self, santri_id: int, data: dict) -> bool:
        raise NotImplementedError

    def delete(self, santri_id: int) -> bool:
        raise NotImplementedError

    def set_halaqoh(self, santri_id: int, halaqoh_id: Optional[int]) -> bool:
        raise NotImplementedError

    def replace_wali_links(self, wali_id: int, santri_ids: Sequence[int]) -> None:
        """Clear wali_id for the wali's current santri, then set it on `santri_ids`."""

        raise NotImplementedError


class KelasRepository(Protocol):
    def list_all(self) -> Sequence[Kelas]:
        raise NotImplementedError

    def get_by_id(self, kelas_id: int) -> Optional[Kelas]:
        raise NotImplementedError

    def create(self, *, nama: str, wali_kelas_id: Optional[int]) -> int:
        raise NotImplementedError

    def update(self, kelas_id: int, *, nama: str, wali_kelas_id: Optional[int]) -> bool:
        raise NotImplementedError

    def delete(self, kelas_id: int) -> bool:
        raise NotImplementedError
