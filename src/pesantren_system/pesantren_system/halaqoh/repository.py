from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Halaqoh


class HalaqohRepository(Protocol):
    def list_all(self) -> Sequence[Halaqoh]:
        """Halaqoh with musyrif name and active santri count, ordered by nama."""

        raise NotImplementedError

    def get_by_id(self, halaqoh_id: int) -> Optional[Halaqoh]:
        raise NotImplementedError

    def create(self, *, nama: str, musyrif_id: Optional[int], waktu: Optional[str], keterangan: Optional[str]) -> int:
        raise NotImplementedError

    def update(
        self, halaqoh_id: int, *, nama: str, musyrif_id: Optional[int], waktu: Optional[str], keterangan: Optional[str]
    ) -> bool:
        raise NotImplementedError

    def delete(self, halaqoh_id: int) -> bool:
        raise NotImplementedError
