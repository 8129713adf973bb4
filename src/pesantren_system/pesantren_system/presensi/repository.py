from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import PresensiRecord


class PresensiRepository(Protocol):
    def list_for_date(self, *, tanggal: date, santri_ids: Sequence[int]) -> Sequence[PresensiRecord]:
        raise NotImplementedError

    def upsert_many(self, *, tanggal: date, entries: Sequence[PresensiRecord], created_by: Optional[int]) -> int:
        """Insert or update one row per santri for `tanggal` (unique santri_id+tanggal)."""

        raise NotImplementedError

    def list_range(
        self, *, start: date, end: date, kelas_id: Optional[int] = None, santri_ids: Optional[Sequence[int]] = None
    ) -> Sequence[dict]:
        """Rows: santri_id, nis, nama, tanggal, status, keterangan."""

        raise NotImplementedError
