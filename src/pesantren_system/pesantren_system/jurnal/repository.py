from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import JurnalDetail, JurnalHeader


class JurnalRepository(Protocol):
    def headers_for_date(self, *, tanggal: date, jadwal_ids: Sequence[int]) -> Sequence[JurnalHeader]:
        raise NotImplementedError

    def get_header(self, *, jadwal_id: int, tanggal: date) -> Optional[JurnalHeader]:
        raise NotImplementedError

    def list_details(self, jurnal_id: int) -> Sequence[JurnalDetail]:
        raise NotImplementedError

    def save(self, header: dict, details: Sequence[JurnalDetail]) -> int:
        """Upsert the header on (jadwal_id, tanggal), then replace all its details.

        Returns the header id.
        """

        raise NotImplementedError
