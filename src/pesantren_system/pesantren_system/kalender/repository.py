from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AgendaKalender


class KalenderRepository(Protocol):
    def list_overlapping(self, *, start: date, end: date) -> Sequence[AgendaKalender]:
        """Agenda whose range intersects [start, end], ordered by tanggal_mulai."""

        raise NotImplementedError

    def get_by_id(self, agenda_id: int) -> Optional[AgendaKalender]:
        raise NotImplementedError

    def create(self, data: dict) -> int:
        raise NotImplementedError

    def update(self, agenda_id: int, data: dict) -> bool:
        raise NotImplementedError

    def delete(self, agenda_id: int) -> bool:
        raise NotImplementedError
