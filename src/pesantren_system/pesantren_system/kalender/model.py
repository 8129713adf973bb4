from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.enums import JenisAgenda


@dataclass(frozen=True)
class AgendaKalender:
    agenda_id: int
    judul: str
    tanggal_mulai: date
    tanggal_selesai: date
    jenis: JenisAgenda = JenisAgenda.KEGIATAN
    deskripsi: Optional[str] = None
    created_by: Optional[int] = None

    def covers(self, day: date) -> bool:
        return self.tanggal_mulai <= day <= self.tanggal_selesai


@dataclass(frozen=True)
class DayCell:
    day: date
    in_month: bool
    events: tuple[AgendaKalender, ...] = field(default_factory=tuple)
