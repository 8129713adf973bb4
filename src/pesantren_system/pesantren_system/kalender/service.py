from __future__ import annotations

import calendar
from datetime import date
from typing import Iterable, Optional, Sequence

from ..audit.model import Actor
from ..common.datetime_utils import month_bounds, parse_optional_date, year_bounds
from ..common.validators import optional_text, require_non_empty
from ..core.enums import JenisAgenda, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import AgendaKalender, DayCell
from .repository import KalenderRepository

EDITOR_ROLES = (Role.ADMIN, Role.GURU)


def events_for_day(events: Iterable[AgendaKalender], day: date) -> list[AgendaKalender]:
    return [e for e in events if e.covers(day)]


def month_grid(year: int, month: int, events: Sequence[AgendaKalender]) -> list[list[DayCell]]:
    """Weeks of the month (Sunday first), padded with days of adjacent months."""
    cal = calendar.Calendar(firstweekday=calendar.SUNDAY)
    weeks = []
    for week in cal.monthdatescalendar(int(year), int(month)):
        weeks.append(
            [DayCell(day=d, in_month=d.month == int(month), events=tuple(events_for_day(events, d))) for d in week]
        )
    return weeks


class KalenderService:
    def __init__(self, kalender: KalenderRepository):
        self._kalender = kalender

    def list_year(self, year: int) -> Sequence[AgendaKalender]:
        start, end = year_bounds(year)
        return self._kalender.list_overlapping(start=start, end=end)

    def list_month(self, year: int, month: int) -> Sequence[AgendaKalender]:
        start, end = month_bounds(year, month)
        return self._kalender.list_overlapping(start=start, end=end)

    def get(self, agenda_id: int) -> AgendaKalender:
        agenda = self._kalender.get_by_id(int(agenda_id))
        if not agenda:
            raise NotFoundError("Agenda tidak ditemukan")
        return agenda

    def save(
        self,
        *,
        current_role: Optional[Role],
        agenda_id: Optional[int],
        judul: str,
        deskripsi: Optional[str],
        tanggal_mulai: Optional[str],
        tanggal_selesai: Optional[str],
        jenis: Optional[str],
        actor: Optional[Actor] = None,
    ) -> int:
        if current_role not in EDITOR_ROLES:
            raise AuthorizationError("Anda tidak memiliki akses untuk mengubah kalender")

        judul = require_non_empty(judul, "Judul agenda")
        try:
            mulai = parse_optional_date(tanggal_mulai)
            selesai = parse_optional_date(tanggal_selesai) or mulai
        except ValueError:
            raise ValidationError("Format tanggal tidak valid")
        if not mulai:
            raise ValidationError("Tanggal mulai wajib diisi")
        if selesai < mulai:
            raise ValidationError("Tanggal selesai tidak boleh sebelum tanggal mulai")
        try:
            jenis_enum = JenisAgenda(jenis or JenisAgenda.KEGIATAN.value)
        except ValueError:
            raise ValidationError("Jenis agenda tidak valid")

        data = {
            "judul": judul,
            "deskripsi": optional_text(deskripsi),
            "tanggal_mulai": mulai,
            "tanggal_selesai": selesai,
            "jenis": jenis_enum,
            "created_by": actor.user_id if actor else None,
        }
        if agenda_id:
            self.get(agenda_id)
            self._kalender.update(int(agenda_id), data)
            return int(agenda_id)
        return self._kalender.create(data)

    def delete(self, *, current_role: Optional[Role], agenda_id: int) -> None:
        if current_role not in EDITOR_ROLES:
            raise AuthorizationError("Anda tidak memiliki akses untuk mengubah kalender")
        if not self._kalender.delete(int(agenda_id)):
            raise ValidationError("Gagal menghapus agenda")
