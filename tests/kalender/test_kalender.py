from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Optional

import pytest

from src.pesantren_system.pesantren_system.core.enums import JenisAgenda, Role
from src.pesantren_system.pesantren_system.core.exceptions import AuthorizationError, ValidationError
from src.pesantren_system.pesantren_system.kalender.model import AgendaKalender
from src.pesantren_system.pesantren_system.kalender.service import KalenderService, events_for_day, month_grid


class InMemoryKalender:
    def __init__(self):
        self.rows: dict[int, AgendaKalender] = {}
        self._next_id = 1

    def list_overlapping(self, *, start: date, end: date):
        rows = [a for a in self.rows.values() if a.tanggal_mulai <= end and a.tanggal_selesai >= start]
        return sorted(rows, key=lambda a: a.tanggal_mulai)

    def get_by_id(self, agenda_id: int) -> Optional[AgendaKalender]:
        return self.rows.get(agenda_id)

    def create(self, data: dict) -> int:
        agenda_id = self._next_id
        self._next_id += 1
        self.rows[agenda_id] = AgendaKalender(agenda_id=agenda_id, **data)
        return agenda_id

    def update(self, agenda_id: int, data: dict) -> bool:
        self.rows[agenda_id] = replace(self.rows[agenda_id], **data)
        return True

    def delete(self, agenda_id: int) -> bool:
        return self.rows.pop(agenda_id, None) is not None


UJIAN = AgendaKalender(
    agenda_id=1, judul="UTS", tanggal_mulai=date(2025, 2, 27), tanggal_selesai=date(2025, 3, 3), jenis=JenisAgenda.UJIAN
)


def test_month_grid_starts_on_sunday_and_pads_adjacent_days():
    weeks = month_grid(2025, 2, [UJIAN])

    assert len(weeks) == 5
    assert all(len(w) == 7 for w in weeks)
    assert weeks[0][0].day == date(2025, 1, 26)
    assert not weeks[0][0].in_month
    assert weeks[0][6].day == date(2025, 2, 1)
    assert weeks[-1][-1].day == date(2025, 3, 1)
    # agenda lintas bulan tampil juga di sel bulan berikutnya
    assert weeks[-1][-1].events == (UJIAN,)
    assert weeks[-1][0].events == ()


def test_events_for_day_inclusive_range():
    assert events_for_day([UJIAN], date(2025, 3, 3)) == [UJIAN]
    assert events_for_day([UJIAN], date(2025, 3, 4)) == []


def test_save_defaults_end_date_and_jenis():
    repo = InMemoryKalender()
    svc = KalenderService(repo)

    agenda_id = svc.save(
        current_role=Role.GURU,
        agenda_id=None,
        judul="Rapat wali santri",
        deskripsi="",
        tanggal_mulai="2025-03-10",
        tanggal_selesai="",
        jenis=None,
    )

    agenda = repo.get_by_id(agenda_id)
    assert agenda.tanggal_selesai == date(2025, 3, 10)
    assert agenda.jenis == JenisAgenda.KEGIATAN
    assert agenda.deskripsi is None
    assert [a.agenda_id for a in svc.list_month(2025, 3)] == [agenda_id]
    assert svc.list_month(2025, 4) == []


def test_list_year_includes_overlapping_agenda():
    repo = InMemoryKalender()
    svc = KalenderService(repo)
    svc.save(
        current_role=Role.ADMIN, agenda_id=None, judul="Libur akhir tahun", deskripsi=None,
        tanggal_mulai="2024-12-28", tanggal_selesai="2025-01-04", jenis="Libur",
    )

    assert len(svc.list_year(2025)) == 1
    assert len(svc.list_year(2024)) == 1
    assert svc.list_year(2023) == []


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"judul": " "}, "Judul agenda wajib diisi"),
        ({"tanggal_mulai": ""}, "Tanggal mulai wajib diisi"),
        ({"tanggal_mulai": "10-03-2025"}, "Format tanggal tidak valid"),
        ({"tanggal_selesai": "2025-03-01"}, "Tanggal selesai tidak boleh sebelum tanggal mulai"),
        ({"jenis": "Wisuda"}, "Jenis agenda tidak valid"),
    ],
)
def test_save_validation(overrides, message):
    data = {"judul": "Ujian", "deskripsi": None, "tanggal_mulai": "2025-03-10", "tanggal_selesai": None, "jenis": "Ujian"}
    data.update(overrides)
    svc = KalenderService(InMemoryKalender())

    with pytest.raises(ValidationError) as exc:
        svc.save(current_role=Role.ADMIN, agenda_id=None, **data)

    assert str(exc.value) == message


def test_only_admin_and_guru_edit():
    svc = KalenderService(InMemoryKalender())
    with pytest.raises(AuthorizationError):
        svc.save(
            current_role=Role.WALI, agenda_id=None, judul="x", deskripsi=None,
            tanggal_mulai="2025-03-10", tanggal_selesai=None, jenis=None,
        )
    with pytest.raises(AuthorizationError):
        svc.delete(current_role=Role.BENDAHARA, agenda_id=1)
