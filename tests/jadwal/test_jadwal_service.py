from __future__ import annotations

from dataclasses import replace
from datetime import time
from typing import Optional

import pytest

from src.pesantren_system.pesantren_system.core.enums import Hari, Role
from src.pesantren_system.pesantren_system.core.exceptions import AuthorizationError, ValidationError
from src.pesantren_system.pesantren_system.jadwal.model import Jadwal
from src.pesantren_system.pesantren_system.jadwal.service import JadwalService, group_by_day, parse_jam


class InMemoryJadwal:
    def __init__(self):
        self.rows: dict[int, Jadwal] = {}
        self._next_id = 1

    def get_by_id(self, jadwal_id: int) -> Optional[Jadwal]:
        return self.rows.get(jadwal_id)

    def list(self, *, kelas_id=None, guru_id=None, hari=None, tahun_ajaran=None):
        return [
            j
            for j in self.rows.values()
            if (kelas_id is None or j.kelas_id == kelas_id)
            and (guru_id is None or j.guru_id == guru_id)
            and (hari is None or j.hari == hari)
            and (tahun_ajaran is None or j.tahun_ajaran == tahun_ajaran)
        ]

    def create(self, data: dict) -> int:
        jadwal_id = self._next_id
        self._next_id += 1
        self.rows[jadwal_id] = Jadwal(jadwal_id=jadwal_id, **data)
        return jadwal_id

    def update(self, jadwal_id: int, data: dict) -> bool:
        self.rows[jadwal_id] = replace(self.rows[jadwal_id], **data)
        return True

    def delete(self, jadwal_id: int) -> bool:
        return self.rows.pop(jadwal_id, None) is not None


def _form(**overrides):
    data = {
        "jadwal_id": None,
        "kelas_id": 1,
        "mapel_id": 2,
        "guru_id": 3,
        "hari": "Senin",
        "jam_ke": "1",
        "jam_mulai": "07:00",
        "jam_selesai": "07:45",
        "tahun_ajaran": "",
    }
    data.update(overrides)
    return data


def test_admin_creates_slot_with_default_tahun_ajaran():
    repo = InMemoryJadwal()
    svc = JadwalService(repo, "2025/2026")

    jadwal_id = svc.save(current_role=Role.ADMIN, **_form())

    j = repo.get_by_id(jadwal_id)
    assert j.hari == Hari.SENIN
    assert j.jam_mulai == time(7, 0)
    assert j.tahun_ajaran == "2025/2026"
    assert j.jam == "07:00 - 07:45"


@pytest.mark.parametrize("role", [Role.GURU, Role.PENGURUS, None])
def test_only_admin_edits_jadwal(role):
    repo = InMemoryJadwal()
    svc = JadwalService(repo)

    with pytest.raises(AuthorizationError):
        svc.save(current_role=role, **_form())
    with pytest.raises(AuthorizationError):
        svc.delete(current_role=role, jadwal_id=1)
    assert repo.rows == {}


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"kelas_id": None}, "Pilih kelas terlebih dahulu"),
        ({"mapel_id": None}, "Pilih mata pelajaran"),
        ({"guru_id": None}, "Pilih guru pengajar"),
        ({"hari": "Minggu"}, "Hari tidak valid"),
        ({"jam_ke": "0"}, "Jam ke minimal 1"),
        ({"jam_ke": "x"}, "Jam ke tidak valid"),
        ({"jam_mulai": "7 pagi"}, "Jam mulai tidak valid"),
        ({"jam_selesai": "06:30"}, "Jam selesai harus setelah jam mulai"),
    ],
)
def test_save_validation(overrides, message):
    svc = JadwalService(InMemoryJadwal())
    with pytest.raises(ValidationError) as exc:
        svc.save(current_role=Role.ADMIN, **_form(**overrides))
    assert str(exc.value) == message


def test_update_existing_slot():
    repo = InMemoryJadwal()
    svc = JadwalService(repo)
    jadwal_id = svc.save(current_role=Role.ADMIN, **_form())

    svc.save(current_role=Role.ADMIN, **_form(jadwal_id=jadwal_id, jam_ke="2", jam_mulai="07:45:00", jam_selesai="08:30"))

    assert repo.get_by_id(jadwal_id).jam_ke == 2
    assert len(repo.rows) == 1


def test_group_by_day_has_every_day_sorted_by_jam_ke():
    repo = InMemoryJadwal()
    svc = JadwalService(repo)
    svc.save(current_role=Role.ADMIN, **_form(jam_ke="3", jam_mulai="09:00", jam_selesai="09:45"))
    svc.save(current_role=Role.ADMIN, **_form(jam_ke="1"))
    svc.save(current_role=Role.ADMIN, **_form(hari="Kamis"))

    grouped = svc.grouped_by_day(kelas_id=1)

    assert list(grouped) == Hari.ordered()
    assert [j.jam_ke for j in grouped[Hari.SENIN]] == [1, 3]
    assert len(grouped[Hari.KAMIS]) == 1
    assert grouped[Hari.AHAD] == []
    assert group_by_day([]) == {h: [] for h in Hari}


def test_parse_jam_accepts_seconds():
    assert parse_jam("13:05:00", "Jam") == time(13, 5)
    assert parse_jam(time(8, 0), "Jam") == time(8, 0)
