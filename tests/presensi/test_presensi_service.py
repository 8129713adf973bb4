from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

import pytest

from src.pesantren_system.pesantren_system.audit.model import Actor
from src.pesantren_system.pesantren_system.core.enums import StatusPresensi
from src.pesantren_system.pesantren_system.core.exceptions import ValidationError
from src.pesantren_system.pesantren_system.presensi.model import PresensiRecord
from src.pesantren_system.pesantren_system.presensi.service import (
    PresensiService,
    build_rekap,
    mark_all,
    parse_status,
)
from src.pesantren_system.pesantren_system.santri.model import Santri


class InMemoryPresensi:
    def __init__(self):
        self.rows: dict[tuple[int, date], PresensiRecord] = {}
        self.upsert_calls = 0

    def list_for_date(self, *, tanggal: date, santri_ids: Sequence[int]):
        return [r for (sid, tgl), r in self.rows.items() if tgl == tanggal and sid in santri_ids]

    def upsert_many(self, *, tanggal: date, entries: Sequence[PresensiRecord], created_by: Optional[int]) -> int:
        self.upsert_calls += 1
        for e in entries:
            self.rows[(e.santri_id, tanggal)] = e
        return len(entries)

    def list_range(self, *, start, end, kelas_id=None, santri_ids=None):
        return [
            {"santri_id": r.santri_id, "nis": f"S{r.santri_id}", "nama": f"Santri {r.santri_id}", "status": r.status.value}
            for r in self.rows.values()
            if start <= r.tanggal <= end and (santri_ids is None or r.santri_id in santri_ids)
        ]


class FakeSantri:
    def __init__(self, santri: list[Santri]):
        self._santri = santri

    def list(self, *, kelas_id=None, status=None, **_):
        return [s for s in self._santri if (kelas_id is None or s.kelas_id == kelas_id) and (status is None or s.status == status)]


class RecordingAudit:
    def __init__(self):
        self.inputs = []

    def log_input(self, table, *, actor, description, new_data=None):
        self.inputs.append((table, description, new_data))


SANTRI = [
    Santri(santri_id=1, nis="S1", nama="Ali", kelas_id=7),
    Santri(santri_id=2, nis="S2", nama="Bilal", kelas_id=7),
    Santri(santri_id=3, nis="S3", nama="Umar", kelas_id=7, status="Keluar"),
    Santri(santri_id=4, nis="S4", nama="Zaid", kelas_id=8),
]

TGL = date(2025, 1, 6)


def _service():
    repo = InMemoryPresensi()
    audit = RecordingAudit()
    return PresensiService(repo, FakeSantri(SANTRI), audit), repo, audit


def test_sheet_defaults_to_hadir_for_active_santri():
    svc, _, _ = _service()

    sheet = svc.load_sheet(kelas_id=7, tanggal=TGL)

    assert [r.santri_id for r in sheet.rows] == [1, 2]
    assert all(r.status == StatusPresensi.HADIR and not r.tersimpan for r in sheet.rows)
    assert sheet.counts()["hadir"] == 2


def test_sheet_requires_kelas_and_tanggal():
    svc, _, _ = _service()
    with pytest.raises(ValidationError):
        svc.load_sheet(kelas_id=None, tanggal=TGL)
    with pytest.raises(ValidationError):
        svc.load_sheet(kelas_id=7, tanggal=None)


def test_save_upserts_and_reloads_existing_status():
    svc, repo, audit = _service()
    sheet = svc.load_sheet(kelas_id=7, tanggal=TGL)
    rows = mark_all(sheet.rows, StatusPresensi.SAKIT)

    count = svc.save(tanggal=TGL, rows=rows, actor=Actor(user_id=5, email="ustadz@pesantren.id"))
    # simpan ulang tanggal yang sama tidak menggandakan data
    svc.save(tanggal=TGL, rows=rows)

    assert count == 2
    assert len(repo.rows) == 2
    assert repo.upsert_calls == 2
    reloaded = svc.load_sheet(kelas_id=7, tanggal=TGL)
    assert all(r.status == StatusPresensi.SAKIT and r.tersimpan for r in reloaded.rows)
    assert audit.inputs[0][0] == "presensi"
    assert "2 santri" in audit.inputs[0][1]


def test_save_rejects_empty_sheet():
    svc, _, _ = _service()
    with pytest.raises(ValidationError):
        svc.save(tanggal=TGL, rows=[])


def test_parse_status():
    assert parse_status("Izin") == StatusPresensi.IZIN
    with pytest.raises(ValidationError):
        parse_status("terlambat")


def test_build_rekap_counts_per_santri():
    records = [
        {"santri_id": 2, "nis": "S2", "nama": "Bilal", "status": "hadir"},
        {"santri_id": 1, "nis": "S1", "nama": "Ali", "status": "hadir"},
        {"santri_id": 1, "nis": "S1", "nama": "Ali", "status": "alpha"},
        {"santri_id": 1, "nis": "S1", "nama": "Ali", "status": "hadir"},
        {"santri_id": 1, "nis": "S1", "nama": "Ali", "status": "sakit"},
    ]

    rekap = build_rekap(2025, 1, records)

    assert rekap.totals == {"hadir": 3, "sakit": 1, "izin": 0, "alpha": 1}
    ali, bilal = rekap.per_santri
    assert (ali.nama, ali.hadir, ali.alpha, ali.total) == ("Ali", 2, 1, 4)
    assert ali.persen_hadir == 50
    assert bilal.persen_hadir == 100


def test_rekap_export_uses_month_in_filename():
    svc, _, _ = _service()
    svc.save(tanggal=TGL, rows=svc.load_sheet(kelas_id=7, tanggal=TGL).rows)

    data = svc.rekap_export(svc.rekap_bulanan(year=2025, month=1, kelas_id=7))

    assert data["filename"] == "Rekap_Presensi_2025_01"
    assert data["title"] == "Rekap Presensi Januari 2025"
    assert [r["hadir"] for r in data["rows"]] == [1, 1]
