from __future__ import annotations

from dataclasses import replace
from typing import Optional

import pytest

from src.pesantren_system.pesantren_system.core.exceptions import NotFoundError, ValidationError
from src.pesantren_system.pesantren_system.halaqoh.model import Halaqoh
from src.pesantren_system.pesantren_system.halaqoh.service import HalaqohService
from src.pesantren_system.pesantren_system.santri.model import Santri


class InMemoryHalaqoh:
    def __init__(self):
        self.rows: dict[int, Halaqoh] = {}
        self._next_id = 1

    def list_all(self):
        return sorted(self.rows.values(), key=lambda h: h.nama)

    def get_by_id(self, halaqoh_id: int) -> Optional[Halaqoh]:
        return self.rows.get(halaqoh_id)

    def create(self, *, nama, musyrif_id, waktu, keterangan) -> int:
        halaqoh_id = self._next_id
        self._next_id += 1
        self.rows[halaqoh_id] = Halaqoh(halaqoh_id=halaqoh_id, nama=nama, musyrif_id=musyrif_id, waktu=waktu, keterangan=keterangan)
        return halaqoh_id

    def update(self, halaqoh_id: int, **data) -> bool:
        self.rows[halaqoh_id] = replace(self.rows[halaqoh_id], **data)
        return True

    def delete(self, halaqoh_id: int) -> bool:
        return self.rows.pop(halaqoh_id, None) is not None


class InMemorySantri:
    def __init__(self, santri: list[Santri]):
        self.by_id = {s.santri_id: s for s in santri}

    def get_by_id(self, santri_id: int):
        return self.by_id.get(santri_id)

    def list(self, *, halaqoh_id=None, status=None, **_):
        return [
            s for s in self.by_id.values()
            if (halaqoh_id is None or s.halaqoh_id == halaqoh_id) and (status is None or s.status == status)
        ]

    def search_by_name(self, query: str, *, exclude_ids=(), limit: int = 5):
        excluded = set(exclude_ids)
        return [s for s in self.by_id.values() if query.lower() in s.nama.lower() and s.santri_id not in excluded][:limit]

    def set_halaqoh(self, santri_id: int, halaqoh_id: Optional[int]) -> bool:
        if santri_id not in self.by_id:
            return False
        self.by_id[santri_id] = replace(self.by_id[santri_id], halaqoh_id=halaqoh_id)
        return True


def _service():
    santri = InMemorySantri(
        [
            Santri(santri_id=1, nis="S1", nama="Abdullah"),
            Santri(santri_id=2, nis="S2", nama="Abdurrahman"),
            Santri(santri_id=3, nis="S3", nama="Hamzah"),
        ]
    )
    return HalaqohService(InMemoryHalaqoh(), santri), santri


def test_save_and_update_halaqoh():
    svc, _ = _service()

    halaqoh_id = svc.save(halaqoh_id=None, nama=" Halaqoh Al-Fatih ", musyrif_id=4, waktu="Ba'da Subuh", keterangan="")
    svc.save(halaqoh_id=halaqoh_id, nama="Halaqoh Al-Fatih", musyrif_id=5, waktu=None, keterangan=None)

    h = svc.get(halaqoh_id)
    assert h.nama == "Halaqoh Al-Fatih"
    assert h.musyrif_id == 5
    with pytest.raises(ValidationError):
        svc.save(halaqoh_id=None, nama="", musyrif_id=None, waktu=None, keterangan=None)


def test_members_and_candidates():
    svc, santri = _service()
    halaqoh_id = svc.save(halaqoh_id=None, nama="Al-Fatih", musyrif_id=None, waktu=None, keterangan=None)

    svc.add_member(halaqoh_id, 1)

    assert [s.santri_id for s in svc.members(halaqoh_id)] == [1]
    assert [s.santri_id for s in svc.search_candidates(halaqoh_id, "abd")] == [2]
    assert svc.search_candidates(halaqoh_id, "") == []

    svc.remove_member(halaqoh_id, 1)
    assert santri.get_by_id(1).halaqoh_id is None
    with pytest.raises(ValidationError):
        svc.remove_member(halaqoh_id, 1)


def test_add_member_errors():
    svc, _ = _service()
    with pytest.raises(NotFoundError):
        svc.add_member(9, 1)

    halaqoh_id = svc.save(halaqoh_id=None, nama="Al-Fatih", musyrif_id=None, waktu=None, keterangan=None)
    with pytest.raises(ValidationError):
        svc.add_member(halaqoh_id, 99)


def test_delete():
    svc, _ = _service()
    halaqoh_id = svc.save(halaqoh_id=None, nama="Al-Fatih", musyrif_id=None, waktu=None, keterangan=None)

    svc.delete(halaqoh_id)

    assert svc.list() == []
    with pytest.raises(NotFoundError):
        svc.delete(halaqoh_id)
