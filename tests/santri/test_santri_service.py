from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

import pytest

from src.pesantren_system.pesantren_system.core.exceptions import NotFoundError, ValidationError
from src.pesantren_system.pesantren_system.guru.model import Guru
from src.pesantren_system.pesantren_system.guru.service import GuruService
from src.pesantren_system.pesantren_system.santri.model import Santri
from src.pesantren_system.pesantren_system.santri.service import SantriService


class InMemorySantri:
    def __init__(self):
        self.by_id: dict[int, Santri] = {}
        self._next_id = 1
        self.wali_links: dict[int, list[int]] = {}

    def get_by_id(self, santri_id: int) -> Optional[Santri]:
        return self.by_id.get(santri_id)

    def get_by_nis(self, nis: str) -> Optional[Santri]:
        return next((s for s in self.by_id.values() if s.nis == nis), None)

    def list(self, *, kelas_id=None, halaqoh_id=None, wali_id=None, status=None, search=None):
        return [
            s for s in self.by_id.values()
            if (kelas_id is None or s.kelas_id == kelas_id)
            and (wali_id is None or s.wali_id == wali_id)
            and (status is None or s.status == status)
            and (search is None or search.lower() in s.nama.lower() or search in s.nis)
        ]

    def search_by_name(self, query: str, *, exclude_ids=(), limit: int = 5):
        return [s for s in self.by_id.values() if query.lower() in s.nama.lower()][:limit]

    def create(self, data: dict) -> int:
        santri_id = self._next_id
        self._next_id += 1
        self.by_id[santri_id] = Santri(santri_id=santri_id, **data)
        return santri_id

    def update(self, santri_id: int, data: dict) -> bool:
        self.by_id[santri_id] = replace(self.by_id[santri_id], **data)
        return True

    def delete(self, santri_id: int) -> bool:
        return self.by_id.pop(santri_id, None) is not None

    def replace_wali_links(self, wali_id: int, santri_ids: Sequence[int]) -> None:
        for sid, s in list(self.by_id.items()):
            if s.wali_id == wali_id and sid not in santri_ids:
                self.by_id[sid] = replace(s, wali_id=None)
        for sid in santri_ids:
            self.by_id[sid] = replace(self.by_id[sid], wali_id=wali_id)


def _data(nis: str, nama: str, **kw) -> dict:
    data = {"nis": nis, "nama": nama, "jenis_kelamin": "L", "kelas_id": 1, "halaqoh_id": None, "status": "Aktif"}
    data.update(kw)
    return data


def test_create_rejects_duplicate_nis():
    svc = SantriService(InMemorySantri())
    svc.create(_data("2025001", "Ali"))

    with pytest.raises(ValidationError) as exc:
        svc.create(_data("2025001", "Bilal"))
    assert str(exc.value) == "NIS sudah digunakan"


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"nis": ""}, "NIS wajib diisi"),
        ({"nama": " "}, "Nama santri wajib diisi"),
        ({"status": "Pindah"}, "Status santri tidak valid"),
        ({"jenis_kelamin": "X"}, "Jenis kelamin tidak valid"),
    ],
)
def test_create_validation(overrides, message):
    svc = SantriService(InMemorySantri())
    data = _data("2025001", "Ali")
    data.update(overrides)

    with pytest.raises(ValidationError) as exc:
        svc.create(data)
    assert str(exc.value) == message
    assert svc.list() == []


def test_update_keeps_own_nis_but_not_others():
    repo = InMemorySantri()
    svc = SantriService(repo)
    ali = svc.create(_data("2025001", "Ali"))
    svc.create(_data("2025002", "Bilal"))

    svc.update(ali, _data("2025001", "Ali bin Abdullah", status="Lulus"))
    assert repo.get_by_id(ali).nama == "Ali bin Abdullah"
    assert svc.list_active_by_kelas(1)[0].nama == "Bilal"

    with pytest.raises(ValidationError):
        svc.update(ali, _data("2025002", "Ali"))
    with pytest.raises(NotFoundError):
        svc.update(99, _data("2025009", "X"))


def test_search_excludes_ids_and_blank_query():
    svc = SantriService(InMemorySantri())
    first = svc.create(_data("1", "Ahmad Fauzi"))
    svc.create(_data("2", "Ahmad Rifai"))

    assert [s.nis for s in svc.search("ahmad", exclude_ids=[first])] == ["2"]
    assert svc.search("  ") == []


def test_wali_links_are_replaced():
    repo = InMemorySantri()
    svc = SantriService(repo)
    a = svc.create(_data("1", "Ali"))
    b = svc.create(_data("2", "Bilal"))

    svc.link_to_wali(wali_id=50, santri_ids=[a])
    svc.link_to_wali(wali_id=50, santri_ids=[b])

    assert [s.santri_id for s in svc.list_for_wali(50)] == [b]
    assert repo.get_by_id(a).wali_id is None


class InMemoryGuru:
    def __init__(self):
        self.by_id: dict[int, Guru] = {}

    def list_all(self):
        return list(self.by_id.values())

    def get_by_id(self, guru_id: int):
        return self.by_id.get(guru_id)

    def get_by_email(self, email: str):
        return next((g for g in self.by_id.values() if g.email == email), None)

    def create(self, data: dict) -> int:
        guru_id = len(self.by_id) + 1
        self.by_id[guru_id] = Guru(guru_id=guru_id, **data)
        return guru_id

    def update(self, guru_id: int, data: dict) -> bool:
        self.by_id[guru_id] = replace(self.by_id[guru_id], **data)
        return True

    def delete(self, guru_id: int) -> bool:
        return self.by_id.pop(guru_id, None) is not None


def test_guru_email_normalised_and_found():
    svc = GuruService(InMemoryGuru())

    guru_id = svc.create({"nama": "Ust. Hasan", "email": " Hasan@Pesantren.ID ", "nip": ""})

    assert svc.get(guru_id).email == "hasan@pesantren.id"
    assert svc.get(guru_id).nip is None
    assert svc.find_by_email("hasan@pesantren.id").guru_id == guru_id
    assert svc.find_by_email(None) is None
    with pytest.raises(ValidationError):
        svc.create({"nama": "X", "email": "bukan-email"})
    with pytest.raises(ValidationError):
        svc.create({"nama": ""})
