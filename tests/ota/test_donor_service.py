from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

import pytest

from src.pesantren_system.pesantren_system.core.enums import Role
from src.pesantren_system.pesantren_system.core.exceptions import NotFoundError, ValidationError
from src.pesantren_system.pesantren_system.ota.donor_service import (
    FILTER_ALL,
    FILTER_UNCONNECTED,
    DonorService,
    LinkingService,
)
from src.pesantren_system.pesantren_system.ota.model import OrangTuaAsuh, OtaSantriLink, Pemasukan, Pengeluaran
from src.pesantren_system.pesantren_system.santri.model import Santri
from src.pesantren_system.pesantren_system.users.model import UserProfile


class FakeDonors:
    def __init__(self, donors: list[OrangTuaAsuh]):
        self.by_id = {d.ota_id: d for d in donors}
        self._next_id = max(self.by_id, default=0) + 1

    def list(self, *, active_only: bool = False):
        return [d for d in self.by_id.values() if d.status or not active_only]

    def get_by_id(self, ota_id: int) -> Optional[OrangTuaAsuh]:
        return self.by_id.get(ota_id)

    def get_by_user_id(self, user_id: int) -> Optional[OrangTuaAsuh]:
        return next((d for d in self.by_id.values() if d.user_id == user_id), None)

    def create(self, data: dict) -> int:
        ota_id = self._next_id
        self._next_id += 1
        self.by_id[ota_id] = OrangTuaAsuh(ota_id=ota_id, **data)
        return ota_id

    def update(self, ota_id: int, data: dict) -> bool:
        self.by_id[ota_id] = replace(self.by_id[ota_id], **data)
        return True

    def delete(self, ota_id: int) -> bool:
        return self.by_id.pop(ota_id, None) is not None

    def set_user(self, ota_id: int, user_id: Optional[int]) -> bool:
        self.by_id[ota_id] = replace(self.by_id[ota_id], user_id=user_id)
        return True

    def taken_user_ids(self):
        return [d.user_id for d in self.by_id.values() if d.user_id is not None]


class FakeLinks:
    def __init__(self, links: Iterable[OtaSantriLink] = ()):
        self.by_id = {l.link_id: l for l in links}
        self._next_id = max(self.by_id, default=0) + 1
        self.relinked: list[tuple[int, Optional[int]]] = []

    def list(self, *, ota_id: Optional[int] = None):
        return [l for l in self.by_id.values() if ota_id is None or l.ota_id == ota_id]

    def get_by_id(self, link_id: int):
        return self.by_id.get(link_id)

    def create(self, *, ota_id: int, santri_id: int) -> int:
        link_id = self._next_id
        self._next_id += 1
        self.by_id[link_id] = OtaSantriLink(link_id=link_id, ota_id=ota_id, santri_id=santri_id)
        return link_id

    def delete(self, link_id: int) -> bool:
        return self.by_id.pop(link_id, None) is not None

    def relink(self, *, santri_id: int, ota_id: Optional[int]) -> None:
        self.relinked.append((santri_id, ota_id))
        for link_id, l in list(self.by_id.items()):
            if l.santri_id == santri_id:
                del self.by_id[link_id]
        if ota_id is not None:
            self.create(ota_id=ota_id, santri_id=santri_id)


class FakeSantri:
    def __init__(self, santri: list[Santri]):
        self.by_id = {s.santri_id: s for s in santri}

    def get_by_id(self, santri_id: int):
        return self.by_id.get(santri_id)

    def search_by_name(self, query: str, *, exclude_ids=(), limit: int = 5):
        q = query.lower()
        return [s for s in self.by_id.values() if q in s.nama.lower() and s.santri_id not in set(exclude_ids)][:limit]

    def list(self, *, kelas_id=None, status=None, search=None, **_):
        rows = list(self.by_id.values())
        if status:
            rows = [s for s in rows if s.status == status]
        if search:
            rows = [s for s in rows if search.lower() in s.nama.lower()]
        return rows


class ListRepo:
    def __init__(self, rows=()):
        self._rows = list(rows)

    def list(self, *, ota_id: Optional[int] = None):
        return [r for r in self._rows if ota_id is None or r.ota_id == ota_id]


class FakeUsers:
    def __init__(self, users: list[UserProfile]):
        self.by_id = {u.user_id: u for u in users}

    def get_by_id(self, user_id: int):
        return self.by_id.get(user_id)

    def list_by_role(self, role: Role):
        return [u for u in self.by_id.values() if u.has_role(role)]


SANTRI = [
    Santri(santri_id=1, nis="S001", nama="Muhammad Ali"),
    Santri(santri_id=2, nis="S002", nama="Muhammad Fikri"),
    Santri(santri_id=3, nis="S003", nama="Muhammad Hasan", status="Lulus"),
    Santri(santri_id=4, nis="S004", nama="Zaid"),
]


def _linking(links=()):
    donors = FakeDonors([OrangTuaAsuh(ota_id=1, nama="Ahmad"), OrangTuaAsuh(ota_id=2, nama="Siti", status=False)])
    link_repo = FakeLinks(links)
    return LinkingService(link_repo, FakeSantri(SANTRI), donors), link_repo


def test_search_excludes_santri_linked_to_any_donor():
    svc, _ = _linking([OtaSantriLink(link_id=1, ota_id=2, santri_id=1)])

    found = svc.search_santri_for_donor(1, "muhammad")

    assert [s.santri_id for s in found] == [2, 3]


def test_search_blank_query_returns_nothing():
    svc, _ = _linking()
    assert svc.search_santri_for_donor(1, "   ") == []


def test_link_rejects_santri_with_existing_donor():
    svc, links = _linking([OtaSantriLink(link_id=1, ota_id=2, santri_id=1)])

    with pytest.raises(ValidationError) as exc:
        svc.link(ota_id=1, santri_id=1)

    assert "Muhammad Ali sudah memiliki orang tua asuh" in str(exc.value)
    assert len(links.list()) == 1


def test_link_and_unlink():
    svc, links = _linking()

    link_id = svc.link(ota_id=1, santri_id=4)
    assert [l.santri_id for l in svc.linked(1)] == [4]

    with pytest.raises(NotFoundError):
        svc.unlink(ota_id=2, link_id=link_id)
    svc.unlink(ota_id=1, link_id=link_id)
    assert links.list() == []


def test_relink_requires_active_donor():
    svc, links = _linking([OtaSantriLink(link_id=1, ota_id=1, santri_id=4)])

    with pytest.raises(ValidationError):
        svc.relink(santri_id=4, ota_id=2)
    assert links.relinked == []

    svc.relink(santri_id=4, ota_id=None)
    assert links.relinked == [(4, None)]
    assert links.list() == []


def test_santri_view_filters_connection_status():
    svc, _ = _linking([OtaSantriLink(link_id=1, ota_id=1, santri_id=1, ota_nama="Ahmad")])

    connected = svc.santri_view()
    unconnected = svc.santri_view(status_filter=FILTER_UNCONNECTED)
    everyone = svc.santri_view(status_filter=FILTER_ALL)

    assert [r.santri_id for r in connected] == [1]
    assert connected[0].connected
    assert [r.santri_id for r in unconnected] == [2, 4]
    assert len(everyone) == 3


def _donor_service(users=()):
    donors = FakeDonors([OrangTuaAsuh(ota_id=1, nama="Ahmad", jumlah_santri=2), OrangTuaAsuh(ota_id=2, nama="Siti")])
    pemasukan = ListRepo(
        [
            Pemasukan(pemasukan_id=1, ota_id=1, tanggal=date(2025, 1, 1), jumlah=Decimal("500000")),
            Pemasukan(pemasukan_id=2, ota_id=2, tanggal=date(2025, 1, 2), jumlah=Decimal("900000")),
        ]
    )
    pengeluaran = ListRepo(
        [Pengeluaran(pengeluaran_id=1, tanggal=date(2025, 1, 5), keperluan="SPP", jumlah=Decimal("200000"), ota_id=1)]
    )
    svc = DonorService(donors, FakeLinks([OtaSantriLink(link_id=1, ota_id=1, santri_id=1)]), pemasukan, pengeluaran, FakeUsers(list(users)))
    return svc, donors


def test_save_creates_and_updates_donor():
    svc, donors = _donor_service()

    new_id = svc.save(ota_id=None, nama="  Hj. Aminah ", email="", no_hp="0811")
    assert donors.get_by_id(new_id).nama == "Hj. Aminah"
    assert donors.get_by_id(new_id).email is None

    svc.save(ota_id=new_id, nama="Hj. Aminah", status=False)
    assert donors.get_by_id(new_id).status == 0

    with pytest.raises(ValidationError):
        svc.save(ota_id=None, nama=" ")


def test_detail_sums_donor_ledger():
    svc, _ = _donor_service()

    detail = svc.detail(1)

    assert detail.santri_count == 1
    assert detail.total_donasi == Decimal("500000")
    assert detail.total_pengeluaran == Decimal("200000")
    assert detail.saldo == Decimal("300000")


def test_stats():
    svc, _ = _donor_service()
    stats = svc.stats(svc.list())
    assert stats.active_count == 2
    assert stats.total_santri == 2


def test_link_account_rules():
    ota_user = UserProfile(user_id=10, nama="Ahmad", email="ahmad@x.id", password_hash="h", roles=(Role.OTA,))
    guru_user = UserProfile(user_id=11, nama="Guru", email="guru@x.id", password_hash="h", roles=(Role.GURU,))
    svc, donors = _donor_service([ota_user, guru_user])

    assert [u.user_id for u in svc.candidate_accounts()] == [10]
    with pytest.raises(ValidationError):
        svc.link_account(ota_id=1, user_id=11)

    svc.link_account(ota_id=1, user_id=10)
    assert donors.get_by_id(1).user_id == 10
    assert svc.candidate_accounts() == []

    with pytest.raises(ValidationError) as exc:
        svc.link_account(ota_id=2, user_id=10)
    assert "Akun sudah terhubung dengan Ahmad" in str(exc.value)

    svc.unlink_account(ota_id=1)
    assert donors.get_by_id(1).user_id is None
