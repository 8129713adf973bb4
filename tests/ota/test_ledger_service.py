from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Optional

import pytest

from src.pesantren_system.pesantren_system.core.exceptions import NotFoundError, ValidationError
from src.pesantren_system.pesantren_system.ota.ledger_service import LedgerService
from src.pesantren_system.pesantren_system.ota.model import OrangTuaAsuh, Pemasukan, Pengeluaran, Penyaluran
from src.pesantren_system.pesantren_system.santri.model import Santri


class FakeDonors:
    def __init__(self, donors: list[OrangTuaAsuh]):
        self._by_id = {d.ota_id: d for d in donors}

    def get_by_id(self, ota_id: int) -> Optional[OrangTuaAsuh]:
        return self._by_id.get(ota_id)


class FakeSantri:
    def __init__(self, santri: list[Santri]):
        self._by_id = {s.santri_id: s for s in santri}

    def get_by_id(self, santri_id: int) -> Optional[Santri]:
        return self._by_id.get(santri_id)


class FakeLedgerRepo:
    """Generic in-memory table; `factory(id, data)` builds the row entity."""

    def __init__(self, factory, rows=()):
        self._factory = factory
        self.rows: dict[int, object] = {}
        self._next_id = 1
        for r in rows:
            self.create(r)

    def list(self, **_filters):
        return list(self.rows.values())

    def get_by_id(self, row_id: int):
        return self.rows.get(row_id)

    def create(self, data: dict) -> int:
        row_id = self._next_id
        self._next_id += 1
        self.rows[row_id] = self._factory(row_id, data)
        return row_id

    def update(self, row_id: int, data: dict) -> bool:
        self.rows[row_id] = self._factory(row_id, data)
        return True

    def delete(self, row_id: int) -> bool:
        return self.rows.pop(row_id, None) is not None


DONOR = OrangTuaAsuh(ota_id=1, nama="Haji Ahmad", no_hp="0812-3456-789")


def _pemasukan(row_id, data):
    return Pemasukan(
        pemasukan_id=row_id,
        ota_id=data["ota_id"],
        tanggal=data["tanggal"],
        jumlah=Decimal(data["jumlah"]),
        metode=data.get("metode"),
        keterangan=data.get("keterangan"),
        ota_nama=DONOR.nama if data["ota_id"] == DONOR.ota_id else None,
        ota_no_hp=data.get("ota_no_hp", DONOR.no_hp if data["ota_id"] == DONOR.ota_id else None),
    )


def _pengeluaran(row_id, data):
    return Pengeluaran(
        pengeluaran_id=row_id,
        tanggal=data["tanggal"],
        keperluan=data["keperluan"],
        jumlah=Decimal(data["jumlah"]),
        keterangan=data.get("keterangan"),
        ota_id=data.get("ota_id"),
    )


def _penyaluran(row_id, data):
    return Penyaluran(
        penyaluran_id=row_id,
        santri_id=data["santri_id"],
        tanggal=data["tanggal"],
        nominal=Decimal(data["nominal"]),
        keterangan=data.get("keterangan"),
    )


def _service(*, income=(), expense=(), disbursed=()):
    pemasukan = FakeLedgerRepo(_pemasukan, income)
    pengeluaran = FakeLedgerRepo(_pengeluaran, expense)
    penyaluran = FakeLedgerRepo(_penyaluran, disbursed)
    svc = LedgerService(
        FakeDonors([DONOR, OrangTuaAsuh(ota_id=2, nama="Bu Siti")]),
        pemasukan,
        pengeluaran,
        penyaluran,
        FakeSantri([Santri(santri_id=10, nis="S010", nama="Umar")]),
    )
    return svc, pemasukan, pengeluaran, penyaluran


def _income(jumlah, tanggal=date(2025, 1, 5), ota_id=1):
    return {"ota_id": ota_id, "tanggal": tanggal, "jumlah": jumlah, "metode": "Transfer"}


def test_save_pemasukan_parses_rupiah_input():
    svc, pemasukan, _, _ = _service()

    new_id = svc.save_pemasukan(pemasukan_id=None, ota_id=1, tanggal="2025-01-05", jumlah="1.250.000", metode="Tunai")

    row = pemasukan.get_by_id(new_id)
    assert row.jumlah == Decimal("1250000")
    assert row.metode == "Tunai"
    assert row.tanggal == date(2025, 1, 5)


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"ota_id": None, "tanggal": "2025-01-05", "jumlah": "1000"}, "Pilih OTA terlebih dahulu"),
        ({"ota_id": 1, "tanggal": "2025-01-05", "jumlah": "0"}, "Nominal harus lebih dari 0"),
        ({"ota_id": 1, "tanggal": "", "jumlah": "1000"}, "Tanggal wajib diisi"),
        ({"ota_id": 1, "tanggal": "05/01/2025", "jumlah": "1000"}, "Tanggal tidak valid"),
        ({"ota_id": 1, "tanggal": "2025-01-05", "jumlah": "1000", "metode": "Cek"}, "Metode pembayaran tidak valid"),
    ],
)
def test_save_pemasukan_validation(kwargs, message):
    svc, pemasukan, _, _ = _service()

    with pytest.raises(ValidationError) as exc:
        svc.save_pemasukan(pemasukan_id=None, **kwargs)

    assert str(exc.value) == message
    assert pemasukan.list() == []


def test_save_pemasukan_unknown_donor():
    svc, _, _, _ = _service()
    with pytest.raises(NotFoundError):
        svc.save_pemasukan(pemasukan_id=None, ota_id=99, tanggal="2025-01-05", jumlah="1000")


def test_pengeluaran_cannot_exceed_income():
    svc, _, pengeluaran, _ = _service(income=[_income(500_000)])

    svc.save_pengeluaran(pengeluaran_id=None, tanggal="2025-01-10", keperluan="SPP", jumlah="400.000")
    with pytest.raises(ValidationError) as exc:
        svc.save_pengeluaran(pengeluaran_id=None, tanggal="2025-01-11", keperluan="Buku", jumlah="150.000")

    assert "Saldo tersedia: Rp 100.000" in str(exc.value)
    assert len(pengeluaran.list()) == 1
    assert svc.saldo() == Decimal("100000")


def test_pengeluaran_edit_reuses_its_own_amount():
    svc, _, pengeluaran, _ = _service(
        income=[_income(500_000)],
        expense=[{"tanggal": date(2025, 1, 10), "keperluan": "SPP", "jumlah": 500_000}],
    )

    svc.save_pengeluaran(pengeluaran_id=1, tanggal="2025-01-10", keperluan="SPP Januari", jumlah="450000")

    row = pengeluaran.get_by_id(1)
    assert row.keperluan == "SPP Januari"
    assert row.jumlah == Decimal("450000")


def test_pengeluaran_requires_keperluan():
    svc, _, _, _ = _service(income=[_income(500_000)])
    with pytest.raises(ValidationError) as exc:
        svc.save_pengeluaran(pengeluaran_id=None, tanggal="2025-01-10", keperluan="  ", jumlah="1000")
    assert str(exc.value) == "Keperluan wajib diisi"


def test_penyaluran_limited_by_available_balance():
    svc, _, _, penyaluran = _service(
        income=[_income(1_000_000)],
        expense=[{"tanggal": date(2025, 1, 10), "keperluan": "Seragam", "jumlah": 300_000}],
        disbursed=[{"santri_id": 10, "tanggal": date(2025, 1, 15), "nominal": 500_000}],
    )
    assert svc.saldo_tersedia() == Decimal("200000")

    with pytest.raises(ValidationError):
        svc.save_penyaluran(penyaluran_id=None, santri_id=10, tanggal="2025-01-20", nominal="250000")

    svc.save_penyaluran(penyaluran_id=None, santri_id=10, tanggal="2025-01-20", nominal="200000")
    assert svc.saldo_tersedia() == Decimal("0")
    assert len(penyaluran.list()) == 2


def test_penyaluran_edit_counts_old_nominal():
    svc, _, _, penyaluran = _service(
        income=[_income(500_000)],
        disbursed=[{"santri_id": 10, "tanggal": date(2025, 1, 15), "nominal": 500_000}],
    )

    svc.save_penyaluran(penyaluran_id=1, santri_id=10, tanggal="2025-01-15", nominal="500000", keterangan="Koreksi")

    assert penyaluran.get_by_id(1).keterangan == "Koreksi"


def test_penyaluran_requires_santri():
    svc, _, _, _ = _service(income=[_income(500_000)])
    with pytest.raises(ValidationError) as exc:
        svc.save_penyaluran(penyaluran_id=None, santri_id=None, tanggal="2025-01-15", nominal="1000")
    assert str(exc.value) == "Pilih santri penerima"
    with pytest.raises(NotFoundError):
        svc.save_penyaluran(penyaluran_id=None, santri_id=77, tanggal="2025-01-15", nominal="1000")


def test_confirmation_link_targets_donor_phone():
    svc, _, _, _ = _service(income=[_income(1_250_000, tanggal=date(2025, 1, 6))])

    url = svc.confirmation_link(1)

    assert url.startswith("https://wa.me/628123456789?text=")
    assert "Rp%201.250.000" in url


def test_confirmation_link_none_without_phone():
    svc, pemasukan, _, _ = _service()
    pemasukan.rows[1] = replace(_pemasukan(1, _income(1000, ota_id=2)), ota_no_hp=None)

    assert svc.confirmation_link(1) is None


def test_list_pemasukan_filters_period_and_search():
    svc, _, _, _ = _service(
        income=[
            _income(1000, tanggal=date(2025, 1, 5)),
            _income(2000, tanggal=date(2025, 2, 5), ota_id=2),
            _income(3000, tanggal=date(2024, 2, 5)),
        ]
    )

    assert [r.pemasukan_id for r in svc.list_pemasukan(year=2025)] == [1, 2]
    assert [r.pemasukan_id for r in svc.list_pemasukan(year=2025, month=2)] == [2]
    assert [r.pemasukan_id for r in svc.list_pemasukan(search="ahmad")] == [1, 3]


def test_delete_missing_rows_raise_not_found():
    svc, _, _, _ = _service()
    with pytest.raises(NotFoundError):
        svc.delete_pemasukan(5)
    with pytest.raises(NotFoundError):
        svc.delete_pengeluaran(5)
    with pytest.raises(NotFoundError):
        svc.delete_penyaluran(5)
