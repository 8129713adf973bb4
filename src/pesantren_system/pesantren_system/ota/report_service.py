"""Laporan keuangan OTA, dashboard, dan data export-nya."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Optional, Sequence

from ..common.formatting import format_rupiah, format_tanggal, nama_bulan
from ..core.constants import DEFAULT_RECENT_LIMIT, DEFAULT_TOP_DONORS, LOW_BALANCE_THRESHOLD
from ..core.enums import StatusPenerima
from . import ledger
from .model import Laporan, LaporanPenyaluran, OtaDashboard, Pemasukan, Pengeluaran, Penyaluran
from .repository import (
    DonorRepository,
    LinkRepository,
    PemasukanRepository,
    PengeluaranRepository,
    PenerimaRepository,
    PenyaluranRepository,
)


def period_label(year: int, month: Optional[int]) -> str:
    if month is None:
        return f"Tahun {year}"
    return f"{nama_bulan(month)} {year}"


class LaporanService:
    def __init__(
        self,
        donors: DonorRepository,
        links: LinkRepository,
        pemasukan: PemasukanRepository,
        pengeluaran: PengeluaranRepository,
        penyaluran: PenyaluranRepository,
        penerima: PenerimaRepository,
        low_balance_threshold: Decimal = Decimal(LOW_BALANCE_THRESHOLD),
    ):
        self._donors = donors
        self._links = links
        self._pemasukan = pemasukan
        self._pengeluaran = pengeluaran
        self._penyaluran = penyaluran
        self._penerima = penerima
        self._low_balance_threshold = Decimal(low_balance_threshold)

    @property
    def low_balance_threshold(self) -> Decimal:
        return self._low_balance_threshold

    def laporan(self, *, year: int, month: Optional[int] = None, ota_id: Optional[int] = None) -> Laporan:
        """Pemasukan difilter per donatur bila `ota_id` diisi; pengeluaran hanya per periode."""
        all_in = self._pemasukan.list()
        all_out = self._pengeluaran.list()
        pemasukan = ledger.filter_period(all_in, year=year, month=month, ota_id=ota_id)
        pengeluaran = ledger.filter_period(all_out, year=year, month=month)
        return Laporan(
            year=year,
            month=month,
            ota_id=ota_id,
            pemasukan=tuple(pemasukan),
            pengeluaran=tuple(pengeluaran),
            total_pemasukan=ledger.total(pemasukan),
            total_pengeluaran=ledger.total(pengeluaran),
            all_time_pemasukan=ledger.total(all_in),
            all_time_pengeluaran=ledger.total(all_out),
        )

    def laporan_penyaluran(self, *, year: int, month: Optional[int] = None) -> LaporanPenyaluran:
        penyaluran_tahun = ledger.filter_period(self._penyaluran.list(), year=year)
        rows = ledger.filter_period(penyaluran_tahun, year=year, month=month)
        total_pemasukan = ledger.total(ledger.filter_period(self._pemasukan.list(), year=year))
        total_penyaluran = ledger.total(penyaluran_tahun, "nominal")
        return LaporanPenyaluran(
            year=year,
            month=month,
            rows=tuple(rows),
            filtered_total=ledger.total(rows, "nominal"),
            total_pemasukan=total_pemasukan,
            total_pengeluaran=ledger.total(ledger.filter_period(self._pengeluaran.list(), year=year)),
            total_penyaluran=total_penyaluran,
            penerima_aktif=len(self._penerima.list(status=StatusPenerima.AKTIF)),
            usage_percent=ledger.usage_percent(total_penyaluran, total_pemasukan),
        )

    def dashboard(self, *, today: Optional[date] = None) -> OtaDashboard:
        today = today or date.today()
        pemasukan = self._pemasukan.list()
        pengeluaran = self._pengeluaran.list()
        total_donasi = ledger.total(pemasukan)
        total_pengeluaran = ledger.total(pengeluaran)
        return OtaDashboard(
            active_donors=len(self._donors.list(active_only=True)),
            linked_santri=len(self._links.list()),
            total_donasi=total_donasi,
            total_pengeluaran=total_pengeluaran,
            donasi_bulan_ini=ledger.total(ledger.filter_period(pemasukan, year=today.year, month=today.month)),
            progress_percent=ledger.usage_percent(total_pengeluaran, total_donasi, cap=100),
            low_balance=ledger.is_low_balance(total_donasi - total_pengeluaran, self._low_balance_threshold),
            top_donors=tuple(ledger.top_donors(pemasukan, DEFAULT_TOP_DONORS)),
            recent_pemasukan=tuple(ledger.recent(pemasukan, DEFAULT_RECENT_LIMIT)),
            recent_pengeluaran=tuple(ledger.recent(pengeluaran, DEFAULT_RECENT_LIMIT)),
        )


def _month_part(month: Optional[int]) -> str:
    return "all" if month is None else str(month)


def pemasukan_export(rows: Sequence[Pemasukan], *, year: int, month: Optional[int]) -> dict[str, Any]:
    return {
        "filename": f"Pemasukan_OTA_{_month_part(month)}_{year}",
        "title": "Laporan Pemasukan OTA",
        "subtitle_lines": [f"Periode: {period_label(year, month)}", f"Total: {format_rupiah(ledger.total(rows))}"],
        "columns": [
            ("no", "No"),
            ("tanggal", "Tanggal"),
            ("nama_ota", "Nama OTA"),
            ("nominal", "Nominal"),
            ("metode", "Metode"),
            ("keterangan", "Keterangan"),
        ],
        "rows": [
            {
                "no": i,
                "tanggal": format_tanggal(r.tanggal),
                "nama_ota": r.ota_nama or "-",
                "nominal": r.jumlah,
                "metode": r.metode or "-",
                "keterangan": r.keterangan or "-",
            }
            for i, r in enumerate(rows, start=1)
        ],
    }


def pengeluaran_export(rows: Sequence[Pengeluaran], *, year: int, month: Optional[int]) -> dict[str, Any]:
    return {
        "filename": f"Pengeluaran_OTA_{_month_part(month)}_{year}",
        "title": "Laporan Pengeluaran OTA",
        "subtitle_lines": [f"Periode: {period_label(year, month)}", f"Total: {format_rupiah(ledger.total(rows))}"],
        "columns": [
            ("no", "No"),
            ("tanggal", "Tanggal"),
            ("keperluan", "Keperluan"),
            ("nominal", "Nominal"),
            ("keterangan", "Keterangan"),
        ],
        "rows": [
            {
                "no": i,
                "tanggal": format_tanggal(r.tanggal),
                "keperluan": r.keperluan or "-",
                "nominal": r.jumlah,
                "keterangan": r.keterangan or "-",
            }
            for i, r in enumerate(rows, start=1)
        ],
    }


def penyaluran_export(rows: Sequence[Penyaluran], *, year: int, month: Optional[int]) -> dict[str, Any]:
    return {
        "filename": f"Penyaluran_OTA_{year}",
        "title": "Laporan Penyaluran Dana OTA",
        "subtitle_lines": [
            f"Periode: {period_label(year, month)}",
            f"Total: {format_rupiah(ledger.total(rows, 'nominal'))}",
        ],
        "columns": [
            ("no", "No"),
            ("tanggal", "Tanggal"),
            ("nama", "Nama Santri"),
            ("nis", "NIS"),
            ("nominal", "Nominal"),
            ("keterangan", "Keterangan"),
        ],
        "rows": [
            {
                "no": i,
                "tanggal": format_tanggal(r.tanggal),
                "nama": r.santri_nama or "-",
                "nis": r.santri_nis or "-",
                "nominal": r.nominal,
                "keterangan": r.keterangan or "-",
            }
            for i, r in enumerate(rows, start=1)
        ],
    }


def laporan_export(laporan: Laporan) -> dict[str, Any]:
    """Pemasukan dan pengeluaran digabung, diurutkan dari tanggal terbaru."""
    entries = [(p.tanggal, "Pemasukan", p.ota_nama or p.keterangan or "-", p.jumlah, Decimal("0")) for p in laporan.pemasukan]
    entries += [(e.tanggal, "Pengeluaran", e.keperluan or "-", Decimal("0"), e.jumlah) for e in laporan.pengeluaran]
    entries.sort(key=lambda e: e[0], reverse=True)
    return {
        "filename": f"Laporan_OTA_{laporan.year}",
        "title": "Laporan Keuangan OTA",
        "subtitle_lines": [
            f"Periode: {period_label(laporan.year, laporan.month)}",
            f"Total Pemasukan: {format_rupiah(laporan.total_pemasukan)}",
            f"Total Pengeluaran: {format_rupiah(laporan.total_pengeluaran)}",
            f"Saldo: {format_rupiah(laporan.saldo)}",
        ],
        "columns": [
            ("no", "No"),
            ("tipe", "Tipe"),
            ("tanggal", "Tanggal"),
            ("keterangan", "Keterangan"),
            ("masuk", "Masuk"),
            ("keluar", "Keluar"),
        ],
        "rows": [
            {"no": i, "tipe": tipe, "tanggal": format_tanggal(tgl), "keterangan": ket, "masuk": masuk, "keluar": keluar}
            for i, (tgl, tipe, ket, masuk, keluar) in enumerate(entries, start=1)
        ],
    }


def laporan_penyaluran_export(laporan: LaporanPenyaluran) -> dict[str, Any]:
    data = penyaluran_export(laporan.rows, year=laporan.year, month=laporan.month)
    data["title"] = "Laporan Penyaluran OTA"
    data["subtitle_lines"] = [
        f"Periode: {period_label(laporan.year, laporan.month)}",
        f"Total Pemasukan {laporan.year}: {format_rupiah(laporan.total_pemasukan)}",
        f"Total Penyaluran {laporan.year}: {format_rupiah(laporan.total_penyaluran)}",
        f"Sisa Saldo: {format_rupiah(laporan.sisa_saldo)}",
        f"Penerima Aktif: {laporan.penerima_aktif}",
    ]
    return data
