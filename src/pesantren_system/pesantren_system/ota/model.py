from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import StatusPenerima


@dataclass(frozen=True)
class OtaKategori:
    kategori_id: int
    nama: str
    keterangan: Optional[str] = None
    jumlah_ota: int = 0


@dataclass(frozen=True)
class OrangTuaAsuh:
    """Donatur (orang tua asuh). `user_id` terisi bila sudah punya akun login."""

    ota_id: int
    nama: str
    email: Optional[str] = None
    no_hp: Optional[str] = None
    alamat: Optional[str] = None
    kategori_id: Optional[int] = None
    status: bool = True
    user_id: Optional[int] = None
    kategori_nama: Optional[str] = None
    user_email: Optional[str] = None
    jumlah_santri: int = 0


@dataclass(frozen=True)
class OtaSantriLink:
    link_id: int
    ota_id: int
    santri_id: int
    ota_nama: Optional[str] = None
    santri_nama: Optional[str] = None
    santri_nis: Optional[str] = None
    kelas_nama: Optional[str] = None


@dataclass(frozen=True)
class Pemasukan:
    pemasukan_id: int
    ota_id: int
    tanggal: date
    jumlah: Decimal
    metode: Optional[str] = None
    keterangan: Optional[str] = None
    ota_nama: Optional[str] = None
    ota_no_hp: Optional[str] = None


@dataclass(frozen=True)
class Pengeluaran:
    pengeluaran_id: int
    tanggal: date
    keperluan: str
    jumlah: Decimal
    keterangan: Optional[str] = None
    ota_id: Optional[int] = None


@dataclass(frozen=True)
class Penyaluran:
    penyaluran_id: int
    santri_id: int
    tanggal: date
    nominal: Decimal
    keterangan: Optional[str] = None
    santri_nama: Optional[str] = None
    santri_nis: Optional[str] = None


@dataclass(frozen=True)
class PenerimaOta:
    penerima_id: int
    santri_id: int
    status: StatusPenerima = StatusPenerima.AKTIF
    tanggal_mulai: Optional[date] = None
    keterangan: Optional[str] = None
    santri_nama: Optional[str] = None
    santri_nis: Optional[str] = None
    kelas_nama: Optional[str] = None


@dataclass(frozen=True)
class DonorTotal:
    ota_id: int
    nama: str
    total: Decimal


@dataclass(frozen=True)
class DonorStats:
    active_count: int
    total_santri: int


@dataclass(frozen=True)
class DonorDetail:
    donor: OrangTuaAsuh
    santri: tuple[OtaSantriLink, ...]
    pemasukan: tuple[Pemasukan, ...]
    total_donasi: Decimal
    total_pengeluaran: Decimal

    @property
    def santri_count(self) -> int:
        return len(self.santri)

    @property
    def saldo(self) -> Decimal:
        return self.total_donasi - self.total_pengeluaran


@dataclass(frozen=True)
class SantriOtaRow:
    """Baris halaman santri-OTA: santri aktif beserta donaturnya (jika ada)."""

    santri_id: int
    nis: str
    nama: str
    kelas_id: Optional[int]
    kelas_nama: Optional[str]
    link: Optional[OtaSantriLink] = None

    @property
    def connected(self) -> bool:
        return self.link is not None


@dataclass(frozen=True)
class Laporan:
    year: int
    month: Optional[int]
    ota_id: Optional[int]
    pemasukan: tuple[Pemasukan, ...]
    pengeluaran: tuple[Pengeluaran, ...]
    total_pemasukan: Decimal
    total_pengeluaran: Decimal
    all_time_pemasukan: Decimal
    all_time_pengeluaran: Decimal

    @property
    def saldo(self) -> Decimal:
        return self.total_pemasukan - self.total_pengeluaran

    @property
    def saldo_akhir(self) -> Decimal:
        return self.all_time_pemasukan - self.all_time_pengeluaran


@dataclass(frozen=True)
class LaporanPenyaluran:
    year: int
    month: Optional[int]
    rows: tuple[Penyaluran, ...]
    filtered_total: Decimal
    total_pemasukan: Decimal
    total_pengeluaran: Decimal
    total_penyaluran: Decimal
    penerima_aktif: int
    usage_percent: int

    @property
    def sisa_saldo(self) -> Decimal:
        return self.total_pemasukan - self.total_pengeluaran - self.total_penyaluran


@dataclass(frozen=True)
class OtaDashboard:
    active_donors: int
    linked_santri: int
    total_donasi: Decimal
    total_pengeluaran: Decimal
    donasi_bulan_ini: Decimal
    progress_percent: int
    low_balance: bool
    top_donors: tuple[DonorTotal, ...] = field(default_factory=tuple)
    recent_pemasukan: tuple[Pemasukan, ...] = field(default_factory=tuple)
    recent_pengeluaran: tuple[Pengeluaran, ...] = field(default_factory=tuple)

    @property
    def saldo(self) -> Decimal:
        return self.total_donasi - self.total_pengeluaran
