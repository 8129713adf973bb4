from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Peran pengguna untuk hak akses halaman."""

    ADMIN = "admin"
    GURU = "guru"
    BENDAHARA = "bendahara"
    MUSYRIF = "musyrif"
    WALI = "wali"
    OTA = "ota"
    PENGURUS = "pengurus"


class StatusPresensi(str, Enum):
    """Status presensi harian santri."""

    HADIR = "hadir"
    SAKIT = "sakit"
    IZIN = "izin"
    ALPHA = "alpha"


class StatusKehadiranMapel(str, Enum):
    """Status kehadiran santri pada satu jam pelajaran (detail jurnal)."""

    HADIR = "Hadir"
    SAKIT = "Sakit"
    IZIN = "Izin"
    ALFA = "Alfa"
    TERLAMBAT = "Terlambat"


class StatusJurnal(str, Enum):
    TERLAKSANA = "Terlaksana"
    KOSONG = "Kosong"
    LIBUR = "Libur"


class Hari(str, Enum):
    """Hari sekolah; urutan mengikuti date.weekday() (Senin = 0)."""

    SENIN = "Senin"
    SELASA = "Selasa"
    RABU = "Rabu"
    KAMIS = "Kamis"
    JUMAT = "Jumat"
    SABTU = "Sabtu"
    AHAD = "Ahad"

    @classmethod
    def ordered(cls) -> list["Hari"]:
        return list(cls)

    @classmethod
    def from_weekday(cls, weekday: int) -> "Hari":
        return list(cls)[weekday]


class JenisAgenda(str, Enum):
    LIBUR = "Libur"
    UJIAN = "Ujian"
    KEGIATAN = "Kegiatan"
    RAPAT = "Rapat"
    LAINNYA = "Lainnya"


class AuditAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    INPUT = "INPUT"


class StatusPesan(str, Enum):
    """Alur status pesan wali ke pesantren."""

    TERKIRIM = "Terkirim"
    DIBACA = "Dibaca"
    DIPROSES = "Diproses"
    DIBALAS = "Dibalas"


class StatusPenerima(str, Enum):
    AKTIF = "aktif"
    NONAKTIF = "nonaktif"


class MetodePembayaran(str, Enum):
    TRANSFER = "Transfer"
    TUNAI = "Tunai"


class RiskLevel(str, Enum):
    ALL = "ALL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
