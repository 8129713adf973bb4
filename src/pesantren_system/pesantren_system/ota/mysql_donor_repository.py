from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import StatusPenerima
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from ..santri.model import STATUS_AKTIF
from .model import OrangTuaAsuh, OtaKategori, OtaSantriLink, PenerimaOta
from .repository import DonorRepository, KategoriRepository, LinkRepository, PenerimaRepository

_DONOR_SELECT = """
    SELECT o.ota_id, o.nama, o.email, o.no_hp, o.alamat, o.kategori_id, o.status, o.user_id,
           k.nama AS kategori_nama, u.email AS user_email,
           (SELECT COUNT(*) FROM ota_santri l WHERE l.ota_id = o.ota_id) AS jumlah_santri
    FROM orang_tua_asuh o
    LEFT JOIN ota_kategori k ON k.kategori_id = o.kategori_id
    LEFT JOIN user_profiles u ON u.user_id = o.user_id
"""

_DONOR_WRITABLE = ("nama", "email", "no_hp", "alamat", "kategori_id", "status")

_LINK_SELECT = """
    SELECT l.link_id, l.ota_id, l.santri_id, o.nama AS ota_nama,
           s.nama AS santri_nama, s.nis AS santri_nis, k.nama AS kelas_nama
    FROM ota_santri l
    JOIN orang_tua_asuh o ON o.ota_id = l.ota_id
    JOIN santri s ON s.santri_id = l.santri_id
    LEFT JOIN kelas k ON k.kelas_id = s.kelas_id
"""


def _row_to_donor(r: dict) -> OrangTuaAsuh:
    return OrangTuaAsuh(
        ota_id=int(r["ota_id"]),
        nama=r["nama"],
        email=r.get("email"),
        no_hp=r.get("no_hp"),
        alamat=r.get("alamat"),
        kategori_id=r.get("kategori_id"),
        status=bool(r.get("status")),
        user_id=r.get("user_id"),
        kategori_nama=r.get("kategori_nama"),
        user_email=r.get("user_email"),
        jumlah_santri=int(r.get("jumlah_santri") or 0),
    )


def _row_to_link(r: dict) -> OtaSantriLink:
    return OtaSantriLink(
        link_id=int(r["link_id"]),
        ota_id=int(r["ota_id"]),
        santri_id=int(r["santri_id"]),
        ota_nama=r.get("ota_nama"),
        santri_nama=r.get("santri_nama"),
        santri_nis=r.get("santri_nis"),
        kelas_nama=r.get("kelas_nama"),
    )


class MySQLDonorRepository(DonorRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select(self, where: str = "", params: tuple = ()) -> list[OrangTuaAsuh]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_DONOR_SELECT} {where} ORDER BY o.nama", params)
            return [_row_to_donor(r) for r in fetchall(cur)]

    def list(self, *, active_only: bool = False) -> Sequence[OrangTuaAsuh]:
        return self._select("WHERE o.status=1" if active_only else "")

    def get_by_id(self, ota_id: int) -> Optional[OrangTuaAsuh]:
        rows = self._select("WHERE o.ota_id=%s", (int(ota_id),))
        return rows[0] if rows else None

    def get_by_user_id(self, user_id: int) -> Optional[OrangTuaAsuh]:
        rows = self._select("WHERE o.user_id=%s", (int(user_id),))
        return rows[0] if rows else None

    def create(self, data: dict) -> int:
        cols = [c for c in _DONOR_WRITABLE if c in data]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO orang_tua_asuh({', '.join(cols)}) VALUES({placeholders(cols)})",
                tuple(data[c] for c in cols),
            )
            return int(cur.lastrowid)

    def update(self, ota_id: int, data: dict) -> bool:
        cols = [c for c in _DONOR_WRITABLE if c in data]
        if not cols:
            return False
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE orang_tua_asuh SET {', '.join(f'{c}=%s' for c in cols)} WHERE ota_id=%s",
                (*[data[c] for c in cols], int(ota_id)),
            )
            return cur.rowcount >= 0

    def delete(self, ota_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM orang_tua_asuh WHERE ota_id=%s", (int(ota_id),))
            return cur.rowcount > 0

    def set_user(self, ota_id: int, user_id: Optional[int]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE orang_tua_asuh SET user_id=%s WHERE ota_id=%s", (user_id, int(ota_id)))
            return cur.rowcount > 0

    def taken_user_ids(self) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT user_id FROM orang_tua_asuh WHERE user_id IS NOT NULL")
            return [int(r["user_id"]) for r in fetchall(cur)]


class MySQLKategoriRepository(KategoriRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[OtaKategori]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT k.kategori_id, k.nama, k.keterangan,
                       (SELECT COUNT(*) FROM orang_tua_asuh o WHERE o.kategori_id = k.kategori_id) AS jumlah_ota
                FROM ota_kategori k
                ORDER BY k.nama
                """
            )
            return [
                OtaKategori(
                    kategori_id=int(r["kategori_id"]),
                    nama=r["nama"],
                    keterangan=r.get("keterangan"),
                    jumlah_ota=int(r.get("jumlah_ota") or 0),
                )
                for r in fetchall(cur)
            ]

    def get_by_id(self, kategori_id: int) -> Optional[OtaKategori]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT kategori_id, nama, keterangan FROM ota_kategori WHERE kategori_id=%s", (int(kategori_id),))
            r = fetchone(cur)
            if not r:
                return None
            return OtaKategori(kategori_id=int(r["kategori_id"]), nama=r["nama"], keterangan=r.get("keterangan"))

    def create(self, *, nama: str, keterangan: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO ota_kategori(nama, keterangan) VALUES(%s,%s)", (nama, keterangan))
            return int(cur.lastrowid)

    def update(self, kategori_id: int, *, nama: str, keterangan: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE ota_kategori SET nama=%s, keterangan=%s WHERE kategori_id=%s",
                (nama, keterangan, int(kategori_id)),
            )
            return cur.rowcount >= 0

    def delete(self, kategori_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM ota_kategori WHERE kategori_id=%s", (int(kategori_id),))
            return cur.rowcount > 0


class MySQLLinkRepository(LinkRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list(self, *, ota_id: Optional[int] = None) -> Sequence[OtaSantriLink]:
        sql = _LINK_SELECT
        params: tuple = ()
        if ota_id is not None:
            sql += " WHERE l.ota_id=%s"
            params = (int(ota_id),)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " ORDER BY s.nama", params)
            return [_row_to_link(r) for r in fetchall(cur)]

    def get_by_id(self, link_id: int) -> Optional[OtaSantriLink]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_LINK_SELECT + " WHERE l.link_id=%s", (int(link_id),))
            r = fetchone(cur)
            return _row_to_link(r) if r else None

    def create(self, *, ota_id: int, santri_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO ota_santri(ota_id, santri_id) VALUES(%s,%s)", (int(ota_id), int(santri_id)))
            return int(cur.lastrowid)

    def delete(self, link_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM ota_santri WHERE link_id=%s", (int(link_id),))
            return cur.rowcount > 0

    def relink(self, *, santri_id: int, ota_id: Optional[int]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM ota_santri WHERE santri_id=%s", (int(santri_id),))
            if ota_id is not None:
                cur.execute("INSERT INTO ota_santri(ota_id, santri_id) VALUES(%s,%s)", (int(ota_id), int(santri_id)))


class MySQLPenerimaRepository(PenerimaRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list(self, *, status: Optional[StatusPenerima] = None) -> Sequence[PenerimaOta]:
        sql = """
            SELECT p.penerima_id, p.santri_id, p.status, p.tanggal_mulai, p.keterangan,
                   s.nama AS santri_nama, s.nis AS santri_nis, k.nama AS kelas_nama
            FROM santri_penerima_ota p
            JOIN santri s ON s.santri_id = p.santri_id
            LEFT JOIN kelas k ON k.kelas_id = s.kelas_id
            WHERE s.status=%s
        """
        params: list[object] = [STATUS_AKTIF]
        if status is not None:
            sql += " AND p.status=%s"
            params.append(status.value)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " ORDER BY s.nama", tuple(params))
            return [
                PenerimaOta(
                    penerima_id=int(r["penerima_id"]),
                    santri_id=int(r["santri_id"]),
                    status=StatusPenerima(r["status"]),
                    tanggal_mulai=r.get("tanggal_mulai"),
                    keterangan=r.get("keterangan"),
                    santri_nama=r.get("santri_nama"),
                    santri_nis=r.get("santri_nis"),
                    kelas_nama=r.get("kelas_nama"),
                )
                for r in fetchall(cur)
            ]

    def enroll(self, *, santri_id: int, tanggal_mulai: date, keterangan: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO santri_penerima_ota(santri_id, status, tanggal_mulai, keterangan)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE penerima_id=LAST_INSERT_ID(penerima_id), status=VALUES(status),
                    tanggal_mulai=VALUES(tanggal_mulai), keterangan=VALUES(keterangan)
                """,
                (int(santri_id), StatusPenerima.AKTIF.value, tanggal_mulai, keterangan),
            )
            return int(cur.lastrowid)

    def set_status(self, penerima_id: int, status: StatusPenerima) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE santri_penerima_ota SET status=%s WHERE penerima_id=%s", (status.value, int(penerima_id)))
            return cur.rowcount >= 0

    def delete(self, penerima_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM santri_penerima_ota WHERE penerima_id=%s", (int(penerima_id),))
            return cur.rowcount > 0
