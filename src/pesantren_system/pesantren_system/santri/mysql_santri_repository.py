from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from .model import STATUS_AKTIF, Kelas, Santri
from .repository import KelasRepository, SantriRepository

_SANTRI_SELECT = """
    SELECT s.santri_id, s.nis, s.nama, s.jenis_kelamin, s.kelas_id, s.halaqoh_id, s.wali_id, s.status,
           k.nama AS kelas_nama, h.nama AS halaqoh_nama, w.nama AS wali_nama
    FROM santri s
    LEFT JOIN kelas k ON k.kelas_id = s.kelas_id
    LEFT JOIN halaqoh h ON h.halaqoh_id = s.halaqoh_id
    LEFT JOIN user_profiles w ON w.user_id = s.wali_id
"""

_WRITABLE = ("nis", "nama", "jenis_kelamin", "kelas_id", "halaqoh_id", "status")


def row_to_santri(r: dict) -> Santri:
    return Santri(
        santri_id=int(r["santri_id"]),
        nis=r["nis"],
        nama=r["nama"],
        jenis_kelamin=r.get("jenis_kelamin"),
        kelas_id=r.get("kelas_id"),
        halaqoh_id=r.get("halaqoh_id"),
        wali_id=r.get("wali_id"),
        status=r.get("status") or STATUS_AKTIF,
        kelas_nama=r.get("kelas_nama"),
        halaqoh_nama=r.get("halaqoh_nama"),
        wali_nama=r.get("wali_nama"),
    )


class MySQLSantriRepository(SantriRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, santri_id: int) -> Optional[Santri]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SANTRI_SELECT + " WHERE s.santri_id=%s", (int(santri_id),))
            r = fetchone(cur)
            return row_to_santri(r) if r else None

    def get_by_nis(self, nis: str) -> Optional[Santri]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SANTRI_SELECT + " WHERE s.nis=%s", (nis,))
            r = fetchone(cur)
            return row_to_santri(r) if r else None

    def list(
        self,
        *,
        kelas_id: Optional[int] = None,
        halaqoh_id: Optional[int] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        wali_id: Optional[int] = None,
    ) -> Sequence[Santri]:
        clauses = ["1=1"]
        params: list[object] = []
        if kelas_id is not None:
            clauses.append("s.kelas_id=%s")
            params.append(int(kelas_id))
        if halaqoh_id is not None:
            clauses.append("s.halaqoh_id=%s")
            params.append(int(halaqoh_id))
        if status:
            clauses.append("s.status=%s")
            params.append(status)
        if wali_id is not None:
            clauses.append("s.wali_id=%s")
            params.append(int(wali_id))
        if search:
            clauses.append("(s.nama LIKE %s OR s.nis LIKE %s)")
            params.extend([f"%{search}%", f"%{search}%"])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SANTRI_SELECT + f" WHERE {' AND '.join(clauses)} ORDER BY s.nama", tuple(params))
            return [row_to_santri(r) for r in fetchall(cur)]

    def search_by_name(self, query: str, *, exclude_ids: Iterable[int] = (), limit: int = 5) -> Sequence[Santri]:
        exclude = [int(i) for i in exclude_ids]
        sql = _SANTRI_SELECT + " WHERE s.status=%s AND LOWER(s.nama) LIKE %s"
        params: list[object] = [STATUS_AKTIF, f"%{query.strip().lower()}%"]
        if exclude:
            sql += f" AND s.santri_id NOT IN ({placeholders(exclude)})"
            params.extend(exclude)
        sql += " ORDER BY s.nama LIMIT %s"
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [row_to_santri(r) for r in fetchall(cur)]

    def create(self, data: dict) -> int:
        cols = [c for c in _WRITABLE if c in data]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO santri({', '.join(cols)}) VALUES({placeholders(cols)})",
                tuple(data[c] for c in cols),
            )
            return int(cur.lastrowid)

    def update(self, santri_id: int, data: dict) -> bool:
        cols = [c for c in _WRITABLE if c in data]
        if not cols:
            return False
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE santri SET {', '.join(f'{c}=%s' for c in cols)} WHERE santri_id=%s",
                (*[data[c] for c in cols], int(santri_id)),
            )
            return cur.rowcount >= 0

    def delete(self, santri_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM santri WHERE santri_id=%s", (int(santri_id),))
            return cur.rowcount > 0

    def set_halaqoh(self, santri_id: int, halaqoh_id: Optional[int]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE santri SET halaqoh_id=%s WHERE santri_id=%s", (halaqoh_id, int(santri_id)))
            return cur.rowcount > 0

    def replace_wali_links(self, wali_id: int, santri_ids: Sequence[int]) -> None:
        ids = [int(i) for i in santri_ids]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE santri SET wali_id=NULL WHERE wali_id=%s", (int(wali_id),))
            if ids:
                cur.execute(
                    f"UPDATE santri SET wali_id=%s WHERE santri_id IN ({placeholders(ids)})",
                    (int(wali_id), *ids),
                )


class MySQLKelasRepository(KelasRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select(self, where: str = "", params: tuple = ()) -> list[Kelas]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT k.kelas_id, k.nama, k.wali_kelas_id, g.nama AS wali_kelas_nama,
                       (SELECT COUNT(*) FROM santri s WHERE s.kelas_id = k.kelas_id AND s.status=%s) AS jumlah_santri
                FROM kelas k
                LEFT JOIN guru g ON g.guru_id = k.wali_kelas_id
                {where}
                ORDER BY k.nama
                """,
                (STATUS_AKTIF, *params),
            )
            return [
                Kelas(
                    kelas_id=int(r["kelas_id"]),
                    nama=r["nama"],
                    wali_kelas_id=r.get("wali_kelas_id"),
                    wali_kelas_nama=r.get("wali_kelas_nama"),
                    jumlah_santri=int(r.get("jumlah_santri") or 0),
                )
                for r in fetchall(cur)
            ]

    def list_all(self) -> Sequence[Kelas]:
        return self._select()

    def get_by_id(self, kelas_id: int) -> Optional[Kelas]:
        rows = self._select("WHERE k.kelas_id=%s", (int(kelas_id),))
        return rows[0] if rows else None

    def create(self, *, nama: str, wali_kelas_id: Optional[int]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO kelas(nama, wali_kelas_id) VALUES(%s,%s)", (nama, wali_kelas_id))
            return int(cur.lastrowid)

    def update(self, kelas_id: int, *, nama: str, wali_kelas_id: Optional[int]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE kelas SET nama=%s, wali_kelas_id=%s WHERE kelas_id=%s",
                (nama, wali_kelas_id, int(kelas_id)),
            )
            return cur.rowcount >= 0

    def delete(self, kelas_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM kelas WHERE kelas_id=%s", (int(kelas_id),))
            return cur.rowcount > 0
