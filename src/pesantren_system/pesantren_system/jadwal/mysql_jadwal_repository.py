from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Hari
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, normalize_mysql_time
from .model import Jadwal, Mapel
from .repository import JadwalRepository, MapelRepository

_HARI_ORDER = "FIELD(j.hari, " + ", ".join(f"'{h.value}'" for h in Hari) + ")"

_WRITABLE = ("kelas_id", "mapel_id", "guru_id", "hari", "jam_ke", "jam_mulai", "jam_selesai", "tahun_ajaran")


def row_to_jadwal(r: dict) -> Jadwal:
    return Jadwal(
        jadwal_id=int(r["jadwal_id"]),
        kelas_id=int(r["kelas_id"]),
        mapel_id=int(r["mapel_id"]),
        guru_id=int(r["guru_id"]),
        hari=Hari(r["hari"]),
        jam_ke=int(r["jam_ke"]),
        jam_mulai=normalize_mysql_time(r["jam_mulai"]),
        jam_selesai=normalize_mysql_time(r["jam_selesai"]),
        tahun_ajaran=r["tahun_ajaran"],
        kelas_nama=r.get("kelas_nama"),
        mapel_nama=r.get("mapel_nama"),
        guru_nama=r.get("guru_nama"),
    )


def _values(data: dict) -> tuple:
    out = []
    for c in _WRITABLE:
        v = data[c]
        out.append(v.value if isinstance(v, Hari) else v)
    return tuple(out)


class MySQLJadwalRepository(JadwalRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select(self, where: str, params: Sequence[object]) -> list[Jadwal]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT j.jadwal_id, j.kelas_id, j.mapel_id, j.guru_id, j.hari, j.jam_ke,
                       j.jam_mulai, j.jam_selesai, j.tahun_ajaran,
                       k.nama AS kelas_nama, m.nama AS mapel_nama, g.nama AS guru_nama
                FROM jadwal_pelajaran j
                JOIN kelas k ON k.kelas_id = j.kelas_id
                JOIN mapel m ON m.mapel_id = j.mapel_id
                JOIN guru g ON g.guru_id = j.guru_id
                WHERE {where}
                ORDER BY {_HARI_ORDER}, j.jam_ke, k.nama
                """,
                tuple(params),
            )
            return [row_to_jadwal(r) for r in fetchall(cur)]

    def get_by_id(self, jadwal_id: int) -> Optional[Jadwal]:
        rows = self._select("j.jadwal_id=%s", [int(jadwal_id)])
        return rows[0] if rows else None

    def list(
        self,
        *,
        kelas_id: Optional[int] = None,
        guru_id: Optional[int] = None,
        hari: Optional[Hari] = None,
        tahun_ajaran: Optional[str] = None,
    ) -> Sequence[Jadwal]:
        clauses = ["1=1"]
        params: list[object] = []
        if kelas_id is not None:
            clauses.append("j.kelas_id=%s")
            params.append(int(kelas_id))
        if guru_id is not None:
            clauses.append("j.guru_id=%s")
            params.append(int(guru_id))
        if hari is not None:
            clauses.append("j.hari=%s")
            params.append(hari.value)
        if tahun_ajaran:
            clauses.append("j.tahun_ajaran=%s")
            params.append(tahun_ajaran)
        return self._select(" AND ".join(clauses), params)

    def create(self, data: dict) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO jadwal_pelajaran({', '.join(_WRITABLE)}) VALUES({', '.join(['%s'] * len(_WRITABLE))})",
                _values(data),
            )
            return int(cur.lastrowid)

    def update(self, jadwal_id: int, data: dict) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE jadwal_pelajaran SET {', '.join(f'{c}=%s' for c in _WRITABLE)} WHERE jadwal_id=%s",
                (*_values(data), int(jadwal_id)),
            )
            return cur.rowcount >= 0

    def delete(self, jadwal_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM jadwal_pelajaran WHERE jadwal_id=%s", (int(jadwal_id),))
            return cur.rowcount > 0


class MySQLMapelRepository(MapelRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Mapel]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT mapel_id, kode, nama FROM mapel ORDER BY nama")
            return [Mapel(mapel_id=int(r["mapel_id"]), nama=r["nama"], kode=r.get("kode")) for r in fetchall(cur)]

    def create(self, *, nama: str, kode: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO mapel(kode, nama) VALUES(%s,%s)", (kode, nama))
            return int(cur.lastrowid)

    def update(self, mapel_id: int, *, nama: str, kode: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE mapel SET kode=%s, nama=%s WHERE mapel_id=%s", (kode, nama, int(mapel_id)))
            return cur.rowcount >= 0

    def delete(self, mapel_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM mapel WHERE mapel_id=%s", (int(mapel_id),))
            return cur.rowcount > 0
