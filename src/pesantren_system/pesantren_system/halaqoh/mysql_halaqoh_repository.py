from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Halaqoh
from .repository import HalaqohRepository


class MySQLHalaqohRepository(HalaqohRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select(self, where: str = "", params: tuple = ()) -> list[Halaqoh]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT h.halaqoh_id, h.nama, h.musyrif_id, h.waktu, h.keterangan,
                       g.nama AS musyrif_nama,
                       (SELECT COUNT(*) FROM santri s WHERE s.halaqoh_id = h.halaqoh_id AND s.status='Aktif') AS jumlah_santri
                FROM halaqoh h
                LEFT JOIN guru g ON g.guru_id = h.musyrif_id
                {where}
                ORDER BY h.nama
                """,
                params,
            )
            return [
                Halaqoh(
                    halaqoh_id=int(r["halaqoh_id"]),
                    nama=r["nama"],
                    musyrif_id=r.get("musyrif_id"),
                    waktu=r.get("waktu"),
                    keterangan=r.get("keterangan"),
                    musyrif_nama=r.get("musyrif_nama"),
                    jumlah_santri=int(r.get("jumlah_santri") or 0),
                )
                for r in fetchall(cur)
            ]

    def list_all(self) -> Sequence[Halaqoh]:
        return self._select()

    def get_by_id(self, halaqoh_id: int) -> Optional[Halaqoh]:
        rows = self._select("WHERE h.halaqoh_id=%s", (int(halaqoh_id),))
        return rows[0] if rows else None

    def create(self, *, nama: str, musyrif_id: Optional[int], waktu: Optional[str], keterangan: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO halaqoh(nama, musyrif_id, waktu, keterangan) VALUES(%s,%s,%s,%s)",
                (nama, musyrif_id, waktu, keterangan),
            )
            return int(cur.lastrowid)

    def update(
        self, halaqoh_id: int, *, nama: str, musyrif_id: Optional[int], waktu: Optional[str], keterangan: Optional[str]
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE halaqoh SET nama=%s, musyrif_id=%s, waktu=%s, keterangan=%s WHERE halaqoh_id=%s",
                (nama, musyrif_id, waktu, keterangan, int(halaqoh_id)),
            )
            return cur.rowcount >= 0

    def delete(self, halaqoh_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM halaqoh WHERE halaqoh_id=%s", (int(halaqoh_id),))
            return cur.rowcount > 0
