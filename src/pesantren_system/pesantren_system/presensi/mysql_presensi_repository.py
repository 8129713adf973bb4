from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import StatusPresensi
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, placeholders
from .model import PresensiRecord
from .repository import PresensiRepository


class MySQLPresensiRepository(PresensiRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_date(self, *, tanggal: date, santri_ids: Sequence[int]) -> Sequence[PresensiRecord]:
        ids = [int(i) for i in santri_ids]
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT presensi_id, santri_id, tanggal, status, keterangan
                FROM presensi
                WHERE tanggal=%s AND santri_id IN ({placeholders(ids)})
                """,
                (tanggal, *ids),
            )
            return [
                PresensiRecord(
                    presensi_id=int(r["presensi_id"]),
                    santri_id=int(r["santri_id"]),
                    tanggal=r["tanggal"],
                    status=StatusPresensi(r["status"]),
                    keterangan=r.get("keterangan"),
                )
                for r in fetchall(cur)
            ]

    def upsert_many(self, *, tanggal: date, entries: Sequence[PresensiRecord], created_by: Optional[int]) -> int:
        if not entries:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO presensi(santri_id, tanggal, status, keterangan, created_by)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE status=VALUES(status), keterangan=VALUES(keterangan),
                                        created_by=VALUES(created_by)
                """,
                [(e.santri_id, tanggal, e.status.value, e.keterangan, created_by) for e in entries],
            )
            return len(entries)

    def list_range(
        self, *, start: date, end: date, kelas_id: Optional[int] = None, santri_ids: Optional[Sequence[int]] = None
    ) -> Sequence[dict]:
        clauses = ["p.tanggal BETWEEN %s AND %s"]
        params: list[object] = [start, end]
        if kelas_id is not None:
            clauses.append("s.kelas_id=%s")
            params.append(int(kelas_id))
        if santri_ids is not None:
            ids = [int(i) for i in santri_ids]
            if not ids:
                return []
            clauses.append(f"p.santri_id IN ({placeholders(ids)})")
            params.extend(ids)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT p.santri_id, s.nis, s.nama, p.tanggal, p.status, p.keterangan
                FROM presensi p
                JOIN santri s ON s.santri_id = p.santri_id
                WHERE {" AND ".join(clauses)}
                ORDER BY p.tanggal, s.nama
                """,
                tuple(params),
            )
            return fetchall(cur)
