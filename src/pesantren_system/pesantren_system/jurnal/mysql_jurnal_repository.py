from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import StatusJurnal, StatusKehadiranMapel
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from .model import JurnalDetail, JurnalHeader
from .repository import JurnalRepository

_HEADER_COLUMNS = "presensi_mapel_id, jadwal_id, kelas_id, guru_id, mapel_id, tanggal, materi, catatan, status, created_by"


def _row_to_header(r: dict) -> JurnalHeader:
    return JurnalHeader(
        jurnal_id=int(r["presensi_mapel_id"]),
        jadwal_id=int(r["jadwal_id"]),
        kelas_id=int(r["kelas_id"]),
        guru_id=int(r["guru_id"]),
        mapel_id=int(r["mapel_id"]),
        tanggal=r["tanggal"],
        materi=r.get("materi"),
        catatan=r.get("catatan"),
        status=StatusJurnal(r["status"]),
        created_by=r.get("created_by"),
    )


class MySQLJurnalRepository(JurnalRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def headers_for_date(self, *, tanggal: date, jadwal_ids: Sequence[int]) -> Sequence[JurnalHeader]:
        ids = [int(i) for i in jadwal_ids]
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_HEADER_COLUMNS} FROM presensi_mapel WHERE tanggal=%s AND jadwal_id IN ({placeholders(ids)})",
                (tanggal, *ids),
            )
            return [_row_to_header(r) for r in fetchall(cur)]

    def get_header(self, *, jadwal_id: int, tanggal: date) -> Optional[JurnalHeader]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_HEADER_COLUMNS} FROM presensi_mapel WHERE jadwal_id=%s AND tanggal=%s",
                (int(jadwal_id), tanggal),
            )
            r = fetchone(cur)
            return _row_to_header(r) if r else None

    def list_details(self, jurnal_id: int) -> Sequence[JurnalDetail]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT santri_id, status, keterangan FROM presensi_mapel_detil WHERE presensi_mapel_id=%s",
                (int(jurnal_id),),
            )
            return [
                JurnalDetail(
                    santri_id=int(r["santri_id"]),
                    status=StatusKehadiranMapel(r["status"]),
                    keterangan=r.get("keterangan"),
                )
                for r in fetchall(cur)
            ]

    def save(self, header: dict, details: Sequence[JurnalDetail]) -> int:
        # header upsert, detail delete and detail insert share one transaction
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO presensi_mapel(jadwal_id, kelas_id, guru_id, mapel_id, tanggal, materi, catatan, status, created_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE presensi_mapel_id=LAST_INSERT_ID(presensi_mapel_id),
                                        materi=VALUES(materi), catatan=VALUES(catatan), status=VALUES(status),
                                        guru_id=VALUES(guru_id), created_by=VALUES(created_by)
                """,
                (
                    header["jadwal_id"],
                    header["kelas_id"],
                    header["guru_id"],
                    header["mapel_id"],
                    header["tanggal"],
                    header.get("materi"),
                    header.get("catatan"),
                    header["status"].value,
                    header.get("created_by"),
                ),
            )
            jurnal_id = int(cur.lastrowid or 0)
            if not jurnal_id:
                cur.execute(
                    "SELECT presensi_mapel_id FROM presensi_mapel WHERE jadwal_id=%s AND tanggal=%s",
                    (header["jadwal_id"], header["tanggal"]),
                )
                jurnal_id = int(fetchone(cur)["presensi_mapel_id"])

            cur.execute("DELETE FROM presensi_mapel_detil WHERE presensi_mapel_id=%s", (jurnal_id,))
            if details:
                cur.executemany(
                    """
                    INSERT INTO presensi_mapel_detil(presensi_mapel_id, santri_id, status, keterangan)
                    VALUES(%s,%s,%s,%s)
                    """,
                    [(jurnal_id, d.santri_id, d.status.value, d.keterangan) for d in details],
                )
            return jurnal_id
