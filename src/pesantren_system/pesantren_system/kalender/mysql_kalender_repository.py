from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import JenisAgenda
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AgendaKalender
from .repository import KalenderRepository

_COLUMNS = "agenda_id, judul, deskripsi, tanggal_mulai, tanggal_selesai, jenis, created_by"


def _row_to_agenda(r: dict) -> AgendaKalender:
    return AgendaKalender(
        agenda_id=int(r["agenda_id"]),
        judul=r["judul"],
        deskripsi=r.get("deskripsi"),
        tanggal_mulai=r["tanggal_mulai"],
        tanggal_selesai=r["tanggal_selesai"],
        jenis=JenisAgenda(r["jenis"]),
        created_by=r.get("created_by"),
    )


class MySQLKalenderRepository(KalenderRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_overlapping(self, *, start: date, end: date) -> Sequence[AgendaKalender]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM kalender_akademik
                WHERE tanggal_mulai <= %s AND tanggal_selesai >= %s
                ORDER BY tanggal_mulai, agenda_id
                """,
                (end, start),
            )
            return [_row_to_agenda(r) for r in fetchall(cur)]

    def get_by_id(self, agenda_id: int) -> Optional[AgendaKalender]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM kalender_akademik WHERE agenda_id=%s", (int(agenda_id),))
            r = fetchone(cur)
            return _row_to_agenda(r) if r else None

    def create(self, data: dict) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO kalender_akademik(judul, deskripsi, tanggal_mulai, tanggal_selesai, jenis, created_by)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    data["judul"],
                    data.get("deskripsi"),
                    data["tanggal_mulai"],
                    data["tanggal_selesai"],
                    data["jenis"].value,
                    data.get("created_by"),
                ),
            )
            return int(cur.lastrowid)

    def update(self, agenda_id: int, data: dict) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE kalender_akademik
                SET judul=%s, deskripsi=%s, tanggal_mulai=%s, tanggal_selesai=%s, jenis=%s
                WHERE agenda_id=%s
                """,
                (
                    data["judul"],
                    data.get("deskripsi"),
                    data["tanggal_mulai"],
                    data["tanggal_selesai"],
                    data["jenis"].value,
                    int(agenda_id),
                ),
            )
            return cur.rowcount >= 0

    def delete(self, agenda_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM kalender_akademik WHERE agenda_id=%s", (int(agenda_id),))
            return cur.rowcount > 0
