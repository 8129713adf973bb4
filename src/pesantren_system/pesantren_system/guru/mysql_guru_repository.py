from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Guru
from .repository import GuruRepository

_COLUMNS = "guru_id, nip, nama, email, no_hp, jabatan, status"


def _row_to_guru(r: dict) -> Guru:
    return Guru(
        guru_id=int(r["guru_id"]),
        nama=r["nama"],
        nip=r.get("nip"),
        email=r.get("email"),
        no_hp=r.get("no_hp"),
        jabatan=r.get("jabatan"),
        status=r.get("status") or "Aktif",
    )


class MySQLGuruRepository(GuruRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Guru]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM guru ORDER BY nama")
            return [_row_to_guru(r) for r in fetchall(cur)]

    def get_by_id(self, guru_id: int) -> Optional[Guru]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM guru WHERE guru_id=%s", (int(guru_id),))
            r = fetchone(cur)
            return _row_to_guru(r) if r else None

    def get_by_email(self, email: str) -> Optional[Guru]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM guru WHERE LOWER(email)=%s LIMIT 1", (email.strip().lower(),))
            r = fetchone(cur)
            return _row_to_guru(r) if r else None

    def create(self, data: dict) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO guru(nip, nama, email, no_hp, jabatan, status) VALUES(%s,%s,%s,%s,%s,%s)",
                (data.get("nip"), data["nama"], data.get("email"), data.get("no_hp"), data.get("jabatan"), data["status"]),
            )
            return int(cur.lastrowid)

    def update(self, guru_id: int, data: dict) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE guru SET nip=%s, nama=%s, email=%s, no_hp=%s, jabatan=%s, status=%s
                WHERE guru_id=%s
                """,
                (
                    data.get("nip"),
                    data["nama"],
                    data.get("email"),
                    data.get("no_hp"),
                    data.get("jabatan"),
                    data["status"],
                    int(guru_id),
                ),
            )
            return cur.rowcount >= 0

    def delete(self, guru_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM guru WHERE guru_id=%s", (int(guru_id),))
            return cur.rowcount > 0
