from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import StatusPesan
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from .model import Pengumuman, PesanWali
from .repository import PengumumanRepository, PesanRepository

_PESAN_SELECT = """
    SELECT p.pesan_id, p.wali_id, p.santri_id, p.judul, p.kategori, p.isi, p.status, p.balasan,
           p.dibalas_oleh, p.created_at, w.nama AS wali_nama, s.nama AS santri_nama
    FROM pesan_wali p
    JOIN user_profiles w ON w.user_id = p.wali_id
    LEFT JOIN santri s ON s.santri_id = p.santri_id
"""

_PENGUMUMAN_COLUMNS = (
    "judul", "isi", "kategori", "prioritas", "mulai_tampil", "selesai_tampil", "is_active", "created_by",
)


def _row_to_pesan(r: dict) -> PesanWali:
    return PesanWali(
        pesan_id=int(r["pesan_id"]),
        wali_id=int(r["wali_id"]),
        santri_id=r.get("santri_id"),
        judul=r["judul"],
        kategori=r.get("kategori") or "Umum",
        isi=r["isi"],
        status=StatusPesan(r["status"]),
        balasan=r.get("balasan"),
        dibalas_oleh=r.get("dibalas_oleh"),
        created_at=r.get("created_at"),
        wali_nama=r.get("wali_nama"),
        santri_nama=r.get("santri_nama"),
    )


def _row_to_pengumuman(r: dict) -> Pengumuman:
    return Pengumuman(
        pengumuman_id=int(r["pengumuman_id"]),
        judul=r["judul"],
        isi=r["isi"],
        kategori=r.get("kategori") or "Umum",
        prioritas=int(r.get("prioritas") or 0),
        mulai_tampil=r.get("mulai_tampil"),
        selesai_tampil=r.get("selesai_tampil"),
        is_active=bool(r.get("is_active")),
        is_archived=bool(r.get("is_archived")),
        created_by=r.get("created_by"),
        created_at=r.get("created_at"),
    )


class MySQLPesanRepository(PesanRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list(self, *, wali_id: Optional[int] = None, status: Optional[StatusPesan] = None) -> Sequence[PesanWali]:
        clauses = ["1=1"]
        params: list[object] = []
        if wali_id is not None:
            clauses.append("p.wali_id=%s")
            params.append(int(wali_id))
        if status is not None:
            clauses.append("p.status=%s")
            params.append(status.value)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _PESAN_SELECT + f" WHERE {' AND '.join(clauses)} ORDER BY p.created_at DESC, p.pesan_id DESC",
                tuple(params),
            )
            return [_row_to_pesan(r) for r in fetchall(cur)]

    def get_by_id(self, pesan_id: int) -> Optional[PesanWali]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_PESAN_SELECT + " WHERE p.pesan_id=%s", (int(pesan_id),))
            r = fetchone(cur)
            return _row_to_pesan(r) if r else None

    def create(self, data: dict) -> int:
        cols = ["wali_id", "santri_id", "judul", "kategori", "isi", "status"]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO pesan_wali({', '.join(cols)}) VALUES({placeholders(cols)})",
                tuple(data.get(c) for c in cols),
            )
            return int(cur.lastrowid)

    def set_status(self, pesan_id: int, status: StatusPesan) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE pesan_wali SET status=%s, updated_at=NOW() WHERE pesan_id=%s",
                (status.value, int(pesan_id)),
            )
            return cur.rowcount > 0

    def reply(self, pesan_id: int, *, balasan: str, dibalas_oleh: Optional[int]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE pesan_wali SET status=%s, balasan=%s, dibalas_oleh=%s, updated_at=NOW() WHERE pesan_id=%s",
                (StatusPesan.DIBALAS.value, balasan, dibalas_oleh, int(pesan_id)),
            )
            return cur.rowcount > 0


class MySQLPengumumanRepository(PengumumanRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list(self, *, archived: Optional[bool] = None, kategori: Optional[str] = None) -> Sequence[Pengumuman]:
        clauses = ["1=1"]
        params: list[object] = []
        if archived is not None:
            clauses.append("is_archived=%s")
            params.append(1 if archived else 0)
        if kategori:
            clauses.append("kategori=%s")
            params.append(kategori)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT * FROM pengumuman WHERE {' AND '.join(clauses)} ORDER BY prioritas DESC, created_at DESC",
                tuple(params),
            )
            return [_row_to_pengumuman(r) for r in fetchall(cur)]

    def get_by_id(self, pengumuman_id: int) -> Optional[Pengumuman]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM pengumuman WHERE pengumuman_id=%s", (int(pengumuman_id),))
            r = fetchone(cur)
            return _row_to_pengumuman(r) if r else None

    def create(self, data: dict) -> int:
        cols = [c for c in _PENGUMUMAN_COLUMNS if c in data]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO pengumuman({', '.join(cols)}) VALUES({placeholders(cols)})",
                tuple(data[c] for c in cols),
            )
            return int(cur.lastrowid)

    def update(self, pengumuman_id: int, data: dict) -> bool:
        cols = [c for c in _PENGUMUMAN_COLUMNS if c in data and c != "created_by"]
        if not cols:
            return False
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE pengumuman SET {', '.join(f'{c}=%s' for c in cols)} WHERE pengumuman_id=%s",
                (*[data[c] for c in cols], int(pengumuman_id)),
            )
            return cur.rowcount >= 0

    def set_archived(self, pengumuman_id: int, archived: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE pengumuman SET is_archived=%s WHERE pengumuman_id=%s",
                (1 if archived else 0, int(pengumuman_id)),
            )
            return cur.rowcount >= 0

    def delete(self, pengumuman_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM pengumuman WHERE pengumuman_id=%s", (int(pengumuman_id),))
            return cur.rowcount > 0
