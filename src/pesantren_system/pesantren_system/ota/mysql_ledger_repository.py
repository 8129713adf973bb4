"""Tabel transaksi OTA: pemasukan, pengeluaran dan penyaluran.

Ketiganya punya bentuk CRUD yang sama, jadi query dibangun dari satu kelas
dasar dengan nama tabel, kolom dan mapper baris masing-masing.
"""

from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders, to_decimal
from .model import Pemasukan, Pengeluaran, Penyaluran
from .repository import PemasukanRepository, PengeluaranRepository, PenyaluranRepository


class _MySQLLedgerTable:
    table: str = ""
    pk: str = ""
    writable: tuple[str, ...] = ()
    select: str = ""
    alias: str = ""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _map(self, r: dict):
        raise NotImplementedError

    def _list(self, where: str = "", params: tuple = ()) -> list:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{self.select} {where} ORDER BY {self.alias}.tanggal DESC, {self.alias}.{self.pk} DESC", params)
            return [self._map(r) for r in fetchall(cur)]

    def get_by_id(self, row_id: int):
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{self.select} WHERE {self.alias}.{self.pk}=%s", (int(row_id),))
            r = fetchone(cur)
            return self._map(r) if r else None

    def create(self, data: dict) -> int:
        cols = [c for c in self.writable if c in data]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO {self.table}({', '.join(cols)}) VALUES({placeholders(cols)})",
                tuple(data[c] for c in cols),
            )
            return int(cur.lastrowid)

    def update(self, row_id: int, data: dict) -> bool:
        cols = [c for c in self.writable if c in data]
        if not cols:
            return False
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE {self.table} SET {', '.join(f'{c}=%s' for c in cols)} WHERE {self.pk}=%s",
                (*[data[c] for c in cols], int(row_id)),
            )
            return cur.rowcount >= 0

    def delete(self, row_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"DELETE FROM {self.table} WHERE {self.pk}=%s", (int(row_id),))
            return cur.rowcount > 0


def _ota_filter(alias: str, ota_id: Optional[int]) -> tuple[str, tuple]:
    if ota_id is None:
        return "", ()
    return f"WHERE {alias}.ota_id=%s", (int(ota_id),)


class MySQLPemasukanRepository(_MySQLLedgerTable, PemasukanRepository):
    table = "ota_pemasukan"
    pk = "pemasukan_id"
    alias = "p"
    writable = ("ota_id", "tanggal", "jumlah", "metode", "keterangan")
    select = """
        SELECT p.pemasukan_id, p.ota_id, p.tanggal, p.jumlah, p.metode, p.keterangan,
               o.nama AS ota_nama, o.no_hp AS ota_no_hp
        FROM ota_pemasukan p
        JOIN orang_tua_asuh o ON o.ota_id = p.ota_id
    """

    def _map(self, r: dict) -> Pemasukan:
        return Pemasukan(
            pemasukan_id=int(r["pemasukan_id"]),
            ota_id=int(r["ota_id"]),
            tanggal=r["tanggal"],
            jumlah=to_decimal(r["jumlah"]),
            metode=r.get("metode"),
            keterangan=r.get("keterangan"),
            ota_nama=r.get("ota_nama"),
            ota_no_hp=r.get("ota_no_hp"),
        )

    def list(self, *, ota_id: Optional[int] = None) -> Sequence[Pemasukan]:
        return self._list(*_ota_filter(self.alias, ota_id))


class MySQLPengeluaranRepository(_MySQLLedgerTable, PengeluaranRepository):
    table = "ota_pengeluaran"
    pk = "pengeluaran_id"
    alias = "e"
    writable = ("ota_id", "tanggal", "keperluan", "jumlah", "keterangan")
    select = """
        SELECT e.pengeluaran_id, e.ota_id, e.tanggal, e.keperluan, e.jumlah, e.keterangan
        FROM ota_pengeluaran e
    """

    def _map(self, r: dict) -> Pengeluaran:
        return Pengeluaran(
            pengeluaran_id=int(r["pengeluaran_id"]),
            tanggal=r["tanggal"],
            keperluan=r["keperluan"],
            jumlah=to_decimal(r["jumlah"]),
            keterangan=r.get("keterangan"),
            ota_id=r.get("ota_id"),
        )

    def list(self, *, ota_id: Optional[int] = None) -> Sequence[Pengeluaran]:
        return self._list(*_ota_filter(self.alias, ota_id))


class MySQLPenyaluranRepository(_MySQLLedgerTable, PenyaluranRepository):
    table = "ota_penyaluran"
    pk = "penyaluran_id"
    alias = "d"
    writable = ("santri_id", "tanggal", "nominal", "keterangan")
    select = """
        SELECT d.penyaluran_id, d.santri_id, d.tanggal, d.nominal, d.keterangan,
               s.nama AS santri_nama, s.nis AS santri_nis
        FROM ota_penyaluran d
        JOIN santri s ON s.santri_id = d.santri_id
    """

    def _map(self, r: dict) -> Penyaluran:
        return Penyaluran(
            penyaluran_id=int(r["penyaluran_id"]),
            santri_id=int(r["santri_id"]),
            tanggal=r["tanggal"],
            nominal=to_decimal(r["nominal"]),
            keterangan=r.get("keterangan"),
            santri_nama=r.get("santri_nama"),
            santri_nis=r.get("santri_nis"),
        )

    def list(self) -> Sequence[Penyaluran]:
        return self._list()
