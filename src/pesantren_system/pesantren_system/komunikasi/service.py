from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional, Sequence

from ..audit.model import Actor
from ..audit.service import AuditService
from ..common.datetime_utils import parse_iso_date
from ..common.validators import optional_text, parse_optional_int, require_non_empty
from ..core.enums import StatusPesan
from ..core.exceptions import NotFoundError, ValidationError
from ..santri.repository import SantriRepository
from .model import KATEGORI_PENGUMUMAN, KATEGORI_PESAN, Pengumuman, PesanWali
from .repository import PengumumanRepository, PesanRepository

logger = logging.getLogger(__name__)

SEMUA = "semua"


def _parse_status_pesan(value: Optional[str]) -> Optional[StatusPesan]:
    if not value or value == SEMUA:
        return None
    try:
        return StatusPesan(value)
    except ValueError:
        raise ValidationError("Status pesan tidak valid")


class PesanService:
    """Pesan dari wali santri ke pesantren.

    Alur status: Terkirim -> Dibaca/Diproses -> Dibalas.
    """

    def __init__(self, pesan: PesanRepository, santri: SantriRepository):
        self._pesan = pesan
        self._santri = santri

    def inbox(self, *, wali_id: int, status: Optional[str] = None) -> Sequence[PesanWali]:
        return self._pesan.list(wali_id=int(wali_id), status=_parse_status_pesan(status))

    def list_all(self, *, status: Optional[str] = None) -> Sequence[PesanWali]:
        return self._pesan.list(status=_parse_status_pesan(status))

    def get(self, pesan_id: int) -> PesanWali:
        pesan = self._pesan.get_by_id(int(pesan_id))
        if not pesan:
            raise NotFoundError("Pesan tidak ditemukan")
        return pesan

    def send(
        self,
        *,
        wali_id: int,
        judul: Optional[str],
        isi: Optional[str],
        kategori: Optional[str] = None,
        santri_id: Optional[int] = None,
    ) -> int:
        if not judul or not judul.strip():
            raise ValidationError("Masukkan judul pesan")
        if not isi or not isi.strip():
            raise ValidationError("Masukkan isi pesan")
        kategori = kategori or KATEGORI_PESAN[0]
        if kategori not in KATEGORI_PESAN:
            raise ValidationError("Kategori pesan tidak valid")

        if santri_id:
            santri = self._santri.get_by_id(int(santri_id))
            if not santri or santri.wali_id != int(wali_id):
                raise ValidationError("Santri tidak terdaftar pada akun wali ini")

        pesan_id = self._pesan.create(
            {
                "wali_id": int(wali_id),
                "santri_id": int(santri_id) if santri_id else None,
                "judul": judul.strip(),
                "kategori": kategori,
                "isi": isi.strip(),
                "status": StatusPesan.TERKIRIM.value,
            }
        )
        logger.info("pesan wali sent id=%s wali=%s", pesan_id, wali_id)
        return pesan_id

    def mark_read(self, pesan_id: int) -> None:
        pesan = self.get(pesan_id)
        if pesan.status == StatusPesan.TERKIRIM:
            self._pesan.set_status(pesan.pesan_id, StatusPesan.DIBACA)

    def mark_processing(self, pesan_id: int) -> None:
        pesan = self.get(pesan_id)
        if pesan.status != StatusPesan.DIBALAS:
            self._pesan.set_status(pesan.pesan_id, StatusPesan.DIPROSES)

    def reply(self, pesan_id: int, *, balasan: Optional[str], actor: Optional[Actor] = None) -> None:
        pesan = self.get(pesan_id)
        text = require_non_empty(balasan, "Balasan")
        self._pesan.reply(pesan.pesan_id, balasan=text, dibalas_oleh=actor.user_id if actor else None)


def _as_date(value: Any, field_name: str) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    s = str(value).strip()
    if not s:
        return None
    try:
        return parse_iso_date(s)
    except ValueError:
        raise ValidationError(f"{field_name} tidak valid")


class PengumumanService:
    def __init__(self, pengumuman: PengumumanRepository, audit: Optional[AuditService] = None):
        self._pengumuman = pengumuman
        self._audit = audit

    def list(self, *, archived: bool = False, search: Optional[str] = None) -> list[Pengumuman]:
        rows = list(self._pengumuman.list(archived=archived))
        q = (search or "").strip().lower()
        if q:
            rows = [p for p in rows if q in p.judul.lower() or q in p.isi.lower()]
        return rows

    def list_visible(self, *, kategori: Optional[str] = None, today: Optional[date] = None, limit: Optional[int] = None) -> list[Pengumuman]:
        """Pengumuman yang sedang tampil untuk wali/donatur."""
        today = today or date.today()
        kategori = None if not kategori or kategori == SEMUA else kategori
        rows = [p for p in self._pengumuman.list(archived=False, kategori=kategori) if p.tampil_pada(today)]
        return rows[:limit] if limit else rows

    def get(self, pengumuman_id: int) -> Pengumuman:
        p = self._pengumuman.get_by_id(int(pengumuman_id))
        if not p:
            raise NotFoundError("Pengumuman tidak ditemukan")
        return p

    def save(
        self,
        *,
        pengumuman_id: Optional[int],
        judul: Optional[str],
        isi: Optional[str],
        kategori: Optional[str] = None,
        prioritas: Any = 0,
        mulai_tampil: Any = None,
        selesai_tampil: Any = None,
        is_active: bool = True,
        actor: Optional[Actor] = None,
    ) -> int:
        kategori = kategori or KATEGORI_PENGUMUMAN[0]
        if kategori not in KATEGORI_PENGUMUMAN:
            raise ValidationError("Kategori pengumuman tidak valid")
        mulai = _as_date(mulai_tampil, "Tanggal mulai tampil") or date.today()
        selesai = _as_date(selesai_tampil, "Tanggal selesai tampil")
        if selesai and selesai < mulai:
            raise ValidationError("Tanggal selesai tampil harus setelah tanggal mulai")

        data = {
            "judul": require_non_empty(judul, "Judul"),
            "isi": require_non_empty(isi, "Isi pengumuman"),
            "kategori": kategori,
            "prioritas": parse_optional_int(prioritas) or 0,
            "mulai_tampil": mulai,
            "selesai_tampil": selesai,
            "is_active": 1 if is_active else 0,
        }
        if pengumuman_id:
            old = self.get(pengumuman_id)
            self._pengumuman.update(old.pengumuman_id, data)
            if self._audit:
                self._audit.log_update(
                    "pengumuman", actor=actor, record_id=old.pengumuman_id, record_name=data["judul"], old_data=old, new_data=data
                )
            return old.pengumuman_id

        data["created_by"] = actor.user_id if actor else None
        new_id = self._pengumuman.create(data)
        if self._audit:
            self._audit.log_create("pengumuman", actor=actor, record_id=new_id, record_name=data["judul"], new_data=data)
        return new_id

    def set_archived(self, pengumuman_id: int, archived: bool) -> None:
        p = self.get(pengumuman_id)
        self._pengumuman.set_archived(p.pengumuman_id, archived)

    def delete(self, pengumuman_id: int, *, actor: Optional[Actor] = None) -> None:
        old = self.get(pengumuman_id)
        if not self._pengumuman.delete(old.pengumuman_id):
            raise ValidationError("Gagal menghapus pengumuman")
        if self._audit:
            self._audit.log_delete("pengumuman", actor=actor, record_id=old.pengumuman_id, record_name=old.judul, old_data=old)
