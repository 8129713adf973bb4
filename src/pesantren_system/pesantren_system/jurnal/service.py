from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Iterable, Optional, Sequence

from ..audit.model import Actor
from ..audit.service import AuditService
from ..common.formatting import format_tanggal
from ..common.validators import optional_text
from ..core.enums import Hari, StatusJurnal, StatusKehadiranMapel
from ..core.exceptions import NotFoundError, ValidationError
from ..jadwal.repository import JadwalRepository
from ..santri.model import STATUS_AKTIF
from ..santri.repository import SantriRepository
from .model import JurnalDetail, JurnalEntry, JurnalForm, KehadiranRow
from .repository import JurnalRepository

logger = logging.getLogger(__name__)


def parse_status_kehadiran(value: Optional[str]) -> StatusKehadiranMapel:
    try:
        return StatusKehadiranMapel(value)
    except ValueError:
        raise ValidationError(f"Status kehadiran tidak valid: {value}")


def mark_all(rows: Iterable[KehadiranRow], status: StatusKehadiranMapel) -> tuple[KehadiranRow, ...]:
    return tuple(replace(r, status=status) for r in rows)


class JurnalService:
    """Use case: jurnal mengajar harian.

    Daftar jurnal untuk satu tanggal = jadwal pada hari tersebut (semua untuk
    admin, milik sendiri untuk guru), masing-masing dengan jurnal yang sudah
    diisi atau None.
    """

    def __init__(
        self,
        jurnal: JurnalRepository,
        jadwal: JadwalRepository,
        santri: SantriRepository,
        audit: Optional[AuditService] = None,
    ):
        self._jurnal = jurnal
        self._jadwal = jadwal
        self._santri = santri
        self._audit = audit

    def list_for_date(self, *, tanggal: date, guru_id: Optional[int] = None) -> list[JurnalEntry]:
        hari = Hari.from_weekday(tanggal.weekday())
        jadwal = self._jadwal.list(hari=hari, guru_id=guru_id)
        headers = {h.jadwal_id: h for h in self._jurnal.headers_for_date(tanggal=tanggal, jadwal_ids=[j.jadwal_id for j in jadwal])}
        return [JurnalEntry(jadwal=j, header=headers.get(j.jadwal_id)) for j in jadwal]

    def open_form(self, *, jadwal_id: int, tanggal: date) -> JurnalForm:
        jadwal = self._jadwal.get_by_id(int(jadwal_id))
        if not jadwal:
            raise NotFoundError("Jadwal tidak ditemukan")

        header = self._jurnal.get_header(jadwal_id=jadwal.jadwal_id, tanggal=tanggal)
        existing = {d.santri_id: d for d in self._jurnal.list_details(header.jurnal_id)} if header else {}

        rows = []
        for s in self._santri.list(kelas_id=jadwal.kelas_id, status=STATUS_AKTIF):
            d = existing.get(s.santri_id)
            rows.append(
                KehadiranRow(
                    santri_id=s.santri_id,
                    nis=s.nis,
                    nama=s.nama,
                    status=d.status if d else StatusKehadiranMapel.HADIR,
                    keterangan=(d.keterangan or "") if d else "",
                )
            )
        return JurnalForm(jadwal=jadwal, tanggal=tanggal, header=header, rows=tuple(rows))

    def save(
        self,
        *,
        form: JurnalForm,
        materi: Optional[str],
        catatan: Optional[str],
        status: str,
        actor: Optional[Actor] = None,
    ) -> int:
        try:
            status_enum = StatusJurnal(status or StatusJurnal.TERLAKSANA.value)
        except ValueError:
            raise ValidationError("Status pertemuan tidak valid")
        materi = optional_text(materi)
        if status_enum == StatusJurnal.TERLAKSANA and not materi:
            raise ValidationError("Materi wajib diisi")

        jadwal = form.jadwal
        header = {
            "jadwal_id": jadwal.jadwal_id,
            "kelas_id": jadwal.kelas_id,
            "guru_id": jadwal.guru_id,
            "mapel_id": jadwal.mapel_id,
            "tanggal": form.tanggal,
            "materi": materi,
            "catatan": optional_text(catatan),
            "status": status_enum,
            "created_by": actor.user_id if actor else None,
        }
        details: Sequence[JurnalDetail] = [
            JurnalDetail(santri_id=r.santri_id, status=r.status, keterangan=(r.keterangan or "").strip() or None)
            for r in form.rows
        ]
        jurnal_id = self._jurnal.save(header, details)
        logger.info("jurnal saved jadwal=%s tanggal=%s details=%s", jadwal.jadwal_id, form.tanggal, len(details))

        if self._audit:
            self._audit.log_input(
                "presensi_mapel",
                actor=actor,
                description=f"Jurnal {jadwal.mapel_nama or jadwal.mapel_id} {jadwal.kelas_nama or ''} {format_tanggal(form.tanggal)}",
                new_data={"materi": materi, "status": status_enum.value, "jumlah_santri": len(details)},
            )
        return jurnal_id
