from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Iterable, Optional, Sequence

from ..audit.model import Actor
from ..audit.service import AuditService
from ..common.datetime_utils import month_bounds
from ..common.formatting import format_tanggal, nama_bulan
from ..core.enums import StatusPresensi
from ..core.exceptions import ValidationError
from ..santri.model import STATUS_AKTIF
from ..santri.repository import SantriRepository
from .model import PresensiRecord, PresensiRow, PresensiSheet, RekapBulanan, RekapSantri
from .repository import PresensiRepository

logger = logging.getLogger(__name__)

REKAP_COLUMNS = [
    ("no", "No"),
    ("nis", "NIS"),
    ("nama", "Nama Santri"),
    ("hadir", "Hadir"),
    ("izin", "Izin"),
    ("sakit", "Sakit"),
    ("alpha", "Alpha"),
    ("persen_hadir", "% Hadir"),
]


def parse_status(value: Optional[str]) -> StatusPresensi:
    try:
        return StatusPresensi((value or "").lower())
    except ValueError:
        raise ValidationError(f"Status presensi tidak valid: {value}")


def mark_all(rows: Iterable[PresensiRow], status: StatusPresensi) -> tuple[PresensiRow, ...]:
    """Set every listed row to `status`; keterangan is kept."""
    return tuple(replace(r, status=status) for r in rows)


class PresensiService:
    """Use case: presensi harian per kelas.

    Lembar presensi berisi santri aktif kelas tersebut; santri yang belum
    punya data di tanggal itu dianggap 'hadir'. Simpan = upsert per
    (santri_id, tanggal).
    """

    def __init__(self, presensi: PresensiRepository, santri: SantriRepository, audit: Optional[AuditService] = None):
        self._presensi = presensi
        self._santri = santri
        self._audit = audit

    def load_sheet(self, *, kelas_id: Optional[int], tanggal: Optional[date]) -> PresensiSheet:
        if not kelas_id or not tanggal:
            raise ValidationError("Pilih kelas dan tanggal terlebih dahulu")

        santri = self._santri.list(kelas_id=int(kelas_id), status=STATUS_AKTIF)
        existing = {
            p.santri_id: p
            for p in self._presensi.list_for_date(tanggal=tanggal, santri_ids=[s.santri_id for s in santri])
        }

        rows = []
        for s in santri:
            p = existing.get(s.santri_id)
            rows.append(
                PresensiRow(
                    santri_id=s.santri_id,
                    nis=s.nis,
                    nama=s.nama,
                    status=p.status if p else StatusPresensi.HADIR,
                    keterangan=(p.keterangan or "") if p else "",
                    tersimpan=p is not None,
                )
            )
        return PresensiSheet(kelas_id=int(kelas_id), tanggal=tanggal, rows=tuple(rows))

    def save(self, *, tanggal: date, rows: Sequence[PresensiRow], actor: Optional[Actor] = None) -> int:
        if not rows:
            raise ValidationError("Tidak ada santri untuk disimpan")

        entries = [
            PresensiRecord(
                santri_id=r.santri_id,
                tanggal=tanggal,
                status=r.status,
                keterangan=(r.keterangan or "").strip() or None,
            )
            for r in rows
        ]
        count = self._presensi.upsert_many(
            tanggal=tanggal, entries=entries, created_by=actor.user_id if actor else None
        )
        logger.info("presensi saved tanggal=%s rows=%s", tanggal, count)
        if self._audit:
            self._audit.log_input(
                "presensi",
                actor=actor,
                description=f"Input presensi {format_tanggal(tanggal)} ({count} santri)",
                new_data=[{"santri_id": e.santri_id, "status": e.status.value} for e in entries],
            )
        return count

    def rekap_bulanan(self, *, year: int, month: int, kelas_id: Optional[int] = None) -> RekapBulanan:
        start, end = month_bounds(year, month)
        records = self._presensi.list_range(start=start, end=end, kelas_id=kelas_id)
        return build_rekap(year, month, records)

    def riwayat(self, *, santri_ids: Sequence[int], year: int, month: int) -> Sequence[dict]:
        start, end = month_bounds(year, month)
        return self._presensi.list_range(start=start, end=end, santri_ids=list(santri_ids))

    def rekap_export(self, rekap: RekapBulanan) -> dict:
        rows = [
            {
                "no": i,
                "nis": r.nis,
                "nama": r.nama,
                "hadir": r.hadir,
                "izin": r.izin,
                "sakit": r.sakit,
                "alpha": r.alpha,
                "persen_hadir": r.persen_hadir,
            }
            for i, r in enumerate(rekap.per_santri, start=1)
        ]
        return {
            "filename": f"Rekap_Presensi_{rekap.year}_{rekap.month:02d}",
            "title": f"Rekap Presensi {nama_bulan(rekap.month)} {rekap.year}",
            "columns": REKAP_COLUMNS,
            "rows": rows,
        }


def build_rekap(year: int, month: int, records: Iterable[dict]) -> RekapBulanan:
    """Count statuses overall and per santri."""
    totals = {s.value: 0 for s in StatusPresensi}
    per: dict[int, dict] = {}
    for r in records:
        status = str(r["status"]).lower()
        if status not in totals:
            continue
        totals[status] += 1
        entry = per.setdefault(
            int(r["santri_id"]),
            {"santri_id": int(r["santri_id"]), "nis": r.get("nis") or "", "nama": r.get("nama") or ""},
        )
        entry[status] = entry.get(status, 0) + 1

    per_santri = tuple(sorted((RekapSantri(**e) for e in per.values()), key=lambda x: x.nama))
    return RekapBulanan(year=int(year), month=int(month), totals=totals, per_santri=per_santri)
