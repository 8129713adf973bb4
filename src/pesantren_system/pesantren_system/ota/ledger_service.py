from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from ..audit.model import Actor
from ..audit.service import AuditService
from ..common.datetime_utils import parse_iso_date
from ..common.formatting import format_rupiah
from ..common.validators import optional_text, require_non_empty, require_positive_amount
from ..common.whatsapp import donation_confirmation_message, whatsapp_url
from ..core.enums import MetodePembayaran
from ..core.exceptions import NotFoundError, ValidationError
from ..santri.repository import SantriRepository
from . import ledger
from .model import Pemasukan, Pengeluaran, Penyaluran
from .repository import DonorRepository, PemasukanRepository, PengeluaranRepository, PenyaluranRepository

logger = logging.getLogger(__name__)


def _require_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    if not value or not str(value).strip():
        raise ValidationError("Tanggal wajib diisi")
    try:
        return parse_iso_date(str(value).strip())
    except ValueError:
        raise ValidationError("Tanggal tidak valid")


def _parse_metode(value: Optional[str]) -> str:
    try:
        return MetodePembayaran(value or MetodePembayaran.TRANSFER.value).value
    except ValueError:
        raise ValidationError("Metode pembayaran tidak valid")


class LedgerService:
    """Pencatatan pemasukan, pengeluaran dan penyaluran dana OTA.

    Aturan saldo:
    - pengeluaran tidak boleh membuat total pengeluaran > total pemasukan;
    - penyaluran tidak boleh melebihi saldo tersedia
      (pemasukan - pengeluaran - penyaluran).
    Saat edit, nominal lama baris yang diedit ikut dihitung sebagai tersedia.
    """

    def __init__(
        self,
        donors: DonorRepository,
        pemasukan: PemasukanRepository,
        pengeluaran: PengeluaranRepository,
        penyaluran: PenyaluranRepository,
        santri: SantriRepository,
        audit: Optional[AuditService] = None,
    ):
        self._donors = donors
        self._pemasukan = pemasukan
        self._pengeluaran = pengeluaran
        self._penyaluran = penyaluran
        self._santri = santri
        self._audit = audit

    # -- pemasukan ---------------------------------------------------------

    def list_pemasukan(self, *, year: Optional[int] = None, month: Optional[int] = None, search: Optional[str] = None) -> list[Pemasukan]:
        rows = ledger.filter_period(self._pemasukan.list(), year=year, month=month)
        q = (search or "").strip().lower()
        if q:
            rows = [r for r in rows if q in (r.ota_nama or "").lower() or q in (r.keterangan or "").lower()]
        return rows

    def get_pemasukan(self, pemasukan_id: int) -> Pemasukan:
        row = self._pemasukan.get_by_id(int(pemasukan_id))
        if not row:
            raise NotFoundError("Data pemasukan tidak ditemukan")
        return row

    def save_pemasukan(
        self,
        *,
        pemasukan_id: Optional[int],
        ota_id: Optional[int],
        tanggal: Any,
        jumlah: Any,
        metode: Optional[str] = None,
        keterangan: Optional[str] = None,
        actor: Optional[Actor] = None,
    ) -> int:
        if not ota_id:
            raise ValidationError("Pilih OTA terlebih dahulu")
        data = {
            "ota_id": int(ota_id),
            "jumlah": require_positive_amount(jumlah),
            "tanggal": _require_date(tanggal),
            "metode": _parse_metode(metode),
            "keterangan": optional_text(keterangan),
        }
        donor = self._donors.get_by_id(data["ota_id"])
        if not donor:
            raise NotFoundError("Data OTA tidak ditemukan")

        if pemasukan_id:
            old = self.get_pemasukan(pemasukan_id)
            self._pemasukan.update(old.pemasukan_id, data)
            if self._audit:
                self._audit.log_update(
                    "ota_pemasukan", actor=actor, record_id=old.pemasukan_id, record_name=donor.nama, old_data=old, new_data=data
                )
            return old.pemasukan_id

        new_id = self._pemasukan.create(data)
        logger.info("pemasukan created id=%s ota=%s jumlah=%s", new_id, donor.ota_id, data["jumlah"])
        if self._audit:
            self._audit.log_create("ota_pemasukan", actor=actor, record_id=new_id, record_name=donor.nama, new_data=data)
        return new_id

    def confirmation_link(self, pemasukan_id: int) -> Optional[str]:
        """wa.me link thanking the donor, or None when the donor has no phone number."""
        row = self.get_pemasukan(pemasukan_id)
        if not row.ota_no_hp:
            return None
        message = donation_confirmation_message(
            nama_donatur=row.ota_nama or "", tanggal=row.tanggal, jumlah=row.jumlah, metode=row.metode
        )
        return whatsapp_url(row.ota_no_hp, message)

    def delete_pemasukan(self, pemasukan_id: int, *, actor: Optional[Actor] = None) -> None:
        old = self.get_pemasukan(pemasukan_id)
        self._pemasukan.delete(old.pemasukan_id)
        if self._audit:
            self._audit.log_delete("ota_pemasukan", actor=actor, record_id=old.pemasukan_id, record_name=old.ota_nama or "", old_data=old)

    # -- pengeluaran -------------------------------------------------------

    def list_pengeluaran(self, *, year: Optional[int] = None, month: Optional[int] = None, search: Optional[str] = None) -> list[Pengeluaran]:
        rows = ledger.filter_period(self._pengeluaran.list(), year=year, month=month)
        q = (search or "").strip().lower()
        if q:
            rows = [r for r in rows if q in r.keperluan.lower() or q in (r.keterangan or "").lower()]
        return rows

    def get_pengeluaran(self, pengeluaran_id: int) -> Pengeluaran:
        row = self._pengeluaran.get_by_id(int(pengeluaran_id))
        if not row:
            raise NotFoundError("Data pengeluaran tidak ditemukan")
        return row

    def saldo(self) -> Decimal:
        """Total pemasukan - total pengeluaran (sepanjang waktu)."""
        return ledger.balance(self._pemasukan.list(), self._pengeluaran.list())

    def save_pengeluaran(
        self,
        *,
        pengeluaran_id: Optional[int],
        tanggal: Any,
        keperluan: Optional[str],
        jumlah: Any,
        keterangan: Optional[str] = None,
        ota_id: Optional[int] = None,
        actor: Optional[Actor] = None,
    ) -> int:
        data = {
            "keperluan": require_non_empty(keperluan, "Keperluan"),
            "jumlah": require_positive_amount(jumlah),
            "tanggal": _require_date(tanggal),
            "keterangan": optional_text(keterangan),
            "ota_id": int(ota_id) if ota_id else None,
        }
        old = self.get_pengeluaran(pengeluaran_id) if pengeluaran_id else None
        ledger.ensure_expense_allowed(
            total_pemasukan=ledger.total(self._pemasukan.list()),
            total_pengeluaran=ledger.total(self._pengeluaran.list()),
            jumlah=data["jumlah"],
            current_edit=old.jumlah if old else Decimal("0"),
        )

        if old:
            self._pengeluaran.update(old.pengeluaran_id, data)
            if self._audit:
                self._audit.log_update(
                    "ota_pengeluaran", actor=actor, record_id=old.pengeluaran_id, record_name=data["keperluan"],
                    old_data=old, new_data=data,
                )
            return old.pengeluaran_id

        new_id = self._pengeluaran.create(data)
        logger.info("pengeluaran created id=%s jumlah=%s", new_id, data["jumlah"])
        if self._audit:
            self._audit.log_create("ota_pengeluaran", actor=actor, record_id=new_id, record_name=data["keperluan"], new_data=data)
        return new_id

    def delete_pengeluaran(self, pengeluaran_id: int, *, actor: Optional[Actor] = None) -> None:
        old = self.get_pengeluaran(pengeluaran_id)
        self._pengeluaran.delete(old.pengeluaran_id)
        if self._audit:
            self._audit.log_delete("ota_pengeluaran", actor=actor, record_id=old.pengeluaran_id, record_name=old.keperluan, old_data=old)

    # -- penyaluran --------------------------------------------------------

    def list_penyaluran(self, *, year: Optional[int] = None, month: Optional[int] = None) -> list[Penyaluran]:
        return ledger.filter_period(self._penyaluran.list(), year=year, month=month)

    def get_penyaluran(self, penyaluran_id: int) -> Penyaluran:
        row = self._penyaluran.get_by_id(int(penyaluran_id))
        if not row:
            raise NotFoundError("Data penyaluran tidak ditemukan")
        return row

    def saldo_tersedia(self) -> Decimal:
        return ledger.available_balance(self._pemasukan.list(), self._pengeluaran.list(), self._penyaluran.list())

    def save_penyaluran(
        self,
        *,
        penyaluran_id: Optional[int],
        santri_id: Optional[int],
        tanggal: Any,
        nominal: Any,
        keterangan: Optional[str] = None,
        actor: Optional[Actor] = None,
    ) -> int:
        if not santri_id:
            raise ValidationError("Pilih santri penerima")
        data = {
            "santri_id": int(santri_id),
            "nominal": require_positive_amount(nominal),
            "tanggal": _require_date(tanggal),
            "keterangan": optional_text(keterangan),
        }
        santri = self._santri.get_by_id(data["santri_id"])
        if not santri:
            raise NotFoundError("Santri tidak ditemukan")

        old = self.get_penyaluran(penyaluran_id) if penyaluran_id else None
        ledger.ensure_disbursement_allowed(
            saldo_tersedia=self.saldo_tersedia(),
            nominal=data["nominal"],
            current_edit=old.nominal if old else Decimal("0"),
        )

        if old:
            self._penyaluran.update(old.penyaluran_id, data)
            if self._audit:
                self._audit.log_update(
                    "ota_penyaluran", actor=actor, record_id=old.penyaluran_id, record_name=santri.nama,
                    old_data=old, new_data=data,
                )
            return old.penyaluran_id

        new_id = self._penyaluran.create(data)
        logger.info("penyaluran created id=%s santri=%s nominal=%s", new_id, santri.santri_id, format_rupiah(data["nominal"]))
        if self._audit:
            self._audit.log_create("ota_penyaluran", actor=actor, record_id=new_id, record_name=santri.nama, new_data=data)
        return new_id

    def delete_penyaluran(self, penyaluran_id: int, *, actor: Optional[Actor] = None) -> None:
        old = self.get_penyaluran(penyaluran_id)
        self._penyaluran.delete(old.penyaluran_id)
        if self._audit:
            self._audit.log_delete(
                "ota_penyaluran", actor=actor, record_id=old.penyaluran_id, record_name=old.santri_nama or "", old_data=old
            )