from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional, Sequence

from ..audit.model import Actor
from ..audit.service import AuditService
from ..common.validators import optional_text, require_non_empty
from ..core.constants import DEFAULT_SEARCH_LIMIT
from ..core.enums import Role, StatusPenerima
from ..core.exceptions import NotFoundError, ValidationError
from ..santri.model import STATUS_AKTIF, Santri
from ..santri.repository import SantriRepository
from ..users.model import UserProfile
from ..users.repository import UserRepository
from . import ledger
from .model import DonorDetail, DonorStats, OrangTuaAsuh, OtaKategori, OtaSantriLink, PenerimaOta, SantriOtaRow
from .repository import (
    DonorRepository,
    KategoriRepository,
    LinkRepository,
    PemasukanRepository,
    PengeluaranRepository,
    PenerimaRepository,
)

logger = logging.getLogger(__name__)

TABLE = "orang_tua_asuh"

FILTER_CONNECTED = "connected"
FILTER_UNCONNECTED = "unconnected"
FILTER_ALL = "all"


class DonorService:
    """Data orang tua asuh (donatur), detail donasinya, dan akun login OTA."""

    def __init__(
        self,
        donors: DonorRepository,
        links: LinkRepository,
        pemasukan: PemasukanRepository,
        pengeluaran: PengeluaranRepository,
        users: UserRepository,
        audit: Optional[AuditService] = None,
    ):
        self._donors = donors
        self._links = links
        self._pemasukan = pemasukan
        self._pengeluaran = pengeluaran
        self._users = users
        self._audit = audit

    def list(self, *, active_only: bool = False) -> Sequence[OrangTuaAsuh]:
        return self._donors.list(active_only=active_only)

    @staticmethod
    def stats(donors: Iterable[OrangTuaAsuh]) -> DonorStats:
        donors = list(donors)
        return DonorStats(
            active_count=sum(1 for d in donors if d.status),
            total_santri=sum(d.jumlah_santri for d in donors),
        )

    def get(self, ota_id: int) -> OrangTuaAsuh:
        donor = self._donors.get_by_id(int(ota_id))
        if not donor:
            raise NotFoundError("Data OTA tidak ditemukan")
        return donor

    def save(
        self,
        *,
        ota_id: Optional[int],
        nama: str,
        email: Optional[str] = None,
        no_hp: Optional[str] = None,
        alamat: Optional[str] = None,
        kategori_id: Optional[int] = None,
        status: bool = True,
        actor: Optional[Actor] = None,
    ) -> int:
        data = {
            "nama": require_non_empty(nama, "Nama"),
            "email": optional_text(email),
            "no_hp": optional_text(no_hp),
            "alamat": optional_text(alamat),
            "kategori_id": kategori_id,
            "status": 1 if status else 0,
        }
        if ota_id:
            old = self.get(ota_id)
            self._donors.update(old.ota_id, data)
            if self._audit:
                self._audit.log_update(TABLE, actor=actor, record_id=old.ota_id, record_name=data["nama"], old_data=old, new_data=data)
            return old.ota_id

        new_id = self._donors.create(data)
        logger.info("ota created id=%s", new_id)
        if self._audit:
            self._audit.log_create(TABLE, actor=actor, record_id=new_id, record_name=data["nama"], new_data=data)
        return new_id

    def delete(self, ota_id: int, *, actor: Optional[Actor] = None) -> None:
        old = self.get(ota_id)
        if not self._donors.delete(old.ota_id):
            raise ValidationError("Gagal menghapus data OTA")
        if self._audit:
            self._audit.log_delete(TABLE, actor=actor, record_id=old.ota_id, record_name=old.nama, old_data=old)

    def detail(self, ota_id: int) -> DonorDetail:
        donor = self.get(ota_id)
        pemasukan = tuple(self._pemasukan.list(ota_id=donor.ota_id))
        pengeluaran = self._pengeluaran.list(ota_id=donor.ota_id)
        return DonorDetail(
            donor=donor,
            santri=tuple(self._links.list(ota_id=donor.ota_id)),
            pemasukan=pemasukan,
            total_donasi=ledger.total(pemasukan),
            total_pengeluaran=ledger.total(pengeluaran),
        )

    def candidate_accounts(self) -> list[UserProfile]:
        """Akun berperan 'ota' yang belum ditautkan ke donatur mana pun."""
        taken = set(self._donors.taken_user_ids())
        return [u for u in self._users.list_by_role(Role.OTA) if u.user_id not in taken]

    def link_account(self, *, ota_id: int, user_id: Optional[int], actor: Optional[Actor] = None) -> None:
        donor = self.get(ota_id)
        if not user_id:
            raise ValidationError("Pilih akun terlebih dahulu")
        user = self._users.get_by_id(int(user_id))
        if not user or not user.has_role(Role.OTA):
            raise ValidationError("Akun harus memiliki peran OTA")
        owner = self._donors.get_by_user_id(user.user_id)
        if owner and owner.ota_id != donor.ota_id:
            raise ValidationError(f"Akun sudah terhubung dengan {owner.nama}")

        self._donors.set_user(donor.ota_id, user.user_id)
        if self._audit:
            self._audit.log_update(
                TABLE, actor=actor, record_id=donor.ota_id, record_name=donor.nama,
                old_data={"user_id": donor.user_id}, new_data={"user_id": user.user_id},
            )

    def unlink_account(self, *, ota_id: int, actor: Optional[Actor] = None) -> None:
        donor = self.get(ota_id)
        if donor.user_id is None:
            return
        self._donors.set_user(donor.ota_id, None)
        if self._audit:
            self._audit.log_update(
                TABLE, actor=actor, record_id=donor.ota_id, record_name=donor.nama,
                old_data={"user_id": donor.user_id}, new_data={"user_id": None},
            )


class KategoriService:
    def __init__(self, kategori: KategoriRepository):
        self._kategori = kategori

    def list(self) -> Sequence[OtaKategori]:
        return self._kategori.list_all()

    def save(self, *, kategori_id: Optional[int], nama: str, keterangan: Optional[str]) -> int:
        nama = require_non_empty(nama, "Nama kategori")
        keterangan = optional_text(keterangan)
        if kategori_id:
            if not self._kategori.get_by_id(int(kategori_id)):
                raise NotFoundError("Kategori tidak ditemukan")
            self._kategori.update(int(kategori_id), nama=nama, keterangan=keterangan)
            return int(kategori_id)
        return self._kategori.create(nama=nama, keterangan=keterangan)

    def delete(self, kategori_id: int) -> None:
        if not self._kategori.delete(int(kategori_id)):
            raise ValidationError("Gagal menghapus kategori")


class LinkingService:
    """Tautan santri asuh ke donatur.

    Satu santri hanya boleh punya satu OTA, sehingga pencarian kandidat selalu
    mengecualikan santri yang sudah tertaut ke donatur mana pun.
    """

    def __init__(
        self,
        links: LinkRepository,
        santri: SantriRepository,
        donors: DonorRepository,
        audit: Optional[AuditService] = None,
    ):
        self._links = links
        self._santri = santri
        self._donors = donors
        self._audit = audit

    def linked(self, ota_id: int) -> Sequence[OtaSantriLink]:
        return self._links.list(ota_id=int(ota_id))

    def search_santri_for_donor(self, ota_id: int, query: str, *, limit: int = DEFAULT_SEARCH_LIMIT) -> list[Santri]:
        query = (query or "").strip()
        if not query:
            return []
        linked_ids = {l.santri_id for l in self._links.list()}
        found = self._santri.search_by_name(query, exclude_ids=linked_ids, limit=limit)
        return [s for s in found if s.santri_id not in linked_ids][:limit]

    def link(self, *, ota_id: int, santri_id: int, actor: Optional[Actor] = None) -> int:
        donor = self._donors.get_by_id(int(ota_id))
        if not donor:
            raise NotFoundError("Data OTA tidak ditemukan")
        santri = self._santri.get_by_id(int(santri_id))
        if not santri:
            raise NotFoundError("Santri tidak ditemukan")
        if any(l.santri_id == santri.santri_id for l in self._links.list()):
            raise ValidationError(f"{santri.nama} sudah memiliki orang tua asuh")

        link_id = self._links.create(ota_id=donor.ota_id, santri_id=santri.santri_id)
        if self._audit:
            self._audit.log_create(
                "ota_santri", actor=actor, record_id=link_id, record_name=f"{donor.nama} - {santri.nama}",
            )
        return link_id

    def unlink(self, *, ota_id: int, link_id: int, actor: Optional[Actor] = None) -> None:
        link = self._links.get_by_id(int(link_id))
        if not link or link.ota_id != int(ota_id):
            raise NotFoundError("Data tautan tidak ditemukan")
        self._links.delete(link.link_id)
        if self._audit:
            self._audit.log_delete(
                "ota_santri", actor=actor, record_id=link.link_id, record_name=f"{link.ota_nama} - {link.santri_nama}",
            )

    def santri_view(
        self,
        *,
        search: Optional[str] = None,
        kelas_id: Optional[int] = None,
        status_filter: str = FILTER_CONNECTED,
    ) -> list[SantriOtaRow]:
        """Santri aktif beserta donaturnya; filter connected/unconnected/all."""
        by_santri = {l.santri_id: l for l in self._links.list()}
        rows = []
        for s in self._santri.list(kelas_id=kelas_id, status=STATUS_AKTIF, search=(search or "").strip() or None):
            link = by_santri.get(s.santri_id)
            if status_filter == FILTER_CONNECTED and link is None:
                continue
            if status_filter == FILTER_UNCONNECTED and link is not None:
                continue
            rows.append(
                SantriOtaRow(
                    santri_id=s.santri_id, nis=s.nis, nama=s.nama, kelas_id=s.kelas_id, kelas_nama=s.kelas_nama, link=link,
                )
            )
        return rows

    def relink(self, *, santri_id: int, ota_id: Optional[int], actor: Optional[Actor] = None) -> None:
        """Pindahkan santri ke donatur lain; `ota_id` None berarti hanya melepas tautan."""
        santri = self._santri.get_by_id(int(santri_id))
        if not santri:
            raise NotFoundError("Santri tidak ditemukan")
        donor = None
        if ota_id is not None:
            donor = self._donors.get_by_id(int(ota_id))
            if not donor or not donor.status:
                raise ValidationError("OTA tidak ditemukan atau tidak aktif")

        self._links.relink(santri_id=santri.santri_id, ota_id=donor.ota_id if donor else None)
        logger.info("santri %s relinked to ota=%s", santri.santri_id, donor.ota_id if donor else None)
        if self._audit:
            self._audit.log_update(
                "ota_santri", actor=actor, record_id=santri.santri_id, record_name=santri.nama,
                new_data={"ota_id": donor.ota_id if donor else None},
            )


class PenerimaService:
    """Santri penerima dana penyaluran OTA."""

    def __init__(self, penerima: PenerimaRepository, santri: SantriRepository):
        self._penerima = penerima
        self._santri = santri

    def list(self, *, status: Optional[str] = None) -> Sequence[PenerimaOta]:
        parsed = None
        if status and status != FILTER_ALL:
            try:
                parsed = StatusPenerima(status)
            except ValueError:
                raise ValidationError("Status penerima tidak valid")
        return self._penerima.list(status=parsed)

    def list_active(self) -> Sequence[PenerimaOta]:
        return self._penerima.list(status=StatusPenerima.AKTIF)

    def enroll(self, *, santri_id: Optional[int], tanggal_mulai: Optional[date], keterangan: Optional[str] = None) -> int:
        if not santri_id:
            raise ValidationError("Pilih santri terlebih dahulu")
        santri = self._santri.get_by_id(int(santri_id))
        if not santri or santri.status != STATUS_AKTIF:
            raise ValidationError("Santri tidak ditemukan atau tidak aktif")
        return self._penerima.enroll(
            santri_id=santri.santri_id, tanggal_mulai=tanggal_mulai or date.today(), keterangan=optional_text(keterangan)
        )

    def set_status(self, penerima_id: int, status: str) -> None:
        try:
            parsed = StatusPenerima(status)
        except ValueError:
            raise ValidationError("Status penerima tidak valid")
        self._penerima.set_status(int(penerima_id), parsed)

    def delete(self, penerima_id: int) -> None:
        if not self._penerima.delete(int(penerima_id)):
            raise ValidationError("Gagal menghapus penerima")
