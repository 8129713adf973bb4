from __future__ import annotations

from typing import Optional, Sequence

from ..audit.model import Actor
from ..audit.service import AuditService
from ..common.validators import optional_text, require_non_empty
from ..core.constants import DEFAULT_SEARCH_LIMIT
from ..core.exceptions import NotFoundError, ValidationError
from ..santri.model import STATUS_AKTIF, Santri
from ..santri.repository import SantriRepository
from .model import Halaqoh
from .repository import HalaqohRepository

TABLE = "halaqoh"


class HalaqohService:
    """Use case: kelompok halaqoh dan anggotanya.

    Keanggotaan disimpan di kolom santri.halaqoh_id, jadi satu santri hanya
    berada di satu halaqoh.
    """

    def __init__(self, halaqoh: HalaqohRepository, santri: SantriRepository, audit: Optional[AuditService] = None):
        self._halaqoh = halaqoh
        self._santri = santri
        self._audit = audit

    def list(self) -> Sequence[Halaqoh]:
        return self._halaqoh.list_all()

    def get(self, halaqoh_id: int) -> Halaqoh:
        h = self._halaqoh.get_by_id(int(halaqoh_id))
        if not h:
            raise NotFoundError("Halaqoh tidak ditemukan")
        return h

    def save(
        self,
        *,
        halaqoh_id: Optional[int],
        nama: str,
        musyrif_id: Optional[int],
        waktu: Optional[str],
        keterangan: Optional[str],
        actor: Optional[Actor] = None,
    ) -> int:
        data = {
            "nama": require_non_empty(nama, "Nama halaqoh"),
            "musyrif_id": musyrif_id,
            "waktu": optional_text(waktu),
            "keterangan": optional_text(keterangan),
        }
        if halaqoh_id:
            old = self.get(halaqoh_id)
            self._halaqoh.update(old.halaqoh_id, **data)
            if self._audit:
                self._audit.log_update(
                    TABLE, actor=actor, record_id=old.halaqoh_id, record_name=data["nama"], old_data=old, new_data=data
                )
            return old.halaqoh_id

        new_id = self._halaqoh.create(**data)
        if self._audit:
            self._audit.log_create(TABLE, actor=actor, record_id=new_id, record_name=data["nama"], new_data=data)
        return new_id

    def delete(self, halaqoh_id: int, *, actor: Optional[Actor] = None) -> None:
        old = self.get(halaqoh_id)
        if not self._halaqoh.delete(old.halaqoh_id):
            raise ValidationError("Gagal menghapus halaqoh")
        if self._audit:
            self._audit.log_delete(TABLE, actor=actor, record_id=old.halaqoh_id, record_name=old.nama, old_data=old)

    def members(self, halaqoh_id: int) -> Sequence[Santri]:
        return self._santri.list(halaqoh_id=int(halaqoh_id), status=STATUS_AKTIF)

    def search_candidates(self, halaqoh_id: int, query: str, *, limit: int = DEFAULT_SEARCH_LIMIT) -> list[Santri]:
        """Santri matching `query` that are not yet members of this halaqoh."""
        query = (query or "").strip()
        if not query:
            return []
        member_ids = {s.santri_id for s in self.members(halaqoh_id)}
        found = self._santri.search_by_name(query, exclude_ids=member_ids, limit=limit)
        return [s for s in found if s.santri_id not in member_ids][:limit]

    def add_member(self, halaqoh_id: int, santri_id: int) -> None:
        self.get(halaqoh_id)
        if not self._santri.set_halaqoh(int(santri_id), int(halaqoh_id)):
            raise ValidationError("Santri tidak ditemukan")

    def remove_member(self, halaqoh_id: int, santri_id: int) -> None:
        santri = self._santri.get_by_id(int(santri_id))
        if not santri or santri.halaqoh_id != int(halaqoh_id):
            raise ValidationError("Santri bukan anggota halaqoh ini")
        self._santri.set_halaqoh(santri.santri_id, None)
