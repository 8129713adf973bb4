from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..audit.model import Actor
from ..audit.service import AuditService
from ..common.validators import optional_text, require_non_empty
from ..core.constants import DEFAULT_SEARCH_LIMIT
from ..core.exceptions import NotFoundError, ValidationError
from .model import STATUS_AKTIF, STATUS_SANTRI, Kelas, Santri
from .repository import KelasRepository, SantriRepository

TABLE = "santri"


class SantriService:
    """Use case: data induk santri dan tautan santri ke akun wali."""

    def __init__(self, santri: SantriRepository, audit: Optional[AuditService] = None):
        self._santri = santri
        self._audit = audit

    def list(
        self,
        *,
        kelas_id: Optional[int] = None,
        halaqoh_id: Optional[int] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Sequence[Santri]:
        return self._santri.list(
            kelas_id=kelas_id,
            halaqoh_id=halaqoh_id,
            status=status or None,
            search=(search or "").strip() or None,
        )

    def get(self, santri_id: int) -> Santri:
        santri = self._santri.get_by_id(int(santri_id))
        if not santri:
            raise NotFoundError("Santri tidak ditemukan")
        return santri

    def list_active_by_kelas(self, kelas_id: int) -> Sequence[Santri]:
        return self._santri.list(kelas_id=int(kelas_id), status=STATUS_AKTIF)

    def search(self, query: str, *, exclude_ids: Iterable[int] = (), limit: int = DEFAULT_SEARCH_LIMIT) -> Sequence[Santri]:
        """Substring search by nama; ids in `exclude_ids` are never returned."""
        query = (query or "").strip()
        if not query:
            return []
        exclude = {int(i) for i in exclude_ids}
        found = self._santri.search_by_name(query, exclude_ids=exclude, limit=limit)
        return [s for s in found if s.santri_id not in exclude][:limit]

    def _clean(self, data: dict) -> dict:
        status = data.get("status") or STATUS_AKTIF
        if status not in STATUS_SANTRI:
            raise ValidationError("Status santri tidak valid")
        jk = optional_text(data.get("jenis_kelamin"))
        if jk and jk not in ("L", "P"):
            raise ValidationError("Jenis kelamin tidak valid")
        return {
            "nis": require_non_empty(data.get("nis"), "NIS"),
            "nama": require_non_empty(data.get("nama"), "Nama santri"),
            "jenis_kelamin": jk,
            "kelas_id": data.get("kelas_id"),
            "halaqoh_id": data.get("halaqoh_id"),
            "status": status,
        }

    def create(self, data: dict, *, actor: Optional[Actor] = None) -> int:
        clean = self._clean(data)
        if self._santri.get_by_nis(clean["nis"]):
            raise ValidationError("NIS sudah digunakan")
        santri_id = self._santri.create(clean)
        if self._audit:
            self._audit.log_create(TABLE, actor=actor, record_id=santri_id, record_name=clean["nama"], new_data=clean)
        return santri_id

    def update(self, santri_id: int, data: dict, *, actor: Optional[Actor] = None) -> None:
        old = self.get(santri_id)
        clean = self._clean(data)
        other = self._santri.get_by_nis(clean["nis"])
        if other and other.santri_id != old.santri_id:
            raise ValidationError("NIS sudah digunakan")
        self._santri.update(old.santri_id, clean)
        if self._audit:
            self._audit.log_update(
                TABLE, actor=actor, record_id=old.santri_id, record_name=clean["nama"], old_data=old, new_data=clean
            )

    def delete(self, santri_id: int, *, actor: Optional[Actor] = None) -> None:
        old = self.get(santri_id)
        if not self._santri.delete(old.santri_id):
            raise ValidationError("Gagal menghapus santri")
        if self._audit:
            self._audit.log_delete(TABLE, actor=actor, record_id=old.santri_id, record_name=old.nama, old_data=old)

    def link_to_wali(self, *, wali_id: int, santri_ids: Sequence[int]) -> None:
        self._santri.replace_wali_links(int(wali_id), [int(i) for i in santri_ids])

    def list_for_wali(self, wali_id: int) -> Sequence[Santri]:
        return self._santri.list(wali_id=int(wali_id))


class KelasService:
    def __init__(self, kelas: KelasRepository):
        self._kelas = kelas

    def list(self) -> Sequence[Kelas]:
        return self._kelas.list_all()

    def get(self, kelas_id: int) -> Kelas:
        kelas = self._kelas.get_by_id(int(kelas_id))
        if not kelas:
            raise NotFoundError("Kelas tidak ditemukan")
        return kelas

    def save(self, *, kelas_id: Optional[int], nama: str, wali_kelas_id: Optional[int]) -> int:
        nama = require_non_empty(nama, "Nama kelas")
        if kelas_id:
            self._kelas.update(int(kelas_id), nama=nama, wali_kelas_id=wali_kelas_id)
            return int(kelas_id)
        return self._kelas.create(nama=nama, wali_kelas_id=wali_kelas_id)

    def delete(self, kelas_id: int) -> None:
        if not self._kelas.delete(int(kelas_id)):
            raise ValidationError("Gagal menghapus kelas")
