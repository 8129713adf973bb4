from __future__ import annotations

from typing import Optional, Sequence

from ..audit.model import Actor
from ..audit.service import AuditService
from ..common.validators import optional_text, require_non_empty
from ..core.exceptions import NotFoundError, ValidationError
from .model import Guru
from .repository import GuruRepository


class GuruService:
    def __init__(self, guru: GuruRepository, audit: Optional[AuditService] = None):
        self._guru = guru
        self._audit = audit

    def list(self) -> Sequence[Guru]:
        return self._guru.list_all()

    def get(self, guru_id: int) -> Guru:
        guru = self._guru.get_by_id(int(guru_id))
        if not guru:
            raise NotFoundError("Guru tidak ditemukan")
        return guru

    def find_by_email(self, email: Optional[str]) -> Optional[Guru]:
        """Guru record of the logged-in account (matched by email)."""
        if not email:
            return None
        return self._guru.get_by_email(email)

    def _clean(self, data: dict) -> dict:
        email = optional_text(data.get("email"))
        if email and "@" not in email:
            raise ValidationError("Format email tidak valid")
        return {
            "nip": optional_text(data.get("nip")),
            "nama": require_non_empty(data.get("nama"), "Nama guru"),
            "email": email.lower() if email else None,
            "no_hp": optional_text(data.get("no_hp")),
            "jabatan": optional_text(data.get("jabatan")),
            "status": data.get("status") or "Aktif",
        }

    def create(self, data: dict, *, actor: Optional[Actor] = None) -> int:
        clean = self._clean(data)
        guru_id = self._guru.create(clean)
        if self._audit:
            self._audit.log_create("guru", actor=actor, record_id=guru_id, record_name=clean["nama"], new_data=clean)
        return guru_id

    def update(self, guru_id: int, data: dict, *, actor: Optional[Actor] = None) -> None:
        old = self.get(guru_id)
        clean = self._clean(data)
        self._guru.update(old.guru_id, clean)
        if self._audit:
            self._audit.log_update(
                "guru", actor=actor, record_id=old.guru_id, record_name=clean["nama"], old_data=old, new_data=clean
            )

    def delete(self, guru_id: int, *, actor: Optional[Actor] = None) -> None:
        old = self.get(guru_id)
        if not self._guru.delete(old.guru_id):
            raise ValidationError("Gagal menghapus guru")
        if self._audit:
            self._audit.log_delete("guru", actor=actor, record_id=old.guru_id, record_name=old.nama, old_data=old)
