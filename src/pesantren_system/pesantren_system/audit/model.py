from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..core.enums import AuditAction


@dataclass(frozen=True)
class Actor:
    """Pengguna yang melakukan aksi (diambil dari sesi)."""

    user_id: Optional[int]
    email: Optional[str] = None


@dataclass(frozen=True)
class AuditLog:
    log_id: int
    user_id: Optional[int]
    action: AuditAction
    target_table: str
    module: str
    source: str
    meta_data: Optional[dict]
    old_data: Any
    new_data: Any
    created_at: datetime
    user_nama: Optional[str] = None

    @property
    def description(self) -> str:
        return (self.meta_data or {}).get("description") or ""

    @property
    def record_name(self) -> str:
        return (self.meta_data or {}).get("record_name") or ""


@dataclass(frozen=True)
class SuspiciousAccount:
    id: int
    user_id: Optional[int]
    email: Optional[str]
    risk_score: int
    reasons: Optional[str]
    last_activity: datetime
