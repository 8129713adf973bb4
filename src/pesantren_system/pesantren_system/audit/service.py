from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from typing import Any, Iterable, Optional, Sequence

from ..core.constants import DEFAULT_AUDIT_LIMIT, RISK_HIGH_MIN, RISK_MEDIUM_MIN
from ..core.enums import AuditAction, RiskLevel, Role
from ..core.exceptions import AuthorizationError, ValidationError
from .model import Actor, AuditLog, SuspiciousAccount
from .repository import AuditRepository, SuspiciousAccountRepository

logger = logging.getLogger(__name__)

AUDIT_SOURCE = "WEB"


def _snapshot(value: Any) -> Any:
    if value is None:
        return None
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    return value


class AuditService:
    """Catat aktivitas pengguna ke audit_logs.

    Pencatatan tidak boleh menggagalkan aksi utama: bila insert gagal,
    kesalahan dicatat ke logger dan method mengembalikan False.
    """

    def __init__(self, logs: AuditRepository, suspicious: SuspiciousAccountRepository):
        self._logs = logs
        self._suspicious = suspicious

    def log_activity(
        self,
        *,
        action: AuditAction,
        table: str,
        actor: Optional[Actor] = None,
        record_id: Any = None,
        record_name: Optional[str] = None,
        description: Optional[str] = None,
        old_data: Any = None,
        new_data: Any = None,
    ) -> bool:
        meta = {
            "record_name": record_name,
            "description": description or f"{action.value} {table}",
            "record_id": record_id,
            "user_email": actor.email if actor else None,
        }
        try:
            self._logs.insert(
                user_id=actor.user_id if actor else None,
                action=action,
                target_table=table,
                module=table.upper(),
                source=AUDIT_SOURCE,
                meta_data=meta,
                old_data=_snapshot(old_data),
                new_data=_snapshot(new_data),
            )
            return True
        except Exception:
            logger.exception("audit log failed action=%s table=%s", action.value, table)
            return False

    def log_create(self, table: str, *, actor: Optional[Actor], record_id: Any, record_name: str, new_data: Any = None) -> bool:
        return self.log_activity(
            action=AuditAction.CREATE,
            table=table,
            actor=actor,
            record_id=record_id,
            record_name=record_name,
            description=f"Menambah {table}: {record_name}",
            new_data=new_data,
        )

    def log_update(
        self, table: str, *, actor: Optional[Actor], record_id: Any, record_name: str, old_data: Any = None, new_data: Any = None
    ) -> bool:
        return self.log_activity(
            action=AuditAction.UPDATE,
            table=table,
            actor=actor,
            record_id=record_id,
            record_name=record_name,
            description=f"Mengubah {table}: {record_name}",
            old_data=old_data,
            new_data=new_data,
        )

    def log_delete(self, table: str, *, actor: Optional[Actor], record_id: Any, record_name: str, old_data: Any = None) -> bool:
        return self.log_activity(
            action=AuditAction.DELETE,
            table=table,
            actor=actor,
            record_id=record_id,
            record_name=record_name,
            description=f"Menghapus {table}: {record_name}",
            old_data=old_data,
        )

    def log_input(self, table: str, *, actor: Optional[Actor], description: str, new_data: Any = None) -> bool:
        return self.log_activity(action=AuditAction.INPUT, table=table, actor=actor, description=description, new_data=new_data)

    def list_logs(
        self,
        *,
        action: Optional[str] = None,
        module: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = DEFAULT_AUDIT_LIMIT,
    ) -> Sequence[AuditLog]:
        parsed: Optional[AuditAction] = None
        if action and action != "ALL":
            try:
                parsed = AuditAction(action)
            except ValueError:
                raise ValidationError("Jenis aksi tidak dikenal")
        return self._logs.list_logs(
            action=parsed,
            module=module if module and module != "ALL" else None,
            search=(search or "").strip() or None,
            limit=limit,
        )

    def list_modules(self) -> Sequence[str]:
        return self._logs.list_modules()

    def list_suspicious(self, level: str = RiskLevel.ALL.value) -> list[SuspiciousAccount]:
        return filter_by_risk(self._suspicious.list_all(), level)

    def reset_suspicious(self, *, current_role: Role, account_id: int) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Anda tidak memiliki akses")
        if not self._suspicious.delete(int(account_id)):
            raise ValidationError("Data tidak ditemukan")


def filter_by_risk(accounts: Iterable[SuspiciousAccount], level: str) -> list[SuspiciousAccount]:
    """HIGH: skor >= 50, MEDIUM: 20..49, selain itu semua."""
    level = (level or RiskLevel.ALL.value).upper()
    if level == RiskLevel.HIGH.value:
        return [a for a in accounts if a.risk_score >= RISK_HIGH_MIN]
    if level == RiskLevel.MEDIUM.value:
        return [a for a in accounts if RISK_MEDIUM_MIN <= a.risk_score < RISK_HIGH_MIN]
    return list(accounts)
