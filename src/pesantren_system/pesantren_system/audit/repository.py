from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from ..core.enums import AuditAction
from .model import AuditLog, SuspiciousAccount


class AuditRepository(Protocol):
    def insert(
        self,
        *,
        user_id: Optional[int],
        action: AuditAction,
        target_table: str,
        module: str,
        source: str,
        meta_data: dict,
        old_data: Any,
        new_data: Any,
    ) -> int:
        raise NotImplementedError

    def list_logs(
        self,
        *,
        action: Optional[AuditAction] = None,
        module: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 200,
    ) -> Sequence[AuditLog]:
        raise NotImplementedError

    def list_modules(self) -> Sequence[str]:
        raise NotImplementedError


class SuspiciousAccountRepository(Protocol):
    def list_all(self) -> Sequence[SuspiciousAccount]:
        """Ordered by last_activity, newest first."""

        raise NotImplementedError

    def delete(self, account_id: int) -> bool:
        raise NotImplementedError
