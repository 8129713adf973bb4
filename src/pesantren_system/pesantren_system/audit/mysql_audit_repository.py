from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import AuditAction
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, from_json, to_json
from .model import AuditLog, SuspiciousAccount
from .repository import AuditRepository, SuspiciousAccountRepository


class MySQLAuditRepository(AuditRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO audit_logs(user_id, action, target_table, module, source, meta_data, old_data, new_data)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    user_id,
                    action.value,
                    target_table,
                    module,
                    source,
                    to_json(meta_data),
                    to_json(old_data),
                    to_json(new_data),
                ),
            )
            return int(cur.lastrowid)

    def list_logs(
        self,
        *,
        action: Optional[AuditAction] = None,
        module: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 200,
    ) -> Sequence[AuditLog]:
        clauses = ["1=1"]
        params: list[object] = []
        if action:
            clauses.append("a.action=%s")
            params.append(action.value)
        if module:
            clauses.append("a.module=%s")
            params.append(module)
        if search:
            clauses.append("(a.meta_data LIKE %s OR u.nama LIKE %s)")
            params.extend([f"%{search}%", f"%{search}%"])
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT a.log_id, a.user_id, a.action, a.target_table, a.module, a.source,
                       a.meta_data, a.old_data, a.new_data, a.created_at, u.nama AS user_nama
                FROM audit_logs a
                LEFT JOIN user_profiles u ON u.user_id = a.user_id
                WHERE {" AND ".join(clauses)}
                ORDER BY a.created_at DESC, a.log_id DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [
                AuditLog(
                    log_id=int(r["log_id"]),
                    user_id=r.get("user_id"),
                    action=AuditAction(r["action"]),
                    target_table=r["target_table"],
                    module=r["module"],
                    source=r["source"],
                    meta_data=from_json(r.get("meta_data")),
                    old_data=from_json(r.get("old_data")),
                    new_data=from_json(r.get("new_data")),
                    created_at=r["created_at"],
                    user_nama=r.get("user_nama"),
                )
                for r in fetchall(cur)
            ]

    def list_modules(self) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT DISTINCT module FROM audit_logs ORDER BY module")
            return [r["module"] for r in fetchall(cur)]


class MySQLSuspiciousAccountRepository(SuspiciousAccountRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[SuspiciousAccount]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, user_id, email, risk_score, reasons, last_activity
                FROM suspicious_accounts
                ORDER BY last_activity DESC
                """
            )
            return [
                SuspiciousAccount(
                    id=int(r["id"]),
                    user_id=r.get("user_id"),
                    email=r.get("email"),
                    risk_score=int(r["risk_score"]),
                    reasons=r.get("reasons"),
                    last_activity=r["last_activity"],
                )
                for r in fetchall(cur)
            ]

    def delete(self, account_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM suspicious_accounts WHERE id=%s", (int(account_id),))
            return cur.rowcount > 0
