from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import UserProfile
from .repository import UserRepository

_COLUMNS = "user_id, nama, email, password_hash, roles, active_role, is_active"


def _parse_roles(value: Optional[str]) -> tuple[Role, ...]:
    out: list[Role] = []
    for part in (value or "").split(","):
        part = part.strip()
        if part:
            try:
                out.append(Role(part))
            except ValueError:
                continue
    return tuple(out)


def _row_to_user(row: dict) -> UserProfile:
    active = row.get("active_role")
    return UserProfile(
        user_id=int(row["user_id"]),
        nama=row["nama"],
        email=row["email"],
        password_hash=row["password_hash"],
        roles=_parse_roles(row.get("roles")),
        active_role=Role(active) if active in {r.value for r in Role} else None,
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[UserProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM user_profiles WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[UserProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM user_profiles WHERE email=%s", (email.strip().lower(),))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def create_user(self, *, nama: str, email: str, password_hash: str, roles: Sequence[Role]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO user_profiles(nama, email, password_hash, roles, active_role, is_active)
                VALUES(%s,%s,%s,%s,%s,1)
                """,
                (nama, email, password_hash, ",".join(r.value for r in roles), roles[0].value if roles else None),
            )
            return int(cur.lastrowid)

    def set_roles(self, user_id: int, *, roles: Sequence[Role]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE user_profiles SET roles=%s WHERE user_id=%s",
                (",".join(r.value for r in roles), int(user_id)),
            )
            return cur.rowcount > 0

    def set_active_role(self, user_id: int, *, role: Role) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE user_profiles SET active_role=%s WHERE user_id=%s", (role.value, int(user_id)))
            return cur.rowcount > 0

    def delete_by_id(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM user_profiles WHERE user_id=%s", (int(user_id),))
            return cur.rowcount > 0

    def list_all(self) -> Sequence[UserProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM user_profiles ORDER BY nama")
            return [_row_to_user(r) for r in fetchall(cur)]

    def list_by_role(self, role: Role) -> Sequence[UserProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM user_profiles WHERE FIND_IN_SET(%s, roles) > 0 ORDER BY nama",
                (role.value,),
            )
            return [_row_to_user(r) for r in fetchall(cur)]
