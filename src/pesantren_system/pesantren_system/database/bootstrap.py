"""Inisialisasi database: buat database, jalankan schema.sql / seed.sql, akun demo."""

from __future__ import annotations

import logging
import re
from contextlib import closing
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from .connection import DatabaseConnection, DBConfig

logger = logging.getLogger(__name__)

# (nama, email, password, roles); peran pertama menjadi active_role
DEMO_USERS = [
    ("Administrator", "admin@pesantren.local", "admin123", ["admin"]),
    ("Ustadz Ahmad", "guru@pesantren.local", "guru123", ["guru", "musyrif"]),
    ("Bendahara Pondok", "bendahara@pesantren.local", "bendahara123", ["bendahara"]),
    ("Bapak Wali", "wali@pesantren.local", "wali123", ["wali"]),
    ("Donatur OTA", "ota@pesantren.local", "ota123", ["ota"]),
    ("Pengurus Pondok", "pengurus@pesantren.local", "pengurus123", ["pengurus"]),
]


def _factory(db_config: dict) -> DatabaseConnection:
    return DatabaseConnection(DBConfig.from_mapping(db_config))


_DB_SELECTION = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b[^;]*;\s*$")


def _prepare_script(sql: str) -> str:
    """Buang komentar `--` serta CREATE DATABASE/USE; nama database diambil dari config."""
    sql = _DB_SELECTION.sub("", sql)
    return "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ';' outside quoted strings."""
    buf: list[str] = []
    quote_char = ""
    escape = False

    for ch in sql:
        buf.append(ch)
        if escape:
            escape = False
            continue
        if ch == "\\":
            escape = True
            continue
        if quote_char:
            if ch == quote_char:
                quote_char = ""
            continue
        if ch in ("'", '"'):
            quote_char = ch
            continue
        if ch == ";":
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_script(db_config: dict, path: str | Path) -> int:
    sql = _prepare_script(Path(path).read_text(encoding="utf-8"))
    count = 0
    with closing(_factory(db_config).connect()) as conn:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    return count


def ensure_database_exists(db_config: dict) -> None:
    factory = _factory(db_config)
    with closing(factory.connect(with_database=False)) as conn:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{factory.config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _run_script(db_config, schema_path)
    logger.info("schema applied (%s statements)", count)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = _run_script(db_config, seed_path)
    logger.info("seed applied (%s statements)", count)


def ensure_demo_users(db_config: dict) -> None:
    """Create or refresh the demo accounts (one per role)."""
    with closing(_factory(db_config).connect()) as conn:
        cur = conn.cursor(dictionary=True)
        for nama, email, password, roles in DEMO_USERS:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT user_id FROM user_profiles WHERE email=%s", (email,))
            existing = cur.fetchone()
            if existing:
                cur.execute(
                    """
                    UPDATE user_profiles
                    SET nama=%s, password_hash=%s, roles=%s, active_role=%s, is_active=1
                    WHERE email=%s
                    """,
                    (nama, password_hash, ",".join(roles), roles[0], email),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO user_profiles(nama, email, password_hash, roles, active_role, is_active)
                    VALUES(%s,%s,%s,%s,%s,1)
                    """,
                    (nama, email, password_hash, ",".join(roles), roles[0]),
                )
        conn.commit()
    logger.info("demo users ready (%s accounts)", len(DEMO_USERS))


def list_tables(db_config: dict) -> list[str]:
    with closing(_factory(db_config).connect()) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
