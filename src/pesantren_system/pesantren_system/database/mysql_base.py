from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import time, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True) -> Iterator[Tuple[Any, Any]]:
    """Satu blok `with` = satu transaksi.

    Commit kalau blok selesai normal, rollback kalau ada exception apa pun.
    """
    conn = conn_factory.connect()
    cur = None
    try:
        cur = conn.cursor(dictionary=dictionary)
        yield conn, cur
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        if cur is not None:
            cur.close()
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    return cur.fetchone() or None


def fetchall(cur) -> List[Dict[str, Any]]:
    return [row for row in cur.fetchall() or ()]


def placeholders(values: Sequence[Any]) -> str:
    """'%s,%s,%s' for an IN (...) clause."""
    return ",".join(["%s"] * len(values))


def to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_json(value: Any) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value, default=str, ensure_ascii=False)


def from_json(value: Any) -> Any:
    if value is None or isinstance(value, (dict, list)):
        return value
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    return json.loads(value) if value else None


def _time_from_seconds(total: int) -> time:
    total %= 24 * 3600
    minutes, second = divmod(total, 60)
    hour, minute = divmod(minutes, 60)
    return time(hour, minute, second)


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Kolom TIME (jam_mulai/jam_selesai) -> datetime.time.

    Connector bisa mengembalikan time, timedelta, atau string 'HH:MM[:SS]'.
    """
    if value is None or isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        return _time_from_seconds(int(value.total_seconds()))
    if isinstance(value, str):
        pieces = [p for p in value.strip().split(":")]
        if len(pieces) not in (2, 3) or not all(p.isdigit() for p in pieces):
            raise ValueError(f"Format jam tidak valid: {value!r}")
        numbers = [int(p) for p in pieces] + [0]
        return time(numbers[0], numbers[1], numbers[2])
    raise TypeError(f"Tipe TIME tidak didukung: {type(value)!r}")
