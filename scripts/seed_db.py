"""Isi data contoh (seed.sql) dan akun demo untuk setiap peran."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.pesantren_system.pesantren_system.database.bootstrap import apply_seed_sql, ensure_demo_users


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    ensure_demo_users(db_config)
    print(f"OK: data contoh dimuat ke {db_config.get('database')}@{db_config.get('host')}")


if __name__ == "__main__":
    main()
