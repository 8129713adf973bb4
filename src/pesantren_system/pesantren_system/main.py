from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, render_template

from config import get_settings_module

from .common.formatting import register_filters
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables

from .container import build_container
from .audit.controller import register as register_audit
from .guru.controller import register as register_guru
from .halaqoh.controller import register as register_halaqoh
from .jadwal.controller import register as register_jadwal
from .jurnal.controller import register as register_jurnal
from .kalender.controller import register as register_kalender
from .komunikasi.controller import register as register_komunikasi
from .ota.controller import register as register_ota
from .ota.keuangan_controller import register as register_ota_keuangan
from .presensi.controller import register as register_presensi
from .santri.controller import register as register_santri
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__, template_folder="../../../templates", static_folder="../../../static")

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["APP_NAME"] = getattr(settings, "APP_NAME", "Sistem Informasi Pesantren")

    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
        ensure_demo_users(db_config)
        logger.info("demo seed ready")

    container = build_container(
        db_config=db_config,
        default_tahun_ajaran=getattr(settings, "DEFAULT_TAHUN_AJARAN"),
        low_balance_threshold=getattr(settings, "LOW_BALANCE_THRESHOLD"),
    )

    register_filters(app)

    @app.context_processor
    def inject_app_name():
        return {"app_name": app.config["APP_NAME"]}

    @app.errorhandler(403)
    def forbidden(_e):
        return render_template("403.html"), 403

    register_users(app, container)
    register_santri(app, container)
    register_guru(app, container)
    register_halaqoh(app, container)
    register_presensi(app, container)
    register_jadwal(app, container)
    register_jurnal(app, container)
    register_kalender(app, container)
    register_ota(app, container)
    register_ota_keuangan(app, container)
    register_komunikasi(app, container)
    register_audit(app, container)

    return app
