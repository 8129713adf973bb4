import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
APP_NAME = os.getenv("APP_NAME", "Sistem Informasi Pesantren")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "pesantren_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Tahun ajaran default untuk form jadwal
DEFAULT_TAHUN_AJARAN = os.getenv("DEFAULT_TAHUN_AJARAN", "2024/2025")
# Peringatan "saldo OTA hampir habis" bila saldo di bawah nilai ini (rupiah)
LOW_BALANCE_THRESHOLD = int(os.getenv("LOW_BALANCE_THRESHOLD", "100000"))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
