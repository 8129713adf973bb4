import os

SECRET_KEY = "test-secret"
APP_NAME = "Sistem Informasi Pesantren (test)"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "pesantren_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

DEFAULT_TAHUN_AJARAN = "2024/2025"
LOW_BALANCE_THRESHOLD = 100000

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
