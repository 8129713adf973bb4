from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

import mysql.connector


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DBConfig":
        return cls(
            host=str(data.get("host", "localhost")),
            port=int(data.get("port", 3306)),
            user=str(data.get("user", "root")),
            password=str(data.get("password", "")),
            database=str(data.get("database", "pesantren_db")),
        )


class DatabaseConnection:
    """Pabrik koneksi MySQL (satu instance per proses).

    Koneksi dibuat singkat per operasi repository; cukup untuk aplikasi Flask
    sederhana tanpa connection pool.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def config(self) -> DBConfig:
        return self._config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None or cls._instance.config != config:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def connect(self, *, with_database: bool = True):
        kwargs: dict[str, Any] = {
            "host": self._config.host,
            "port": int(self._config.port),
            "user": self._config.user,
            "password": self._config.password,
            "charset": "utf8mb4",
            "use_pure": True,
        }
        if with_database:
            kwargs["database"] = self._config.database
        return mysql.connector.connect(**kwargs)
