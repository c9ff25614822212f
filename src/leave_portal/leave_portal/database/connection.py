from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import mysql.connector

from ..core.exceptions import ConfigurationError


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connect_timeout: int = 5

    @classmethod
    def from_settings(cls, db_config: dict) -> "DBConfig":
        missing = [k for k in ("host", "user", "database") if not db_config.get(k)]
        if missing:
            raise ConfigurationError(f"Missing database settings: {', '.join(missing)}")
        return cls(
            host=str(db_config["host"]),
            port=int(db_config.get("port") or 3306),
            user=str(db_config["user"]),
            password=str(db_config.get("password") or ""),
            database=str(db_config["database"]),
            connect_timeout=int(db_config.get("connect_timeout") or 5),
        )


class DatabaseConnection:
    """Singleton-like DB connection factory.

    Note: We create short-lived connections per operation (safe for simple Flask apps).
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

    def connect(self):
        return mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            connection_timeout=self._config.connect_timeout,
        )
