from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

import mysql.connector
from mysql.connector import pooling


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    pool_size: int = 0

    @classmethod
    def from_mapping(cls, db_config: Mapping[str, Any]) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "course_attendance")),
            pool_size=int(db_config.get("pool_size", 0) or 0),
        )

    def connect_kwargs(self, *, with_database: bool = True) -> dict:
        kwargs: dict[str, Any] = dict(
            host=self.host,
            port=self.port,
            user=self.user,
            password=self.password,
        )
        if with_database:
            kwargs["database"] = self.database
        return kwargs


class DatabaseConnection:
    """Hands out connections to units of work, one instance per config.

    With ``pool_size`` > 0 connections come from a mysql-connector pool and
    ``close()`` hands them back; otherwise every unit of work opens its own.
    Autocommit is always off.
    """

    _instances: dict[DBConfig, "DatabaseConnection"] = {}

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool: Optional[pooling.MySQLConnectionPool] = None

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if config not in cls._instances:
            cls._instances[config] = cls(config)
        return cls._instances[config]

    @property
    def config(self) -> DBConfig:
        return self._config

    def _get_pool(self) -> pooling.MySQLConnectionPool:
        if self._pool is None:
            self._pool = pooling.MySQLConnectionPool(
                pool_name=f"course_attendance_{self._config.database}",
                pool_size=self._config.pool_size,
                autocommit=False,
                **self._config.connect_kwargs(),
            )
        return self._pool

    def connect(self):
        if self._config.pool_size > 0:
            return self._get_pool().get_connection()
        return mysql.connector.connect(autocommit=False, **self._config.connect_kwargs())
