from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

import mysql.connector
from mysql.connector import errors, pooling

from ..core.constants import DEFAULT_DB_POOL_SIZE, DEFAULT_DB_TIMEOUT_MS
from ..core.exceptions import PersistenceError, StoreTimeoutError

logger = logging.getLogger(__name__)

# How often connect() re-checks an exhausted pool.
POOL_POLL_INTERVAL_S = 0.02


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    pool_size: int = DEFAULT_DB_POOL_SIZE
    timeout_ms: int = DEFAULT_DB_TIMEOUT_MS

    @classmethod
    def from_dict(cls, db_config: dict, *, pool_size: Optional[int] = None, timeout_ms: Optional[int] = None) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "volunteer_attendance")),
            pool_size=int(pool_size or DEFAULT_DB_POOL_SIZE),
            timeout_ms=int(timeout_ms or DEFAULT_DB_TIMEOUT_MS),
        )


class DatabaseConnection:
    """Connection pool handle injected into every repository.

    Created once by the container at startup and closed on shutdown.
    """

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool: Optional[pooling.MySQLConnectionPool] = None

    @property
    def timeout_ms(self) -> int:
        return self._config.timeout_ms

    def _ensure_pool(self) -> pooling.MySQLConnectionPool:
        if self._pool is None:
            try:
                self._pool = pooling.MySQLConnectionPool(
                    pool_name="volunteer_attendance",
                    pool_size=self._config.pool_size,
                    pool_reset_session=True,
                    host=self._config.host,
                    port=int(self._config.port),
                    user=self._config.user,
                    password=self._config.password,
                    database=self._config.database,
                    connection_timeout=max(1, self._config.timeout_ms // 1000),
                    autocommit=False,
                )
            except mysql.connector.Error as e:
                raise PersistenceError(f"Database unavailable: {e.msg}") from e
            logger.info(
                "connection pool ready: %s@%s:%s/%s (size=%s)",
                self._config.user,
                self._config.host,
                self._config.port,
                self._config.database,
                self._config.pool_size,
            )
        return self._pool

    def connect(self):
        """Borrow a pooled connection, waiting up to ``timeout_ms`` for one to be returned."""
        pool = self._ensure_pool()
        deadline = time.monotonic() + self._config.timeout_ms / 1000
        while True:
            try:
                return pool.get_connection()
            except errors.PoolError as e:
                if time.monotonic() >= deadline:
                    logger.warning("connection pool exhausted for %sms", self._config.timeout_ms)
                    raise StoreTimeoutError("No database connection available") from e
            except mysql.connector.Error as e:
                raise PersistenceError(f"Database unavailable: {e.msg}") from e
            time.sleep(POOL_POLL_INTERVAL_S)

    def close(self) -> None:
        if self._pool is None:
            return
        # mysql-connector exposes no public call that disconnects a pool's idle
        # connections. Borrowed ones stay with their holders.
        remove_idle = getattr(self._pool, "_remove_connections", None)
        try:
            if remove_idle is not None:
                remove_idle()
        except mysql.connector.Error:
            logger.warning("error while closing connection pool", exc_info=True)
        self._pool = None
        logger.info("connection pool closed")
