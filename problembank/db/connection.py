"""Pooled Postgres connections for the problem bank store."""

import logging
import os
from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional

import psycopg
from psycopg.conninfo import make_conninfo
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

logger = logging.getLogger(__name__)


class DatabaseConfig:
    """Connection settings read from the ``postgres`` config section."""

    def __init__(self, config: Dict[str, Any]) -> None:
        self.host = config.get("host") or "localhost"
        self.port = config.get("port") or 5432
        self.database = config.get("database") or "problembank"
        self.user = config.get("user") or "problembank_user"
        self.pool_min_size = config.get("pool_min_size") or 1
        self.pool_max_size = max(config.get("pool_max_size") or 10, self.pool_min_size)

        # Explicit password wins over the environment variable
        self.password = config.get("password") or ""
        password_env = config.get("password_env")
        if not self.password and password_env:
            self.password = os.environ.get(password_env, "")

    @property
    def conninfo(self) -> str:
        """libpq connection string; values are quoted, so any password is safe."""
        params = {
            "host": self.host,
            "port": self.port,
            "dbname": self.database,
            "user": self.user,
        }
        if self.password:
            params["password"] = self.password
        return make_conninfo(**params)

    def describe(self) -> str:
        """Connection target without the password, for log lines."""
        return f"{self.user}@{self.host}:{self.port}/{self.database}"


_connection_pool: Optional[ConnectionPool] = None
_pool_conninfo: Optional[str] = None


def get_connection_pool(config: Dict[str, Any]) -> ConnectionPool:
    """Return the process-wide pool, reopening it if the settings changed."""
    global _connection_pool, _pool_conninfo
    db_config = DatabaseConfig(config)
    conninfo = db_config.conninfo

    if _connection_pool is not None and _pool_conninfo != conninfo:
        logger.info("Database settings changed; reopening connection pool")
        close_connection_pool()

    if _connection_pool is None:
        logger.debug("Opening connection pool to %s", db_config.describe())
        _connection_pool = ConnectionPool(
            conninfo,
            min_size=db_config.pool_min_size,
            max_size=db_config.pool_max_size,
            kwargs={"row_factory": dict_row},
            name="problembank",
            open=True,
        )
        _pool_conninfo = conninfo
    return _connection_pool


def close_connection_pool() -> None:
    """Close the process-wide pool if one is open."""
    global _connection_pool, _pool_conninfo
    if _connection_pool is None:
        return
    _connection_pool.close()
    _connection_pool = None
    _pool_conninfo = None


@contextmanager
def get_connection(config: Dict[str, Any]) -> Generator[psycopg.Connection, None, None]:
    """Borrow a dict-row connection from the pool for the duration of the block."""
    pool = get_connection_pool(config)
    with pool.connection() as conn:
        yield conn
