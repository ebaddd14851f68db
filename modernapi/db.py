"""Database connection pool set up from the application configuration."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import QueuePool

from modernapi.configs import ConnectionPool, DatabaseConfig

log = logging.getLogger(__name__)


def build_dsn(config: DatabaseConfig) -> str:
    """Return the key=value connection string for ``config``."""
    return (
        f"host={config.host} port={config.port} user={config.username} "
        f"dbname={config.dbname} password={config.password} "
        f"sslmode={config.ssl_mode} connect_timeout={config.connection.timeout}"
    )


def engine_options(connection: ConnectionPool) -> dict[str, Any]:
    """Translate pool limits into pool_size, max_overflow and pool_recycle."""
    lifetimes = [s for s in (connection.max_life_time, connection.max_idle_time) if s > 0]
    idle = max(connection.max_idle_connections, 1)
    if connection.max_open_connections > 0:
        pool_size = min(idle, connection.max_open_connections)
        max_overflow = connection.max_open_connections - pool_size
    else:
        pool_size, max_overflow = idle, -1
    return {
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_recycle": min(lifetimes) if lifetimes else -1,
    }


def provide_db_conn(config: DatabaseConfig, url: str | URL | None = None) -> Engine:
    """Create a pooled engine for ``config`` (or ``url``) and check that it answers."""
    if url is None:
        query = {"connect_timeout": str(config.connection.timeout)}
        if config.ssl_mode:
            query["sslmode"] = config.ssl_mode
        url = URL.create(
            "postgresql",
            username=config.username or None,
            password=config.password or None,
            host=config.host or None,
            port=config.port or None,
            database=config.dbname or None,
            query=query,
        )
    try:
        engine = create_engine(url, poolclass=QueuePool, **engine_options(config.connection))
    except (SQLAlchemyError, ImportError) as exc:
        raise ConnectionError(f"GetDB.gorm.Open: failed to connect to db: {exc}") from exc
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        engine.dispose()
        raise ConnectionError(f"Setup.sqlDB.Ping: {exc}") from exc
    log.info("Created DB connection pool %s", engine.pool.status())
    return engine