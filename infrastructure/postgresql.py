# ============================================================================
# POSTGRESQL QUERY EXECUTOR
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Infrastructure - PostgreSQL collaborator for probes and metrics
# PURPOSE: No-op query and connection counting over an async pool
# CREATED: 19 OCT 2026
# ============================================================================
"""
PostgreSQL Query Executor

Narrow async wrapper around a psycopg_pool AsyncConnectionPool. The probe
service never reads application data; it only needs to:

- run a no-op query for the readiness check (SELECT 1)
- count active backend connections for the metrics page

Every psycopg failure is re-raised as DependencyUnavailable so the caller
sees a single error type regardless of driver details.

Usage:
    executor = PostgresQueryExecutor(dsn, connection_name="pgsql")
    await executor.open()
    await executor.execute("SELECT 1")
"""

import logging
from typing import Optional

from psycopg import Error as PsycopgError
from psycopg_pool import AsyncConnectionPool, PoolTimeout

from core.errors import DependencyUnavailable

logger = logging.getLogger(__name__)

ACTIVE_CONNECTIONS_SQL = (
    "SELECT count(*) FROM pg_stat_activity WHERE datname = current_database()"
)


def _safe_conninfo(conninfo: str) -> str:
    """Strip credentials before logging a connection string."""
    if "@" in conninfo:
        return conninfo.split("@")[-1]
    if "password=" in conninfo:
        return conninfo.split("password=")[0] + "password=***"
    return conninfo


class PostgresQueryExecutor:
    """
    Query executor backed by an async connection pool.

    The pool is opened without waiting for connections, so the service
    starts even when the database is down; the readiness probe reports it.
    """

    def __init__(
        self,
        conninfo: Optional[str],
        connection_name: str = "pgsql",
        min_size: int = 1,
        max_size: int = 5,
        acquire_timeout: float = 2.0,
    ):
        self.connection_name = connection_name
        self.acquire_timeout = acquire_timeout
        self._conninfo = conninfo
        self._pool: Optional[AsyncConnectionPool] = None
        if conninfo:
            self._pool = AsyncConnectionPool(
                conninfo=conninfo,
                min_size=min_size,
                max_size=max_size,
                open=False,
            )

    @property
    def is_configured(self) -> bool:
        return self._pool is not None

    async def open(self) -> None:
        if self._pool is None:
            logger.warning("DATABASE_URL not set, database checks will report unavailable")
            return
        logger.info(f"Opening connection pool: {_safe_conninfo(self._conninfo)}")
        await self._pool.open(wait=False)

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()

    def _require_pool(self) -> AsyncConnectionPool:
        if self._pool is None:
            raise DependencyUnavailable("database", "Database connection not configured")
        return self._pool

    async def execute(self, sql: str) -> None:
        """
        Execute a statement and discard the result.

        Raises:
            DependencyUnavailable: If no connection could be used
        """
        pool = self._require_pool()
        try:
            async with pool.connection(timeout=self.acquire_timeout) as conn:
                await conn.execute(sql)
        except PoolTimeout as e:
            raise DependencyUnavailable(
                "database", f"No connection available within {self.acquire_timeout}s"
            ) from e
        except PsycopgError as e:
            raise DependencyUnavailable("database", str(e)) from e

    async def active_connections(self) -> int:
        """Count backend connections to the current database."""
        pool = self._require_pool()
        try:
            async with pool.connection(timeout=self.acquire_timeout) as conn:
                cursor = await conn.execute(ACTIVE_CONNECTIONS_SQL)
                row = await cursor.fetchone()
        except PoolTimeout as e:
            raise DependencyUnavailable(
                "database", f"No connection available within {self.acquire_timeout}s"
            ) from e
        except PsycopgError as e:
            raise DependencyUnavailable("database", str(e)) from e
        return int(row[0]) if row else 0


__all__ = [
    "PostgresQueryExecutor",
]
