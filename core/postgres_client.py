"""
PostgreSQL Client Wrapper for the Shopster services

asyncpg connection pool with service discovery for host/port and a small
query API shared by every repository.

Usage:
    from core.postgres_client import PostgresClientWrapper

    db = PostgresClientWrapper("membership_service")

    async with db:
        rows = await db.query("SELECT * FROM membership.plans WHERE active = $1", [True])
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence, TYPE_CHECKING

import asyncpg

from core.config import InfraConfig

if TYPE_CHECKING:
    from core.config_manager import ConfigManager

logger = logging.getLogger(__name__)


class PostgresClientWrapper:
    """
    PostgreSQL client wrapper.

    The pool is created lazily on first use, so constructing a repository
    never touches the network.
    """

    def __init__(
        self,
        service_name: str,
        host: Optional[str] = None,
        port: Optional[int] = None,
        database: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        infra: Optional[InfraConfig] = None,
        config: Optional["ConfigManager"] = None,
    ):
        """
        Initialize PostgreSQL client wrapper.

        Args:
            service_name: Name of the service using this client
            host: PostgreSQL host (defaults to env/service discovery)
            port: PostgreSQL port (defaults to 5432)
            database: Database name
            username: Database username
            password: Database password
            infra: Connection settings (defaults to the config's infrastructure)
            config: ConfigManager used for discovery
        """
        from core.config_manager import ConfigManager

        self.service_name = service_name

        if config is None:
            config = ConfigManager(service_name)
        infra = infra or config.settings.infrastructure

        discovered_host, discovered_port = config.discover_service(
            service_name="postgres_service",
            default_host=infra.postgres_host,
            default_port=infra.postgres_port,
            env_host_key="POSTGRES_HOST",
            env_port_key="POSTGRES_PORT",
        )

        self.host = host or discovered_host
        self.port = port or discovered_port
        self.database = database or infra.postgres_db
        self.username = username or infra.postgres_user
        self.password = password or infra.postgres_password
        self.min_size = infra.postgres_min_pool
        self.max_size = infra.postgres_max_pool

        self._pool: Optional[asyncpg.Pool] = None
        self._pool_lock: Optional[asyncio.Lock] = None

        logger.info(
            f"PostgreSQL client for {service_name}: {self.host}:{self.port}/{self.database}"
        )

    async def connect(self) -> asyncpg.Pool:
        if self._pool is not None:
            return self._pool

        # Created on first use so it binds to the running loop
        if self._pool_lock is None:
            self._pool_lock = asyncio.Lock()

        async with self._pool_lock:
            if self._pool is None:
                self._pool = await asyncpg.create_pool(
                    host=self.host,
                    port=self.port,
                    database=self.database,
                    user=self.username,
                    password=self.password,
                    min_size=self.min_size,
                    max_size=self.max_size,
                )
                logger.info(f"PostgreSQL pool opened for {self.service_name}")
        return self._pool

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info(f"PostgreSQL pool closed for {self.service_name}")

    async def __aenter__(self) -> "PostgresClientWrapper":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        # Pool outlives the block; close() releases it at shutdown
        return None

    async def query(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        """Execute SELECT and return rows as dicts"""
        pool = await self.connect()
        rows = await pool.fetch(sql, *(params or []))
        return [dict(row) for row in rows]

    async def query_row(self, sql: str, params: Optional[Sequence[Any]] = None) -> Optional[Dict[str, Any]]:
        """Execute SELECT and return the first row or None"""
        pool = await self.connect()
        row = await pool.fetchrow(sql, *(params or []))
        return dict(row) if row is not None else None

    async def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> int:
        """Execute a statement and return the number of affected rows"""
        pool = await self.connect()
        status = await pool.execute(sql, *(params or []))
        # asyncpg returns e.g. "UPDATE 1" / "INSERT 0 1"
        try:
            return int(status.split()[-1])
        except (ValueError, IndexError):
            return 0

    async def execute_script(self, sql: str) -> None:
        """Run a multi-statement script (schema setup)"""
        pool = await self.connect()
        async with pool.acquire() as conn:
            await conn.execute(sql)

    async def health_check(self) -> bool:
        try:
            pool = await self.connect()
            return await pool.fetchval("SELECT 1") == 1
        except Exception as e:
            logger.warning(f"PostgreSQL health check failed for {self.service_name}: {e}")
            return False


__all__ = ["PostgresClientWrapper"]
