"""PostgreSQL source adapter.

Implements SourcePort using PostgreSQL with asyncpg for async access.
Tables are created from the model schema on first use.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Any

import asyncpg

from strata.core.errors import SourceError
from strata.core.ports import SourcePort
from strata.core.query import Query

from .sql import POSTGRESQL

if TYPE_CHECKING:
    from strata.core.model import Model

logger = logging.getLogger(__name__)


class PostgreSQLSource(SourcePort):
    """PostgreSQL-backed source with connection pooling and async access."""

    features = {
        "relationships": True,
        "booleans": True,
        "arrays": True,
        "transactions": False,
    }

    def __init__(
        self,
        host: str = "localhost",
        port: int = 5432,
        database: str = "strata",
        user: str = "strata",
        password: str = "",
        pool_size: int = 10,
    ):
        """Initialize PostgreSQL source with connection pooling.

        Args:
            host: PostgreSQL server hostname.
            port: PostgreSQL server port.
            database: Database name.
            user: Database user.
            password: Database password.
            pool_size: Number of connections to maintain in the pool.
        """
        self.host = host
        self.port = port
        self.database = database
        self.user = user
        self.password = password
        self._pool: asyncpg.Pool | None = None
        self._pool_size = pool_size
        self._pool_lock = asyncio.Lock()
        self._tables: set[str] = set()

    async def _init_pool(self) -> asyncpg.Pool:
        """Initialize the connection pool on first use."""
        async with self._pool_lock:
            if self._pool is None:
                try:
                    self._pool = await asyncpg.create_pool(
                        host=self.host,
                        port=self.port,
                        database=self.database,
                        user=self.user,
                        password=self.password,
                        min_size=1,
                        max_size=self._pool_size,
                    )
                except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
                    logger.error(
                        f"Failed to connect to PostgreSQL at {self.host}:{self.port}: {e}"
                    )
                    raise SourceError(
                        f"Cannot connect to PostgreSQL: {e}", source="postgresql"
                    ) from e
                logger.info(
                    f"Connected to PostgreSQL {self.database} at {self.host}:{self.port}"
                )
            return self._pool

    async def close_pool(self) -> None:
        """Close all pooled connections."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    async def connect(self) -> None:
        await self._init_pool()

    async def disconnect(self) -> None:
        await self.close_pool()

    async def is_connected(self, auto_connect: bool = False) -> bool:
        if self._pool is None and auto_connect:
            try:
                await self.connect()
            except SourceError as e:
                logger.warning(f"PostgreSQL not available: {e}")
                return False
        return self._pool is not None

    async def prepare(self, model: "type[Model]") -> None:
        await self._ensure_table(model.query())

    async def _ensure_table(self, query: Query) -> None:
        """Create the table for ``query.source`` once per instance."""
        if query.source in self._tables:
            return
        await self._run("execute", POSTGRESQL.create_table(query), [])
        self._tables.add(query.source)

    async def _run(self, method: str, sql: str, params: list[Any]) -> Any:
        """Call ``execute``/``fetch``/``fetchval`` on a pooled connection."""
        pool = await self._init_pool()
        logger.debug(f"PostgreSQL: {sql} {params}")
        try:
            async with pool.acquire() as conn:
                return await getattr(conn, method)(sql, *params)
        except (asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            logger.error(f"PostgreSQL statement failed: {e} ({sql})")
            raise SourceError(
                f"PostgreSQL statement failed: {e}", source="postgresql"
            ) from e

    @staticmethod
    def _affected(status: str) -> int:
        """Row count from a command status such as ``DELETE 3``."""
        try:
            return int(status.rsplit(" ", 1)[-1])
        except (ValueError, AttributeError):
            return 0

    async def create(self, query: Query, data: dict[str, Any]) -> Any:
        await self._ensure_table(query)
        sql, params = POSTGRESQL.insert(query, data)
        return await self._run("fetchval", sql, params)

    async def read(self, query: Query) -> list[dict[str, Any]]:
        await self._ensure_table(query)
        sql, params = POSTGRESQL.select(query)
        rows = await self._run("fetch", sql, params)
        return [dict(row) for row in rows]

    async def count(self, query: Query) -> int:
        await self._ensure_table(query)
        sql, params = POSTGRESQL.count(query)
        return await self._run("fetchval", sql, params)

    async def update(self, query: Query, data: dict[str, Any]) -> int:
        await self._ensure_table(query)
        sql, params = POSTGRESQL.update(query, data)
        return self._affected(await self._run("execute", sql, params))

    async def delete(self, query: Query) -> int:
        await self._ensure_table(query)
        sql, params = POSTGRESQL.delete(query)
        return self._affected(await self._run("execute", sql, params))


__all__ = ["PostgreSQLSource"]
