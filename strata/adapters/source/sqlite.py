"""SQLite source adapter.

Implements SourcePort using SQLite with aiosqlite for async access.
Tables are created from the model schema on first use.
"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import aiosqlite

from strata.core.errors import SourceError
from strata.core.ports import SourcePort
from strata.core.query import Query

from .sql import SQLITE

if TYPE_CHECKING:
    from strata.core.model import Model

logger = logging.getLogger(__name__)


class SQLiteSource(SourcePort):
    """SQLite-backed source with connection pooling and async access."""

    features = {
        "relationships": True,
        "booleans": True,
        "arrays": False,
        "transactions": False,
    }

    def __init__(self, db_path: str, pool_size: int = 5):
        """Initialize SQLite source with connection pooling.

        Args:
            db_path: Path to SQLite database file.
            pool_size: Number of connections to maintain in the pool.
        """
        self.db_path = Path(db_path)
        self._pool: list[aiosqlite.Connection] = []
        self._pool_lock = asyncio.Lock()
        self._pool_size = pool_size
        self._tables: set[str] = set()
        self._connected = False

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get a connection from the pool or create a new one."""
        async with self._pool_lock:
            if self._pool:
                return self._pool.pop()
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = await aiosqlite.connect(str(self.db_path))
        except (OSError, aiosqlite.Error) as e:
            logger.error(f"Failed to open SQLite database {self.db_path}: {e}")
            raise SourceError(f"Cannot open {self.db_path}: {e}", source="sqlite") from e
        conn.row_factory = aiosqlite.Row
        return conn

    async def _return_connection(self, conn: aiosqlite.Connection) -> None:
        """Return a connection to the pool."""
        async with self._pool_lock:
            if len(self._pool) < self._pool_size:
                self._pool.append(conn)
                return
        await conn.close()

    async def close_pool(self) -> None:
        """Close all pooled connections."""
        async with self._pool_lock:
            for conn in self._pool:
                await conn.close()
            self._pool.clear()

    async def connect(self) -> None:
        conn = await self._get_connection()
        try:
            await conn.execute("SELECT 1")
        except aiosqlite.Error as e:
            raise SourceError(f"SQLite connection check failed: {e}", source="sqlite") from e
        finally:
            await self._return_connection(conn)
        if not self._connected:
            logger.info(f"Connected to SQLite database {self.db_path}")
        self._connected = True

    async def disconnect(self) -> None:
        await self.close_pool()
        self._connected = False

    async def is_connected(self, auto_connect: bool = False) -> bool:
        if not self._connected and auto_connect:
            try:
                await self.connect()
            except SourceError as e:
                logger.warning(f"SQLite not available: {e}")
                return False
        return self._connected

    async def prepare(self, model: "type[Model]") -> None:
        await self._ensure_table(model.query())

    async def _ensure_table(self, query: Query) -> None:
        """Create the table for ``query.source`` once per instance."""
        if query.source in self._tables:
            return
        await self._execute(SQLITE.create_table(query), [], commit=True)
        self._tables.add(query.source)

    @staticmethod
    def _bind(params: list[Any]) -> list[Any]:
        return [value.isoformat() if isinstance(value, datetime) else value for value in params]

    async def _execute(
        self, sql: str, params: list[Any], commit: bool = False, fetch: bool = False
    ) -> Any:
        """Run one statement and return rows (fetch) or the cursor."""
        conn = await self._get_connection()
        try:
            logger.debug(f"SQLite: {sql} {params}")
            cursor = await conn.execute(sql, self._bind(params))
            if fetch:
                return await cursor.fetchall()
            if commit:
                await conn.commit()
            return cursor
        except aiosqlite.Error as e:
            logger.error(f"SQLite statement failed: {e} ({sql})")
            if commit:
                await conn.rollback()
            raise SourceError(f"SQLite statement failed: {e}", source="sqlite") from e
        finally:
            await self._return_connection(conn)

    async def create(self, query: Query, data: dict[str, Any]) -> Any:
        await self._ensure_table(query)
        sql, params = SQLITE.insert(query, data)
        cursor = await self._execute(sql, params, commit=True)
        return data.get(query.key, cursor.lastrowid)

    async def read(self, query: Query) -> list[dict[str, Any]]:
        await self._ensure_table(query)
        sql, params = SQLITE.select(query)
        rows = await self._execute(sql, params, fetch=True)
        return [dict(row) for row in rows]

    async def count(self, query: Query) -> int:
        await self._ensure_table(query)
        sql, params = SQLITE.count(query)
        rows = await self._execute(sql, params, fetch=True)
        return rows[0][0]

    async def update(self, query: Query, data: dict[str, Any]) -> int:
        await self._ensure_table(query)
        sql, params = SQLITE.update(query, data)
        cursor = await self._execute(sql, params, commit=True)
        return cursor.rowcount

    async def delete(self, query: Query) -> int:
        await self._ensure_table(query)
        sql, params = SQLITE.delete(query)
        cursor = await self._execute(sql, params, commit=True)
        return cursor.rowcount


__all__ = ["SQLiteSource"]
