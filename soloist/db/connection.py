"""PostgreSQL pool for the progression store"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import psycopg
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool, PoolTimeout

from soloist.config import DATABASE_URL, DB_POOL_MAX_SIZE, DB_POOL_MIN_SIZE
from soloist.exceptions import ConnectionError, wrap_external_exception

logger = logging.getLogger(__name__)


class Database:
    """
    Owns one AsyncConnectionPool

    Rows come back as dicts so JSONB documents can be read by column name.
    """

    def __init__(
        self,
        dsn: str = DATABASE_URL,
        min_size: int = DB_POOL_MIN_SIZE,
        max_size: int = DB_POOL_MAX_SIZE,
    ):
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max_size
        self._pool: Optional[AsyncConnectionPool] = None

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    async def init_pool(self) -> None:
        """Open the pool and wait for the first connections"""
        logger.info(f"Opening connection pool (min={self.min_size}, max={self.max_size})")
        pool = AsyncConnectionPool(
            self.dsn,
            min_size=self.min_size,
            max_size=self.max_size,
            kwargs={"row_factory": dict_row},
            open=False,
        )
        try:
            await pool.open(wait=True)
        except PoolTimeout as e:
            await pool.close()
            raise ConnectionError(
                message=f"Timed out opening connection pool: {e}",
                operation="init_pool",
                cause=e,
            )
        except psycopg.Error as e:
            await pool.close()
            raise wrap_external_exception(e, operation="init_pool")
        self._pool = pool

    async def close_pool(self) -> None:
        if self._pool is None:
            return
        logger.info("Closing connection pool")
        await self._pool.close()
        self._pool = None

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[psycopg.AsyncConnection, None]:
        """Borrow a connection; it goes back to the pool on exit"""
        if self._pool is None:
            raise ConnectionError(
                message="Connection pool is not open; call init_pool() first",
                operation="connection",
            )
        async with self._pool.connection() as conn:
            yield conn
