"""
PostgreSQL persistence layer for the Order Cache service.
"""

from typing import List, Optional

import asyncpg

from shared.logging import get_logger
from shared.errors import StoreUnavailableError, StoreWriteError, StoreReadError
from .base import OrderStore, StoredOrder


class PostgresOrderStore(OrderStore):
    """Append-only ``orders`` table accessed through an asyncpg pool."""

    def __init__(
        self,
        dsn: str,
        min_size: int = 2,
        max_size: int = 10,
        command_timeout: float = 30.0,
    ):
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max_size
        self.command_timeout = command_timeout
        self.logger = get_logger("orders.persistence.postgres")
        self.pool: Optional[asyncpg.Pool] = None

    async def start(self):
        """Start the persistence layer."""
        try:
            self.pool = await asyncpg.create_pool(
                self.dsn,
                min_size=self.min_size,
                max_size=self.max_size,
                command_timeout=self.command_timeout
            )

            await self._create_tables()

            self.logger.info("PostgreSQL order store started")

        except Exception as e:
            self.logger.error("Failed to start PostgreSQL order store", error=str(e))
            raise StoreUnavailableError(str(e))

    async def stop(self):
        """Stop the persistence layer."""
        if self.pool:
            await self.pool.close()
            self.pool = None
            self.logger.info("PostgreSQL order store stopped")

    async def _create_tables(self):
        """Create the orders table when it does not exist yet."""
        async with self.pool.acquire() as conn:
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS orders (
                    id BIGSERIAL PRIMARY KEY,
                    order_uid TEXT NOT NULL,
                    data TEXT NOT NULL,
                    created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW()
                );
            """)
            await conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_orders_order_uid ON orders(order_uid);
            """)

    async def insert(self, order_uid: str, payload: str) -> None:
        """Append an order row."""
        if not self.pool:
            raise StoreWriteError("Store not started", {"order_uid": order_uid})

        try:
            async with self.pool.acquire() as conn:
                await conn.execute(
                    "INSERT INTO orders (order_uid, data) VALUES ($1, $2)",
                    order_uid, payload
                )
        except Exception as e:
            raise StoreWriteError(str(e), {"order_uid": order_uid}) from e

    async def enumerate(self) -> List[StoredOrder]:
        """Load every stored row in insertion order."""
        if not self.pool:
            raise StoreReadError("Store not started")

        try:
            async with self.pool.acquire() as conn:
                rows = await conn.fetch("SELECT order_uid, data FROM orders ORDER BY id ASC")
        except Exception as e:
            raise StoreReadError(str(e)) from e

        return [StoredOrder(order_uid=row["order_uid"], payload=row["data"]) for row in rows]

    async def health_check(self) -> bool:
        """Check database health."""
        if not self.pool:
            return False
        try:
            async with self.pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
                return True
        except Exception:
            return False
