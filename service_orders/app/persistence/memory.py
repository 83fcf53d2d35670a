"""
In-memory store used for local runs and tests.
"""

import asyncio
from typing import List

from shared.logging import get_logger
from .base import OrderStore, StoredOrder


class InMemoryOrderStore(OrderStore):
    """List-backed store; rows come back in insertion order."""

    def __init__(self):
        self.logger = get_logger("orders.persistence.memory")
        self.rows: List[StoredOrder] = []
        self._lock = asyncio.Lock()

    async def start(self):
        self.logger.info("In-memory order store started", rows=len(self.rows))

    async def insert(self, order_uid: str, payload: str) -> None:
        async with self._lock:
            self.rows.append(StoredOrder(order_uid=order_uid, payload=payload))

    async def enumerate(self) -> List[StoredOrder]:
        async with self._lock:
            return list(self.rows)
