"""
Ingestion pipeline: inbound payload -> cache -> durable store.
"""

import asyncio
import re
from contextlib import nullcontext
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Set, Union, TYPE_CHECKING

from shared.logging import get_logger
from shared.errors import OrderDecodeError
from ..cache.order_cache import OrderCache
from ..orders.models import Order, decode_order, encode_order
from ..persistence.base import OrderStore

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


@dataclass
class PipelineStats:
    """Running counters for the pipeline."""
    received: int = 0
    decoded: int = 0
    decode_failures: int = 0
    persisted: int = 0
    persist_failures: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class IngestionPipeline:
    """Applies inbound order payloads to the cache, then persists them.

    The cache is updated before the store write starts, so an order is
    readable as soon as it decodes even if persistence is slow or fails.
    Messages are independent of each other: concurrent payloads for the
    same order race and the last ``put`` wins.
    """

    def __init__(
        self,
        cache: OrderCache,
        store: OrderStore,
        metrics: Optional["MetricsCollector"] = None,
        id_pattern: Optional[str] = None,
    ):
        self.cache = cache
        self.store = store
        self.id_pattern = re.compile(id_pattern) if id_pattern else None
        self.metrics = metrics
        self.logger = get_logger("orders.ingestion.pipeline")
        self.stats = PipelineStats()
        self._tasks: Set[asyncio.Task] = set()

    async def handle(self, payload: Optional[Union[bytes, str]]) -> Optional[Order]:
        """Process one payload to completion. Never raises.

        Tombstones (``None``) and orders whose id the query side would
        reject count as decode failures.
        """
        self.stats.received += 1

        try:
            order = decode_order(payload)
            if self.id_pattern and not self.id_pattern.fullmatch(order.order_uid):
                raise OrderDecodeError(
                    "Order id is malformed",
                    {"order_uid": order.order_uid[:64], "pattern": self.id_pattern.pattern}
                )
        except OrderDecodeError as e:
            self.stats.decode_failures += 1
            self._count("decode_failed")
            self.logger.warning(
                "Dropping undecodable order message",
                error=e.message,
                details=e.details,
                size=len(payload) if payload is not None else 0
            )
            return None

        self.stats.decoded += 1

        self.cache.put(order)
        if self.metrics:
            self.metrics.set_gauge("order_cache_size", len(self.cache))

        await self._persist(order)
        return order

    async def _persist(self, order: Order):
        try:
            timer = self.metrics.time_operation("order_persist_duration_seconds") if self.metrics else nullcontext()
            with timer:
                await self.store.insert(order.order_uid, encode_order(order))
        except Exception as e:
            self.stats.persist_failures += 1
            self._count("persist_failed")
            self.logger.error("Failed to save order to store", order_uid=order.order_uid, error=str(e))
            return

        self.stats.persisted += 1
        self._count("persisted")
        self.logger.debug("Order persisted", order_uid=order.order_uid)

    def submit(self, payload: Optional[Union[bytes, str]]) -> asyncio.Task:
        """Schedule ``handle`` as its own task and track it until done."""
        task = asyncio.create_task(self.handle(payload))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self):
        """Wait for every in-flight message to finish."""
        if self._tasks:
            self.logger.info("Draining in-flight order messages", pending=len(self._tasks))
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def _count(self, outcome: str):
        if self.metrics:
            self.metrics.increment_counter("orders_ingested_total", outcome=outcome)
