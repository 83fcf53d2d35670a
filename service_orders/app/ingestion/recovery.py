"""
Startup recovery of the order cache from the durable store.
"""

import time
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, TYPE_CHECKING

from shared.logging import get_logger
from shared.errors import OrderDecodeError
from ..cache.order_cache import OrderCache
from ..orders.models import decode_order
from ..persistence.base import OrderStore

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


@dataclass
class RecoveryReport:
    """Outcome of one recovery run."""
    rows_seen: int = 0
    restored: int = 0
    skipped: int = 0
    store_available: bool = True
    duration_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class RecoveryLoader:
    """Replays every stored row into the cache.

    Rows are applied in the order the store returns them. When an order id
    was stored more than once, the row applied last is the one left cached.
    """

    def __init__(
        self,
        store: OrderStore,
        cache: OrderCache,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.store = store
        self.cache = cache
        self.metrics = metrics
        self.logger = get_logger("orders.ingestion.recovery")

    async def run(self) -> RecoveryReport:
        """Restore the cache. Never raises; an unreachable store leaves it empty."""
        report = RecoveryReport()
        start_time = time.time()

        try:
            rows = await self.store.enumerate()
        except Exception as e:
            report.store_available = False
            report.duration_seconds = time.time() - start_time
            self.logger.error("Failed to restore cache from store", error=str(e))
            self._count("unavailable")
            return report

        for row in rows:
            report.rows_seen += 1
            try:
                order = decode_order(row.payload)
            except OrderDecodeError as e:
                report.skipped += 1
                self.logger.warning(
                    "Skipping undecodable stored order",
                    order_uid=row.order_uid,
                    error=e.message,
                    details=e.details
                )
                self._count("skipped")
                continue

            self.cache.put(order)
            report.restored += 1
            self._count("restored")

        report.duration_seconds = time.time() - start_time
        if self.metrics:
            self.metrics.set_gauge("order_cache_size", len(self.cache))

        self.logger.info(
            "Cache restored from store",
            rows_seen=report.rows_seen,
            restored=report.restored,
            skipped=report.skipped,
            cached=len(self.cache),
            duration_ms=round(report.duration_seconds * 1000, 2)
        )
        return report

    def _count(self, outcome: str):
        if self.metrics:
            self.metrics.increment_counter("orders_recovered_total", outcome=outcome)
