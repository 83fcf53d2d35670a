"""
Order lookup service.
"""

import re
from typing import Optional, TYPE_CHECKING

from shared.logging import get_logger
from shared.errors import InvalidOrderIdError, OrderNotFoundError
from ..cache.order_cache import OrderCache
from ..orders.models import Order

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


class OrderQueryService:
    """Synchronous lookups by order id, served from the cache only."""

    def __init__(
        self,
        cache: OrderCache,
        id_pattern: str,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.cache = cache
        self.id_pattern = re.compile(id_pattern)
        self.metrics = metrics
        self.logger = get_logger("orders.query")

    def validate_id(self, order_uid: Optional[str]) -> str:
        """Return the stripped id or raise InvalidOrderIdError."""
        if order_uid is None or not order_uid.strip():
            self._count("invalid")
            raise InvalidOrderIdError("Order id is required")

        order_uid = order_uid.strip()
        if not self.id_pattern.fullmatch(order_uid):
            self._count("invalid")
            raise InvalidOrderIdError(
                "Order id is malformed",
                {"order_uid": order_uid[:64], "pattern": self.id_pattern.pattern}
            )
        return order_uid

    def lookup(self, order_uid: Optional[str]) -> Order:
        """Return the cached order for ``order_uid``.

        Raises:
            InvalidOrderIdError: the id is missing or malformed.
            OrderNotFoundError: nothing is cached under the id.
        """
        order_uid = self.validate_id(order_uid)

        order, found = self.cache.get(order_uid)
        if not found:
            self._count("not_found")
            self.logger.debug("Order not found", order_uid=order_uid)
            raise OrderNotFoundError(order_uid)

        self._count("found")
        return order

    def _count(self, outcome: str):
        if self.metrics:
            self.metrics.increment_counter("order_lookups_total", outcome=outcome)
