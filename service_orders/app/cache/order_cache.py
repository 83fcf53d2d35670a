"""
In-memory order cache.
"""

import threading
from contextlib import contextmanager
from typing import Dict, List, Optional, Tuple

from shared.logging import get_logger
from ..orders.models import Order


class ReadWriteLock:
    """Many concurrent readers or a single writer.

    Waiting writers block new readers so a steady stream of lookups cannot
    starve ingestion.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self):
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self):
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class OrderCache:
    """Concurrent-safe mapping of ``order_uid`` to :class:`Order`.

    Orders are immutable, so a replacement swaps a single reference and a
    reader sees either the previous record or the new one in full.
    Later puts for the same id win.
    """

    def __init__(self):
        self.logger = get_logger("orders.cache")
        self._data: Dict[str, Order] = {}
        self._lock = ReadWriteLock()

    def put(self, order: Order) -> None:
        """Insert or replace the entry for ``order.order_uid``."""
        with self._lock.write():
            replaced = order.order_uid in self._data
            self._data[order.order_uid] = order
        self.logger.debug("Order cached", order_uid=order.order_uid, replaced=replaced)

    def get(self, order_uid: str) -> Tuple[Optional[Order], bool]:
        """Return the cached order and whether it was present."""
        with self._lock.read():
            order = self._data.get(order_uid)
        return order, order is not None

    def snapshot_ids(self) -> List[str]:
        """List cached order identifiers."""
        with self._lock.read():
            return list(self._data.keys())

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._data)

    def __contains__(self, order_uid: str) -> bool:
        return self.get(order_uid)[1]
