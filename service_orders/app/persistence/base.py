"""
Durable store interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class StoredOrder:
    """One persisted row: the order id and its serialized document."""
    order_uid: str
    payload: str


class OrderStore(ABC):
    """Append-only persistence of ``(order_uid, payload)`` rows.

    Identifier uniqueness is not enforced; re-ingesting an order appends
    another row.
    """

    async def start(self):
        """Open connections. Raise StoreUnavailableError when unreachable."""

    async def stop(self):
        """Release connections."""

    @abstractmethod
    async def insert(self, order_uid: str, payload: str) -> None:
        """Append a row. Raise StoreWriteError on failure."""

    @abstractmethod
    async def enumerate(self) -> List[StoredOrder]:
        """Return every stored row. Raise StoreReadError on failure."""

    async def health_check(self) -> bool:
        return True
