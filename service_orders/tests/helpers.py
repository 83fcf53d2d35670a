"""
Test helper functions and factory methods for the Order Cache service.
"""

import asyncio
import copy
import json
from typing import Any, Dict, List, Optional

from shared.config import ServiceConfig
from shared.errors import StoreReadError, StoreUnavailableError, StoreWriteError
from service_orders.app.persistence.base import StoredOrder
from service_orders.app.persistence.memory import InMemoryOrderStore


SAMPLE_ORDER: Dict[str, Any] = {
    "order_uid": "b563feb7b2b84b6test",
    "track_number": "WBILMTESTTRACK",
    "entry": "WBIL",
    "delivery": {
        "name": "Test Testov",
        "phone": "+9720000000",
        "zip": "2639809",
        "city": "Kiryat Mozkin",
        "address": "Ploshad Mira 15",
        "region": "Kraiot",
        "email": "test@gmail.com"
    },
    "payment": {
        "transaction": "b563feb7b2b84b6test",
        "request_id": "",
        "currency": "USD",
        "provider": "wbpay",
        "amount": 1817,
        "payment_dt": 1637907727,
        "bank": "alpha",
        "delivery_cost": 1500,
        "goods_total": 317,
        "custom_fee": 0
    },
    "items": [
        {
            "chrt_id": 9934930,
            "track_number": "WBILMTESTTRACK",
            "price": 453,
            "rid": "ab4219087a764ae0btest",
            "name": "Mascaras",
            "sale": 30,
            "size": "0",
            "total_price": 317,
            "nm_id": 2389212,
            "brand": "Vivienne Sabo",
            "status": 202
        }
    ],
    "locale": "en",
    "internal_signature": "",
    "customer_id": "test",
    "delivery_service": "meest",
    "shardkey": "9",
    "sm_id": 99,
    "date_created": "2021-11-26T06:22:19Z",
    "oof_shard": "1"
}


class OrderFactory:
    """Factory for order documents and payloads."""

    @staticmethod
    def document(order_uid: str = "b563feb7b2b84b6test", **overrides) -> Dict[str, Any]:
        """Sample order document with ``order_uid`` and top-level overrides."""
        doc = copy.deepcopy(SAMPLE_ORDER)
        doc["order_uid"] = order_uid
        doc["payment"]["transaction"] = order_uid
        doc.update(overrides)
        return doc

    @staticmethod
    def items(count: int, track_number: str = "WBILMTESTTRACK") -> List[Dict[str, Any]]:
        """Distinct line items, numbered in order."""
        return [
            {
                "chrt_id": 1000 + i,
                "track_number": track_number,
                "price": 100 * (i + 1),
                "rid": f"rid-{i}",
                "name": f"item-{i}",
                "sale": 0,
                "size": "M",
                "total_price": 100 * (i + 1),
                "nm_id": 5000 + i,
                "brand": "Acme",
                "status": 202
            }
            for i in range(count)
        ]

    @classmethod
    def payload(cls, order_uid: str = "b563feb7b2b84b6test", **overrides) -> bytes:
        """Order document encoded as an inbound message payload."""
        return json.dumps(cls.document(order_uid, **overrides)).encode("utf-8")


def create_test_config(**overrides) -> ServiceConfig:
    """Configuration for an isolated in-process service."""
    options = {"store_backend": "memory", "consume_enabled": False, "log_level": "warning"}
    options.update(overrides)
    return ServiceConfig(service_name="orders", port=8080, **options)


class FailingOrderStore(InMemoryOrderStore):
    """Store whose operations fail on demand."""

    def __init__(self, fail_start: bool = False, fail_insert: bool = False, fail_enumerate: bool = False):
        super().__init__()
        self.fail_start = fail_start
        self.fail_insert = fail_insert
        self.fail_enumerate = fail_enumerate

    async def start(self):
        if self.fail_start:
            raise StoreUnavailableError("connection refused")

    async def insert(self, order_uid: str, payload: str) -> None:
        if self.fail_insert:
            raise StoreWriteError("disk full", {"order_uid": order_uid})
        await super().insert(order_uid, payload)

    async def enumerate(self) -> List[StoredOrder]:
        if self.fail_enumerate:
            raise StoreReadError("connection reset")
        return await super().enumerate()

    async def health_check(self) -> bool:
        return not (self.fail_insert or self.fail_enumerate)


class BlockingOrderStore(InMemoryOrderStore):
    """Store whose inserts wait until ``release`` is set."""

    def __init__(self):
        super().__init__()
        self.release: Optional[asyncio.Event] = None
        self.insert_started: Optional[asyncio.Event] = None

    def arm(self):
        """Create the events on the running loop."""
        self.release = asyncio.Event()
        self.insert_started = asyncio.Event()

    async def insert(self, order_uid: str, payload: str) -> None:
        self.insert_started.set()
        await self.release.wait()
        await super().insert(order_uid, payload)
