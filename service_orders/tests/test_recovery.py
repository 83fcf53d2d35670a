"""
Unit tests for startup recovery.
"""

import pytest

from service_orders.app.cache.order_cache import OrderCache
from service_orders.app.ingestion.recovery import RecoveryLoader
from service_orders.app.persistence.memory import InMemoryOrderStore
from shared.metrics import MetricsCollector

from helpers import FailingOrderStore, OrderFactory


def stored(order_uid: str, **overrides) -> str:
    return OrderFactory.payload(order_uid, **overrides).decode("utf-8")


class TestRecoveryLoader:
    """Test cases for RecoveryLoader."""

    @pytest.fixture
    def cache(self):
        """Create an empty cache."""
        return OrderCache()

    @pytest.fixture
    def store(self):
        """Create an in-memory store."""
        return InMemoryOrderStore()

    @pytest.mark.asyncio
    async def test_restores_every_row(self, store, cache):
        """Test that each stored order becomes retrievable."""
        for uid in ("abc123", "def456", "ghi789"):
            await store.insert(uid, stored(uid))

        report = await RecoveryLoader(store, cache).run()

        assert report.rows_seen == 3
        assert report.restored == 3
        assert report.skipped == 0
        assert report.store_available is True
        for uid in ("abc123", "def456", "ghi789"):
            assert cache.get(uid)[1]

    @pytest.mark.asyncio
    async def test_skips_undecodable_rows(self, store, cache):
        """Test that bad rows are skipped without affecting the others."""
        await store.insert("good-1", stored("good-1"))
        await store.insert("broken", '{"order_uid": "broken", "sm_id": "x"')
        await store.insert("empty", "")
        await store.insert("good-2", stored("good-2"))

        report = await RecoveryLoader(store, cache).run()

        assert report.restored == 2
        assert report.skipped == 2
        assert cache.get("good-1")[1]
        assert cache.get("good-2")[1]
        assert not cache.get("broken")[1]
        assert len(cache) == 2

    @pytest.mark.asyncio
    async def test_unreachable_store_leaves_cache_empty(self, cache):
        """Test best-effort behaviour when enumeration fails."""
        store = FailingOrderStore(fail_enumerate=True)

        report = await RecoveryLoader(store, cache).run()

        assert report.store_available is False
        assert report.rows_seen == 0
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_duplicate_rows_last_enumerated_wins(self, store, cache):
        """Test that the row applied last is the one cached."""
        await store.insert("dup", stored("dup", track_number="OLD"))
        await store.insert("dup", stored("dup", track_number="NEW"))

        report = await RecoveryLoader(store, cache).run()

        assert report.restored == 2
        assert len(cache) == 1
        assert cache.get("dup")[0].track_number == "NEW"

    @pytest.mark.asyncio
    async def test_records_metrics(self, store, cache):
        """Test recovery counters and cache size gauge."""
        metrics = MetricsCollector("orders")
        await store.insert("a", stored("a"))
        await store.insert("b", "garbage")

        await RecoveryLoader(store, cache, metrics=metrics).run()

        registry = metrics.registry
        assert registry.get_sample_value("orders_recovered_total", {"outcome": "restored"}) == 1
        assert registry.get_sample_value("orders_recovered_total", {"outcome": "skipped"}) == 1
        assert registry.get_sample_value("order_cache_size") == 1

    @pytest.mark.asyncio
    async def test_report_serializes(self, store, cache):
        """Test report dictionary form."""
        report = await RecoveryLoader(store, cache).run()

        data = report.to_dict()
        assert set(data) == {"rows_seen", "restored", "skipped", "store_available", "duration_seconds"}
