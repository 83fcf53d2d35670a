"""
Order Cache service.

Startup runs in a fixed order: connect the durable store, replay it into
the cache, start consuming the order topic, then accept HTTP requests.
"""

from typing import Optional

from fastapi import Query
from fastapi.responses import Response

from shared.base_service import BaseService
from shared.config import ServiceConfig

from .cache.order_cache import OrderCache
from .ingestion.pipeline import IngestionPipeline
from .ingestion.recovery import RecoveryLoader, RecoveryReport
from .kafka.consumer import KafkaMessage, OrderStreamConsumer
from .orders.models import Order, encode_order
from .persistence import OrderStore, create_store
from .query.service import OrderQueryService


class OrderCacheService(BaseService):
    """Order cache service implementation."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        store: Optional[OrderStore] = None,
        consumer: Optional[OrderStreamConsumer] = None,
    ):
        super().__init__("orders", 8080, config=config)

        # The cache is created once and handed to every collaborator
        self.cache = OrderCache()
        self.store = store or create_store(self.config)
        self.pipeline = IngestionPipeline(
            self.cache, self.store, metrics=self.metrics, id_pattern=self.config.order_id_pattern
        )
        self.recovery = RecoveryLoader(self.store, self.cache, metrics=self.metrics)
        self.query = OrderQueryService(self.cache, self.config.order_id_pattern, metrics=self.metrics)
        self.consumer = consumer
        if self.consumer is None and self.config.consume_enabled:
            self.consumer = OrderStreamConsumer(
                bootstrap_servers=self.config.kafka_bootstrap,
                group_id=self.config.consumer_group,
                auto_offset_reset=self.config.kafka_auto_offset_reset,
            )

        self.recovery_report: Optional[RecoveryReport] = None
        self.ready = False

        self._setup_order_routes()
        self.app.state.order_service = self

    def _setup_order_routes(self):
        """Set up order-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "orders",
                "message": "Order Cache Service",
                "version": "1.0.0",
                "capabilities": ["cache", "kafka", "persistence"],
                "topic": self.config.kafka_topic,
                "ready": self.ready
            }

        @self.app.get("/data")
        async def get_order_by_query(id: Optional[str] = Query(None, description="Order id")):
            """Look up an order by the ``id`` query parameter."""
            return self._order_response(self.query.lookup(id))

        @self.app.get("/orders/{order_uid}")
        async def get_order(order_uid: str):
            """Look up an order by path."""
            return self._order_response(self.query.lookup(order_uid))

        @self.app.get("/stats")
        async def get_stats():
            """Get cache and ingestion statistics."""
            return {
                "cache": {"size": len(self.cache)},
                "pipeline": {**self.pipeline.stats.to_dict(), "in_flight": self.pipeline.in_flight},
                "recovery": self.recovery_report.to_dict() if self.recovery_report else None,
                "kafka": {
                    "enabled": self.consumer is not None,
                    "consumer_running": self.consumer.is_running() if self.consumer else False,
                    "subscribed_topics": self.consumer.get_subscribed_topics() if self.consumer else []
                },
                "ready": self.ready
            }

    @staticmethod
    def _order_response(order: Order) -> Response:
        return Response(content=encode_order(order), media_type="application/json")

    def _handle_kafka_message(self, kafka_message: KafkaMessage):
        """Fan each message out to its own pipeline task."""
        return self.pipeline.submit(kafka_message.value)

    async def _check_dependencies(self):
        """Check order service dependencies."""
        dependencies = {}

        try:
            dependencies["store"] = "ok" if await self.store.health_check() else "error"
        except Exception:
            dependencies["store"] = "error"

        if self.consumer is None:
            dependencies["kafka"] = "disabled"
        else:
            dependencies["kafka"] = "ok" if self.consumer.is_running() else "error"

        if self.recovery_report is None:
            dependencies["recovery"] = "pending"
        else:
            dependencies["recovery"] = "ok" if self.recovery_report.store_available else "error"

        return dependencies

    async def start(self):
        """Start order service components in order."""
        await self.store.start()

        self.recovery_report = await self.recovery.run()

        if self.consumer is not None:
            await self.consumer.start()
            await self.consumer.subscribe(self.config.kafka_topic, self._handle_kafka_message)
            self.consumer.run()
        else:
            self.logger.warning("Kafka consumption disabled")

        self.ready = True
        self.logger.info(
            "Order service started",
            cached_orders=len(self.cache),
            topic=self.config.kafka_topic if self.consumer else None
        )

    async def stop(self):
        """Stop order service components."""
        self.ready = False
        if self.consumer is not None:
            await self.consumer.stop()
        await self.pipeline.drain()
        await self.store.stop()

        self.logger.info("Order service stopped")


def create_app():
    """Create order service application."""
    service = OrderCacheService()
    return service.app


if __name__ == "__main__":
    service = OrderCacheService()
    service.run()
