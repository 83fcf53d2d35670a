"""
Kafka consumer worker for the Order Cache service.
"""

import asyncio
import functools
from typing import Any, Callable, Dict, List, Optional
from dataclasses import dataclass

import kafka
from kafka.errors import KafkaError

from shared.logging import get_logger
from shared.errors import ConsumerError


@dataclass
class KafkaMessage:
    """Kafka message wrapper."""
    topic: str
    partition: int
    offset: int
    key: Optional[bytes]
    value: bytes
    timestamp: Optional[int]
    headers: Optional[Dict[str, bytes]]


MessageHandler = Callable[[KafkaMessage], Any]


class OrderStreamConsumer:
    """Supervised Kafka consumption worker.

    Lifecycle is ``start()`` -> ``subscribe()`` -> ``run()`` -> ``stop()``.
    Polling happens on a worker thread; handlers are called on the event
    loop, one call per message, and must not block. A handler returning a
    coroutine is awaited before the next message; returning a Task (as
    ``IngestionPipeline.submit`` does) lets messages proceed concurrently.
    """

    def __init__(
        self,
        bootstrap_servers: str,
        group_id: str,
        auto_offset_reset: str = "earliest",
        poll_timeout_ms: int = 1000,
    ):
        self.bootstrap_servers = bootstrap_servers
        self.group_id = group_id
        self.auto_offset_reset = auto_offset_reset
        self.poll_timeout_ms = poll_timeout_ms
        self.logger = get_logger("orders.kafka.consumer")
        self.consumer: Optional[kafka.KafkaConsumer] = None
        self.subscribed_topics: List[str] = []
        self.message_handlers: Dict[str, MessageHandler] = {}
        self.running = False
        self._consumer_task: Optional[asyncio.Task] = None

    async def start(self):
        """Create the Kafka consumer. Failure here is fatal to startup."""
        try:
            self.consumer = kafka.KafkaConsumer(
                bootstrap_servers=self.bootstrap_servers,
                group_id=self.group_id,
                value_deserializer=lambda x: x,  # Raw bytes; decoding belongs to the pipeline
                key_deserializer=lambda x: x,
                auto_offset_reset=self.auto_offset_reset,
                enable_auto_commit=True,
                max_poll_records=100,
                session_timeout_ms=30000,
                heartbeat_interval_ms=10000
            )

            self.running = True
            self.logger.info("Kafka consumer started", group_id=self.group_id)

        except Exception as e:
            self.logger.error("Failed to start Kafka consumer", error=str(e))
            raise ConsumerError("KAFKA_CONSUMER_START_FAILED", str(e))

    def run(self) -> asyncio.Task:
        """Start the consume loop as a background task."""
        if not self.consumer:
            raise ConsumerError("KAFKA_CONSUMER_NOT_STARTED", "Consumer not started")
        if self._consumer_task is None or self._consumer_task.done():
            self._consumer_task = asyncio.create_task(self._consume_loop())
        return self._consumer_task

    async def stop(self):
        """Stop the consume loop and close the consumer."""
        self.running = False
        if self._consumer_task:
            # Let the in-flight poll return before closing; the client is not thread-safe
            try:
                await asyncio.wait_for(self._consumer_task, timeout=self.poll_timeout_ms / 1000 + 5)
            except (asyncio.TimeoutError, asyncio.CancelledError):
                self.logger.warning("Consume loop did not stop in time, cancelled")
            self._consumer_task = None

        if self.consumer:
            self.consumer.close()
            self.consumer = None
            self.logger.info("Kafka consumer stopped")

    async def subscribe(self, topic: str, handler: MessageHandler):
        """Subscribe to a Kafka topic."""
        if topic in self.subscribed_topics:
            self.logger.warning("Already subscribed to topic", topic=topic)
            return

        if not self.consumer:
            raise ConsumerError("KAFKA_CONSUMER_NOT_STARTED", "Consumer not started")

        try:
            self.consumer.subscribe(self.subscribed_topics + [topic])
        except Exception as e:
            self.logger.error("Failed to subscribe to topic", topic=topic, error=str(e))
            raise ConsumerError("KAFKA_SUBSCRIBE_FAILED", str(e))

        self.subscribed_topics.append(topic)
        self.message_handlers[topic] = handler
        self.logger.info("Subscribed to topic", topic=topic)

    async def _poll(self) -> Dict[Any, list]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, functools.partial(self.consumer.poll, timeout_ms=self.poll_timeout_ms)
        )

    async def _consume_loop(self):
        """Main consumption loop."""
        while self.running:
            try:
                message_batch = await self._poll()

                if not message_batch or not isinstance(message_batch, dict):
                    await asyncio.sleep(0)
                    continue

                for topic_partition, messages in message_batch.items():
                    handler = self.message_handlers.get(topic_partition.topic)
                    if handler is None:
                        continue

                    for message in messages:
                        await self._dispatch(handler, message)

            except KafkaError as e:
                self.logger.error("Kafka error in consume loop", error=str(e))
                await asyncio.sleep(5)  # Back off on errors

            except asyncio.CancelledError:
                break

            except Exception as e:
                self.logger.error("Unexpected error in consume loop", error=str(e))
                await asyncio.sleep(1)

    async def _dispatch(self, handler: MessageHandler, message):
        try:
            kafka_message = KafkaMessage(
                topic=message.topic,
                partition=message.partition,
                offset=message.offset,
                key=message.key,
                value=message.value,
                timestamp=message.timestamp,
                headers=dict(message.headers) if message.headers else None
            )

            result = handler(kafka_message)
            if asyncio.iscoroutine(result):
                await result

        except Exception as e:
            self.logger.error(
                "Error processing message",
                topic=message.topic,
                offset=message.offset,
                error=str(e)
            )

    def get_subscribed_topics(self) -> List[str]:
        """Get list of subscribed topics."""
        return self.subscribed_topics.copy()

    def is_running(self) -> bool:
        """Check if the consume loop is active."""
        return self.running and self._consumer_task is not None and not self._consumer_task.done()
