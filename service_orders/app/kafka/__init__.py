"""
Kafka integration for the Order Cache service.
"""

from .consumer import OrderStreamConsumer, KafkaMessage

__all__ = ["OrderStreamConsumer", "KafkaMessage"]
