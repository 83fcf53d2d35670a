"""
Durable store adapters for the Order Cache service.

- base: OrderStore interface and StoredOrder row type
- postgres: asyncpg-backed append-only table
- memory: list-backed store for local runs and tests
"""

from .base import OrderStore, StoredOrder
from .memory import InMemoryOrderStore
from .postgres import PostgresOrderStore

__all__ = ["OrderStore", "StoredOrder", "InMemoryOrderStore", "PostgresOrderStore", "create_store"]


def create_store(config) -> OrderStore:
    """Build the store selected by ``config.store_backend``."""
    if config.store_backend == "memory":
        return InMemoryOrderStore()
    if config.store_backend == "postgres":
        return PostgresOrderStore(
            config.postgres_dsn,
            min_size=config.postgres_min_pool,
            max_size=config.postgres_max_pool,
            command_timeout=config.postgres_command_timeout,
        )
    raise ValueError(f"Unknown store backend: {config.store_backend}")
