"""
Order Cache Service package.

Keeps an in-memory index of order records fed from a Kafka topic,
mirrors every record into a durable store and serves lookups over HTTP.
Key modules include:

- app.main: FastAPI app, lifecycle and query endpoints
- app.orders: Order record model and JSON codec
- app.cache: Concurrent-safe in-memory order cache
- app.persistence: Durable store adapters (PostgreSQL, in-memory)
- app.ingestion: Ingestion pipeline and startup recovery
- app.kafka: Kafka consumer worker
- app.query: Lookup service over the cache
"""
