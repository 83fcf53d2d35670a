"""
Cache package for the Order Cache service.

Holds the process-wide in-memory index of orders that every lookup is
served from. Writers are the ingestion pipeline and startup recovery.
"""

from .order_cache import OrderCache, ReadWriteLock

__all__ = ["OrderCache", "ReadWriteLock"]
