"""
Lookup service over the order cache.
"""

from .service import OrderQueryService

__all__ = ["OrderQueryService"]
