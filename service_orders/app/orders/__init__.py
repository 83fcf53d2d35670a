"""
Order record model and its JSON wire codec.
"""

from .models import Order, Delivery, Payment, Item, decode_order, encode_order

__all__ = ["Order", "Delivery", "Payment", "Item", "decode_order", "encode_order"]
