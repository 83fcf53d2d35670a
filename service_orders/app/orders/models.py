"""
Order data models for the Order Cache service.

Field names on the wire follow the upstream order feed (``order_uid``,
``shardkey``, ``sm_id`` ...). Values must already carry their JSON
type, so ``"sm_id": "99"`` is rejected. Every field except ``order_uid``
falls back to its zero value when absent.
"""

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from shared.errors import OrderDecodeError


class _Record(BaseModel):
    """Immutable record base."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore", strict=True)


class Delivery(_Record):
    """Delivery details."""
    name: str = ""
    phone: str = ""
    zip: str = ""
    city: str = ""
    address: str = ""
    region: str = ""
    email: str = ""


class Payment(_Record):
    """Payment details."""
    transaction: str = ""
    request_id: str = ""
    currency: str = ""
    provider: str = ""
    amount: int = 0
    payment_dt: int = Field(default=0, description="Payment time, Unix epoch seconds")
    bank: str = ""
    delivery_cost: int = 0
    goods_total: int = 0
    custom_fee: int = 0


class Item(_Record):
    """Order line item."""
    chrt_id: int = 0
    track_number: str = ""
    price: int = 0
    rid: str = ""
    name: str = ""
    sale: int = 0
    size: str = ""
    total_price: int = 0
    nm_id: int = 0
    brand: str = ""
    status: int = 0


class Order(_Record):
    """Canonical order record, keyed by ``order_uid``."""
    order_uid: str = Field(..., min_length=1)
    track_number: str = ""
    entry: str = ""
    delivery: Delivery = Field(default_factory=Delivery)
    payment: Payment = Field(default_factory=Payment)
    # Display order of the source document, never re-sorted
    items: List[Item] = Field(default_factory=list)
    locale: str = ""
    internal_signature: str = ""
    customer_id: str = ""
    delivery_service: str = ""
    shard_key: str = Field(default="", alias="shardkey")
    sm_id: int = 0
    date_created: Optional[datetime] = None
    oof_shard: str = ""

    @field_validator("order_uid")
    @classmethod
    def _no_whitespace(cls, value: str) -> str:
        if any(ch.isspace() for ch in value):
            raise ValueError("order_uid must not contain whitespace")
        return value


def decode_order(payload: Optional[Union[bytes, str]]) -> Order:
    """Decode a UTF-8 JSON document into an :class:`Order`.

    Raises:
        OrderDecodeError: if the payload is not valid JSON, has wrongly typed
            fields or lacks a non-empty ``order_uid``.
    """
    if payload is None:
        raise OrderDecodeError("Empty order payload")
    try:
        return Order.model_validate_json(payload)
    except PydanticValidationError as e:
        raise OrderDecodeError(
            "Malformed order payload",
            {"errors": [
                {"loc": ".".join(str(p) for p in err["loc"]), "msg": err["msg"]}
                for err in e.errors()[:10]
            ]}
        ) from e


def encode_order(order: Order) -> str:
    """Encode an order with its wire field names."""
    return order.model_dump_json(by_alias=True)
