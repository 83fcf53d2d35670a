"""
Unit tests for the order model and JSON codec.
"""

import json

import pytest
from pydantic import ValidationError as PydanticValidationError

from service_orders.app.orders.models import Order, decode_order, encode_order
from shared.errors import OrderDecodeError

from helpers import OrderFactory, SAMPLE_ORDER


class TestDecodeOrder:
    """Test cases for decode_order."""

    def test_decode_sample_order(self):
        """Test decoding a complete order document."""
        order = decode_order(OrderFactory.payload())

        assert order.order_uid == "b563feb7b2b84b6test"
        assert order.shard_key == "9"
        assert order.sm_id == 99
        assert order.delivery.city == "Kiryat Mozkin"
        assert order.payment.payment_dt == 1637907727
        assert order.items[0].chrt_id == 9934930
        assert order.date_created.year == 2021

    def test_decode_accepts_str(self):
        """Test decoding from a text payload."""
        order = decode_order(json.dumps(SAMPLE_ORDER))
        assert order.order_uid == SAMPLE_ORDER["order_uid"]

    def test_missing_fields_default_to_zero_values(self):
        """Test that only order_uid is mandatory."""
        order = decode_order(b'{"order_uid": "minimal"}')

        assert order.track_number == ""
        assert order.sm_id == 0
        assert order.items == []
        assert order.payment.amount == 0
        assert order.date_created is None

    @pytest.mark.parametrize("payload", [
        b"not json",
        b'{"order_uid": ',
        b'{"track_number": "WB"}',
        b'{"order_uid": ""}',
        b'{"order_uid": "x", "sm_id": "ninety-nine"}',
        b'{"order_uid": "x", "sm_id": "99"}',
        b'{"order_uid": "x", "payment": {"amount": "1817"}}',
        b'{"order_uid": "   "}',
        b'{"order_uid": " order-9 "}',
        b'{"order_uid": "order 9"}',
        b'{"order_uid": "x", "items": {"chrt_id": 1}}',
        b"[]",
        b"\xff\xfe",
    ])
    def test_malformed_payloads_raise_decode_error(self, payload):
        """Test that malformed payloads raise OrderDecodeError."""
        with pytest.raises(OrderDecodeError) as exc_info:
            decode_order(payload)

        assert exc_info.value.code == "ORDER_DECODE_ERROR"
        assert exc_info.value.details["errors"]

    def test_missing_payload_raises_decode_error(self):
        """Test that a tombstone payload is rejected."""
        with pytest.raises(OrderDecodeError) as exc_info:
            decode_order(None)

        assert exc_info.value.code == "ORDER_DECODE_ERROR"

    def test_items_order_preserved(self):
        """Test that line items keep their document order."""
        items = list(reversed(OrderFactory.items(5)))
        order = decode_order(OrderFactory.payload(items=items))

        assert [item.chrt_id for item in order.items] == [1004, 1003, 1002, 1001, 1000]


class TestEncodeOrder:
    """Test cases for encode_order."""

    def test_encode_uses_wire_names(self):
        """Test that encoding uses the feed's field names."""
        data = json.loads(encode_order(decode_order(OrderFactory.payload())))

        assert data["shardkey"] == "9"
        assert "shard_key" not in data
        assert data["payment"]["delivery_cost"] == 1500

    def test_reencoded_document_matches_source(self):
        """Test that a decoded document encodes back to the same content."""
        source = OrderFactory.document("abc123", items=OrderFactory.items(3))
        data = json.loads(encode_order(decode_order(json.dumps(source))))

        date_created = data.pop("date_created")
        expected = dict(source)
        assert date_created.startswith(expected.pop("date_created")[:19])
        assert data == expected

    def test_order_is_immutable(self):
        """Test that orders cannot be modified in place."""
        order = decode_order(OrderFactory.payload())

        with pytest.raises(PydanticValidationError):
            order.track_number = "changed"
