#!/usr/bin/env python3
"""
Publish order documents to the order topic.

Useful for feeding a locally running Order Cache service. Either pass JSON
files (one order per file) or let the script generate synthetic orders.
Malformed documents can be sent on purpose with --malformed to watch the
service drop them.
"""

import argparse
import json
import random
import string
import sys
import os
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

from kafka import KafkaProducer


def _random_token(length: int) -> str:
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=length))


def generate_order(order_uid: str) -> Dict[str, Any]:
    """Build a synthetic order document with the feed's field names."""
    track_number = "WB" + _random_token(10).upper()
    items: List[Dict[str, Any]] = []
    for _ in range(random.randint(1, 3)):
        price = random.randint(100, 5000)
        sale = random.choice([0, 10, 30])
        items.append({
            "chrt_id": random.randint(1_000_000, 9_999_999),
            "track_number": track_number,
            "price": price,
            "rid": _random_token(20),
            "name": random.choice(["Mascaras", "Sneakers", "T-shirt", "Backpack"]),
            "sale": sale,
            "size": random.choice(["0", "S", "M", "L"]),
            "total_price": price * (100 - sale) // 100,
            "nm_id": random.randint(100_000, 999_999),
            "brand": random.choice(["Vivienne Sabo", "Acme", "Northwind"]),
            "status": 202,
        })
    goods_total = sum(item["total_price"] for item in items)

    return {
        "order_uid": order_uid,
        "track_number": track_number,
        "entry": "WBIL",
        "delivery": {
            "name": "Test Testov",
            "phone": "+9720000000",
            "zip": "2639809",
            "city": "Kiryat Mozkin",
            "address": "Ploshad Mira 15",
            "region": "Kraiot",
            "email": "test@gmail.com",
        },
        "payment": {
            "transaction": order_uid,
            "request_id": "",
            "currency": "USD",
            "provider": "wbpay",
            "amount": goods_total + 1500,
            "payment_dt": int(time.time()),
            "bank": "alpha",
            "delivery_cost": 1500,
            "goods_total": goods_total,
            "custom_fee": 0,
        },
        "items": items,
        "locale": "en",
        "internal_signature": "",
        "customer_id": "test",
        "delivery_service": "meest",
        "shardkey": "9",
        "sm_id": 99,
        "date_created": datetime.now(timezone.utc).isoformat(),
        "oof_shard": "1",
    }


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Publish order documents to Kafka.")
    parser.add_argument("files", nargs="*", type=Path, help="JSON files, one order each")
    parser.add_argument("--bootstrap", default=os.getenv("ORDERS_KAFKA_BOOTSTRAP", "localhost:9092"), help="Kafka bootstrap servers")
    parser.add_argument("--topic", default=os.getenv("ORDERS_KAFKA_TOPIC", "orders.v1"), help="Order topic")
    parser.add_argument("--count", type=int, default=1, help="Synthetic orders to generate when no files are given")
    parser.add_argument("--malformed", type=int, default=0, help="Additional malformed payloads to send")
    parser.add_argument("--rate", type=float, default=0.0, help="Messages per second (0 = as fast as possible)")
    return parser.parse_args()


def main() -> int:
    args = _parse_args()

    payloads: List[bytes] = []
    if args.files:
        for path in args.files:
            payloads.append(path.read_bytes())
    else:
        for _ in range(args.count):
            payloads.append(json.dumps(generate_order(_random_token(19))).encode("utf-8"))
    payloads.extend(b'{"order_uid": ' for _ in range(args.malformed))

    try:
        producer = KafkaProducer(bootstrap_servers=args.bootstrap, acks="all", retries=3)
    except Exception as exc:  # pragma: no cover - CLI surface
        print(f"[publish-orders] cannot connect: {exc}", file=sys.stderr)
        return 1

    delay = 1.0 / args.rate if args.rate > 0 else 0.0
    try:
        for payload in payloads:
            producer.send(args.topic, value=payload)
            if delay:
                time.sleep(delay)
        producer.flush()
    except KeyboardInterrupt:
        return 130
    finally:
        producer.close()

    print(f"[publish-orders] sent {len(payloads)} message(s) to {args.topic}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
