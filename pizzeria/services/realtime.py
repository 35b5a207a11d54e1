"""Order status events over Redis pub/sub.

Services publish from request threads with a blocking client; tracking
sockets read a single order's channel through :class:`OrderEventStream`.
"""

import json
import logging
from collections.abc import AsyncIterator
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

import redis
import redis.asyncio as aioredis

from pizzeria.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


class OrderEventType(StrEnum):
    ORDER_CREATED = "order_created"
    PAYMENT_CONFIRMED = "payment_confirmed"
    PAYMENT_FAILED = "payment_failed"
    STATUS_CHANGED = "status_changed"
    ORDER_CANCELLED = "order_cancelled"
    REFUND_REQUESTED = "refund_requested"


def order_channel(order_pk: int) -> str:
    return f"order:{order_pk}"


_publisher: redis.Redis | None = None


def get_publisher() -> redis.Redis:
    """Process-wide blocking client; connects lazily on first publish."""
    global _publisher
    if _publisher is None:
        _publisher = redis.from_url(settings.redis_url, socket_connect_timeout=2)
    return _publisher


def order_event(order_pk: int, event_type: OrderEventType, data: dict[str, Any]) -> dict[str, Any]:
    return {
        "type": event_type.value,
        "order_pk": order_pk,
        "timestamp": datetime.now(UTC).isoformat(),
        "data": data,
    }


def publish_order_event(
    order_pk: int, event_type: OrderEventType, data: dict[str, Any] | None = None
) -> None:
    """Announce a committed order change to anyone tracking the order.

    Tracking is best effort: a Redis outage is logged and the order change
    stands.
    """
    event = order_event(order_pk, event_type, data or {})
    try:
        receivers = get_publisher().publish(order_channel(order_pk), json.dumps(event))
    except redis.RedisError as e:
        logger.error(f"Could not publish {event_type.value} for order {order_pk}: {e}")
        return
    logger.debug(f"{event_type.value} for order {order_pk} reached {receivers} tracker(s)")


class OrderEventStream:
    """Decoded events from one order's channel.

    Subscribes on ``async with`` entry and releases the connection on exit::

        async with OrderEventStream(order_pk) as events:
            async for event in events:
                ...
    """

    def __init__(self, order_pk: int) -> None:
        self.channel = order_channel(order_pk)
        self._redis = aioredis.from_url(settings.redis_url)
        self._pubsub = self._redis.pubsub(ignore_subscribe_messages=True)

    async def __aenter__(self) -> "OrderEventStream":
        await self._pubsub.subscribe(self.channel)
        return self

    async def __aexit__(self, *exc_info) -> None:
        try:
            await self._pubsub.unsubscribe(self.channel)
        finally:
            await self._pubsub.aclose()
            await self._redis.aclose()

    async def __aiter__(self) -> AsyncIterator[dict[str, Any]]:
        async for message in self._pubsub.listen():
            if message["type"] != "message":
                continue
            try:
                yield json.loads(message["data"])
            except json.JSONDecodeError:
                logger.warning(f"Dropped malformed event on {self.channel}")
