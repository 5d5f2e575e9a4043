"""Publish order events to named topics.

Three audiences exist: viewers of one order (``rt:order:{id}``), staff of
one restaurant (``rt:restaurant:{id}``) and every connected client
(``rt:broadcast``, used by rider consoles). Messages are JSON envelopes
``{"event": name, "data": payload}``.

Delivery is best effort and at most once. Nothing is buffered for clients
that are not subscribed at publish time; a reconnecting dashboard has to
re-fetch state over HTTP.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from ..domain import OrderStatus, claimable_statuses
from ..models import Order
from ..routes_metrics import realtime_events_total
from ..schemas import order_payload

logger = logging.getLogger("api.realtime")

BROADCAST_CHANNEL = "rt:broadcast"

NEW_ORDER = "new_order"
ORDER_AVAILABLE = "order_available"
ORDER_STATUS_UPDATED = "order_status_updated"
ORDER_UPDATED = "order_updated"
ORDER_LOCATION_UPDATED = "order_location_updated"


def order_channel(order_id: str) -> str:
    return f"rt:order:{order_id}"


def restaurant_channel(restaurant_id: str) -> str:
    return f"rt:restaurant:{restaurant_id}"


class Notifier:
    """Publish order lifecycle events through a Redis client."""

    def __init__(self, redis: Any, include_pending: bool = True) -> None:
        self.redis = redis
        self.include_pending = include_pending

    async def publish(self, channel: str, event: str, data: Any) -> None:
        """Publish one event; failures are logged and never raised."""

        message = json.dumps({"event": event, "data": data})
        try:
            await self.redis.publish(channel, message)
        except Exception:
            logger.warning("publish failed channel=%s event=%s", channel, event)
            return
        realtime_events_total.labels(event=event).inc()

    async def order_created(self, order: Order) -> None:
        """Tell the restaurant about a new order and offer it to riders."""

        payload = order_payload(order)
        await self.publish(restaurant_channel(order.restaurant_id), NEW_ORDER, payload)
        if OrderStatus(order.status) in claimable_statuses(self.include_pending):
            await self.publish(BROADCAST_CHANNEL, ORDER_AVAILABLE, payload)

    async def order_changed(self, order: Order, previous: OrderStatus | None = None) -> None:
        """Push the new state to the order's viewers and to every client.

        ``previous`` is the status before the change. An unassigned order that
        just became ready is announced as available when pending orders are
        not already part of the rider pool.
        """

        payload = order_payload(order)
        await self.publish(order_channel(order.id), ORDER_STATUS_UPDATED, payload)
        await self.publish(BROADCAST_CHANNEL, ORDER_UPDATED, payload)
        status = OrderStatus(order.status)
        if (
            not self.include_pending
            and previous is not status
            and status is OrderStatus.READY_FOR_PICKUP
            and order.rider_id is None
        ):
            await self.publish(BROADCAST_CHANNEL, ORDER_AVAILABLE, payload)

    async def location_changed(self, order_id: str, lat: float, lng: float) -> None:
        await self.publish(
            order_channel(order_id), ORDER_LOCATION_UPDATED, {"lat": lat, "lng": lng}
        )
