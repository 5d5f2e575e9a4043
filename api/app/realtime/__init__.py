"""Real-time fan-out of order events over Redis pub/sub."""

from .notifier import (
    BROADCAST_CHANNEL,
    Notifier,
    order_channel,
    restaurant_channel,
)

__all__ = ["BROADCAST_CHANNEL", "Notifier", "order_channel", "restaurant_channel"]
