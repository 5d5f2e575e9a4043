"""Order status enumeration, allowed transitions and the actors behind them."""

from __future__ import annotations

from enum import Enum


class OrderStatus(str, Enum):
    """Enumerate the lifecycle states for an order."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    PREPARING = "PREPARING"
    READY_FOR_PICKUP = "READY_FOR_PICKUP"
    PICKED_UP = "PICKED_UP"
    DELIVERING = "DELIVERING"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class Role(str, Enum):
    """Roles a user can act under."""

    CUSTOMER = "CUSTOMER"
    MERCHANT = "MERCHANT"
    RIDER = "RIDER"
    ADMIN = "ADMIN"


# ``ACCEPTED`` only ever means the kitchen accepted the order. A rider joins an
# order through a claim, which sets ``rider_id`` and leaves the status alone.
TRANSITIONS: dict[OrderStatus, list[OrderStatus]] = {
    OrderStatus.PENDING: [OrderStatus.ACCEPTED, OrderStatus.CANCELLED],
    OrderStatus.ACCEPTED: [OrderStatus.PREPARING, OrderStatus.PICKED_UP],
    OrderStatus.PREPARING: [OrderStatus.READY_FOR_PICKUP],
    OrderStatus.READY_FOR_PICKUP: [OrderStatus.PICKED_UP],
    OrderStatus.PICKED_UP: [OrderStatus.DELIVERING],
    OrderStatus.DELIVERING: [OrderStatus.DELIVERED],
    OrderStatus.DELIVERED: [],
    OrderStatus.CANCELLED: [],
}

ACTORS: dict[tuple[OrderStatus, OrderStatus], Role] = {
    (OrderStatus.PENDING, OrderStatus.ACCEPTED): Role.MERCHANT,
    (OrderStatus.PENDING, OrderStatus.CANCELLED): Role.MERCHANT,
    (OrderStatus.ACCEPTED, OrderStatus.PREPARING): Role.MERCHANT,
    (OrderStatus.PREPARING, OrderStatus.READY_FOR_PICKUP): Role.MERCHANT,
    (OrderStatus.ACCEPTED, OrderStatus.PICKED_UP): Role.RIDER,
    (OrderStatus.READY_FOR_PICKUP, OrderStatus.PICKED_UP): Role.RIDER,
    (OrderStatus.PICKED_UP, OrderStatus.DELIVERING): Role.RIDER,
    (OrderStatus.DELIVERING, OrderStatus.DELIVERED): Role.RIDER,
}

TERMINAL: frozenset[OrderStatus] = frozenset(
    status for status, targets in TRANSITIONS.items() if not targets
)


def can_transition(src: OrderStatus, dst: OrderStatus) -> bool:
    """Return ``True`` if an order can move from ``src`` to ``dst``."""

    return dst in TRANSITIONS.get(src, [])


def actor_for(src: OrderStatus, dst: OrderStatus) -> Role | None:
    """Return the role that owns the ``src`` -> ``dst`` transition."""

    return ACTORS.get((src, dst))


def may_perform(role: Role, src: OrderStatus, dst: OrderStatus) -> bool:
    """Return ``True`` if ``role`` is allowed to move an order ``src`` -> ``dst``."""

    if role is Role.ADMIN:
        return can_transition(src, dst)
    return actor_for(src, dst) is role


def claimable_statuses(include_pending: bool = True) -> tuple[OrderStatus, ...]:
    """Statuses in which an unassigned order sits in the rider pool."""

    if include_pending:
        return (OrderStatus.PENDING, OrderStatus.READY_FOR_PICKUP)
    return (OrderStatus.READY_FOR_PICKUP,)


def assignable_statuses(include_pending: bool = True) -> tuple[OrderStatus, ...]:
    """Statuses in which an unassigned order can still be claimed by a rider.

    Besides the pool itself, an order the kitchen has accepted or is preparing
    can take a rider ahead of pickup.
    """

    return claimable_statuses(include_pending) + (
        OrderStatus.ACCEPTED,
        OrderStatus.PREPARING,
    )
