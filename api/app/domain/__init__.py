"""Domain models and helpers."""

from .order_status import (
    ACTORS,
    TERMINAL,
    TRANSITIONS,
    OrderStatus,
    Role,
    actor_for,
    assignable_statuses,
    can_transition,
    claimable_statuses,
    may_perform,
)

__all__ = [
    "ACTORS",
    "TERMINAL",
    "TRANSITIONS",
    "OrderStatus",
    "Role",
    "actor_for",
    "assignable_statuses",
    "can_transition",
    "claimable_statuses",
    "may_perform",
]
