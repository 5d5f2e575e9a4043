"""Order lifecycle: guarded status transitions, rider claims and location pings.

All mutations of one order are serialised by an in-process ``asyncio.Lock``
held across read, check, write and commit. The repository additionally
conditions every write on the version it read, so a writer in another process
surfaces as :class:`~api.app.domain.errors.StaleOrder` rather than a lost
update. Events are published only after the write has been committed.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from ..domain import (
    OrderStatus,
    Role,
    actor_for,
    assignable_statuses,
    can_transition,
    may_perform,
)
from ..domain.errors import (
    ActorNotAllowed,
    AlreadyClaimed,
    InvalidTransition,
    StaleOrder,
)
from ..models import Order
from ..realtime import Notifier
from ..repos_sqlalchemy import orders_repo_sql
from ..routes_metrics import (
    order_claims_total,
    order_transitions_total,
    orders_created_total,
)

logger = logging.getLogger("api.lifecycle")

_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()


@asynccontextmanager
async def order_lock(order_id: str) -> AsyncIterator[None]:
    """Hold the in-process lock for ``order_id``."""

    lock = _locks.get(order_id)
    if lock is None:
        lock = asyncio.Lock()
        _locks[order_id] = lock
    async with lock:
        yield


async def create_order(
    session: AsyncSession, notifier: Notifier, draft: Mapping[str, Any]
) -> Order:
    """Persist a new order and announce it to the restaurant and riders."""

    order = await orders_repo_sql.create_order(session, draft)
    orders_created_total.inc()
    logger.info(
        "order created restaurant=%s total=%s",
        order.restaurant_id,
        order.total,
        extra={"order": order.id},
    )
    await notifier.order_created(order)
    return order


def _check_transition(
    order: Order,
    target: OrderStatus,
    role: Role | None,
    rider_id: str | None,
) -> OrderStatus:
    current = OrderStatus(order.status)
    if not can_transition(current, target):
        raise InvalidTransition(
            f"cannot move order from {current.value} to {target.value}"
        )
    if role is not None and not may_perform(role, current, target):
        raise ActorNotAllowed(
            f"{role.value} may not move an order from {current.value} to {target.value}"
        )
    if actor_for(current, target) is Role.RIDER:
        if order.rider_id is None:
            raise InvalidTransition("order has no assigned rider")
        if rider_id is not None and rider_id != order.rider_id:
            raise AlreadyClaimed("order is assigned to another rider")
    return current


async def apply_transition(
    session: AsyncSession,
    notifier: Notifier,
    order_id: str,
    status: OrderStatus | str,
    role: Role | None = None,
    rider_id: str | None = None,
) -> Order:
    """Move ``order_id`` to ``status`` if the transition graph allows it.

    ``role`` is the acting role; when omitted, as with legacy dashboards, only
    reachability is enforced. For rider-owned transitions ``rider_id`` must
    match the assigned rider. A rejected request leaves the order untouched.
    """

    target = OrderStatus(status)
    async with order_lock(order_id):
        order = await orders_repo_sql.get_order(session, order_id)
        previous = _check_transition(order, target, role, rider_id)
        order = await orders_repo_sql.update_status(
            session, order_id, target, expected_version=order.version
        )
    order_transitions_total.labels(status=target.value).inc()
    logger.info(
        "order %s -> %s",
        previous.value,
        target.value,
        extra={"order": order_id},
    )
    await notifier.order_changed(order, previous)
    return order


async def claim_order(
    session: AsyncSession,
    notifier: Notifier,
    order_id: str,
    rider_id: str,
    include_pending: bool = True,
) -> Order:
    """Assign ``rider_id`` to an unassigned order that is not yet picked up.

    Claiming an order the rider already holds returns it unchanged. Of two
    riders racing for the same order exactly one wins; the other receives
    :class:`AlreadyClaimed`.
    """

    async with order_lock(order_id):
        order = await orders_repo_sql.get_order(session, order_id)
        if order.rider_id == rider_id:
            return order
        if order.rider_id is not None:
            order_claims_total.labels(outcome="taken").inc()
            raise AlreadyClaimed("order already claimed by another rider")
        status = OrderStatus(order.status)
        if status not in assignable_statuses(include_pending):
            raise InvalidTransition(f"order in {status.value} cannot be claimed")
        try:
            order = await orders_repo_sql.assign_rider(
                session, order_id, rider_id, expected_version=order.version
            )
        except StaleOrder:
            current = await orders_repo_sql.get_order(session, order_id)
            if current.rider_id == rider_id:
                return current
            if current.rider_id is not None:
                order_claims_total.labels(outcome="taken").inc()
                raise AlreadyClaimed("order already claimed by another rider") from None
            raise
    order_claims_total.labels(outcome="won").inc()
    logger.info("order claimed rider=%s", rider_id, extra={"order": order_id})
    await notifier.order_changed(order, status)
    return order


async def update_location(
    session: AsyncSession,
    notifier: Notifier,
    order_id: str,
    lat: float,
    lng: float,
) -> Order:
    """Record a rider position ping and forward it to the order's viewers."""

    async with order_lock(order_id):
        order = await orders_repo_sql.update_location(session, order_id, lat, lng)
    await notifier.location_changed(order_id, lat, lng)
    return order
