"""SQLAlchemy-backed repository helpers for orders.

These helpers implement the order workflows without any side effects beyond
database mutations; validation of the transition graph and event emission
live in :mod:`api.app.services.lifecycle`. They operate on ``AsyncSession``
instances. Line items, total and display names are snapshotted at creation so
that historical prices are retained even if the menu changes later.

Every write bumps ``Order.version``. Callers that pass ``expected_version``
get :class:`~api.app.domain.errors.StaleOrder` instead of silently
overwriting a concurrent change.
"""

from __future__ import annotations

import copy
from datetime import datetime, timedelta
from typing import Any, Iterable, List, Mapping

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain import OrderStatus, claimable_statuses
from ..domain.errors import NotFound, StaleOrder
from ..models import Order, new_id, utcnow

DRAFT_FIELDS = (
    "customer_id",
    "restaurant_id",
    "delivery_address",
    "delivery_lat",
    "delivery_lng",
    "rider_lat",
    "rider_lng",
    "restaurant_lat",
    "restaurant_lng",
    "customer_name",
    "restaurant_name",
    "payment_method",
    "payment_status",
)


def _next_stamp(previous: datetime | None) -> datetime:
    """Return now, nudged past ``previous`` so ``updated_at`` always grows."""

    now = utcnow()
    if previous is not None and now <= previous:
        now = previous + timedelta(microseconds=1)
    return now


def _snapshot_items(items: Iterable[Mapping[str, Any]]) -> List[dict]:
    return [
        {
            "id": str(item["id"]),
            "name": item.get("name", ""),
            "price": float(item["price"]),
            "quantity": int(item["quantity"]),
        }
        for item in copy.deepcopy(list(items))
    ]


async def create_order(session: AsyncSession, draft: Mapping[str, Any]) -> Order:
    """Insert a new ``PENDING`` order built from ``draft`` and return it.

    ``draft`` uses the column names of :class:`~api.app.models.Order`. The
    referenced customer and restaurant are not looked up.
    """

    now = utcnow()
    order = Order(
        id=new_id(),
        items=_snapshot_items(draft.get("items", [])),
        total=float(draft["total"]),
        status=OrderStatus.PENDING.value,
        created_at=now,
        updated_at=now,
        version=1,
        **{field: draft.get(field) for field in DRAFT_FIELDS},
    )
    if order.delivery_address is None:
        order.delivery_address = ""
    session.add(order)
    await session.commit()
    return order


async def get_order(session: AsyncSession, order_id: str) -> Order:
    """Return the order ``order_id`` or raise :class:`NotFound`."""

    order = await session.get(Order, order_id, populate_existing=True)
    if order is None:
        raise NotFound(f"order {order_id!r} not found")
    return order


async def _list_where(session: AsyncSession, *criteria) -> List[Order]:
    result = await session.execute(
        select(Order).where(*criteria).order_by(Order.created_at, Order.id)
    )
    return list(result.scalars())


async def list_by_customer(session: AsyncSession, customer_id: str) -> List[Order]:
    """Orders placed by ``customer_id`` in storage order."""
    return await _list_where(session, Order.customer_id == customer_id)


async def list_by_restaurant(
    session: AsyncSession, restaurant_id: str
) -> List[Order]:
    """Orders placed at ``restaurant_id`` in storage order."""
    return await _list_where(session, Order.restaurant_id == restaurant_id)


async def list_by_rider(session: AsyncSession, rider_id: str) -> List[Order]:
    """Orders assigned to ``rider_id`` in storage order."""
    return await _list_where(session, Order.rider_id == rider_id)


async def list_available(
    session: AsyncSession, include_pending: bool = True
) -> List[Order]:
    """Return unassigned orders sitting in the rider pool."""

    statuses = [status.value for status in claimable_statuses(include_pending)]
    return await _list_where(
        session, Order.status.in_(statuses), Order.rider_id.is_(None)
    )


async def _write(
    session: AsyncSession,
    order_id: str,
    values: dict,
    expected_version: int | None = None,
    *criteria,
) -> Order:
    """Apply ``values`` to ``order_id`` as one conditional UPDATE."""

    current = await get_order(session, order_id)
    version = current.version if expected_version is None else expected_version
    values = {
        **values,
        "updated_at": _next_stamp(current.updated_at),
        "version": version + 1,
    }
    result = await session.execute(
        update(Order)
        .where(Order.id == order_id, Order.version == version, *criteria)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await session.rollback()
        raise StaleOrder(f"order {order_id!r} was modified concurrently")
    await session.commit()
    return await get_order(session, order_id)


async def update_status(
    session: AsyncSession,
    order_id: str,
    new_status: OrderStatus | str,
    rider_id: str | None = None,
    expected_version: int | None = None,
) -> Order:
    """Persist ``new_status`` for ``order_id`` and timestamp it.

    ``rider_id`` overwrites the assigned rider when given. No reachability
    check is made here.
    """

    values: dict[str, Any] = {"status": OrderStatus(new_status).value}
    if rider_id:
        values["rider_id"] = rider_id
    return await _write(session, order_id, values, expected_version)


async def assign_rider(
    session: AsyncSession,
    order_id: str,
    rider_id: str,
    expected_version: int | None = None,
) -> Order:
    """Attach ``rider_id`` to an order that has no rider yet."""

    return await _write(
        session,
        order_id,
        {"rider_id": rider_id},
        expected_version,
        Order.rider_id.is_(None),
    )


async def update_location(
    session: AsyncSession, order_id: str, lat: float, lng: float
) -> Order:
    """Record the rider's current position on ``order_id``."""

    return await _write(session, order_id, {"rider_lat": lat, "rider_lng": lng})
