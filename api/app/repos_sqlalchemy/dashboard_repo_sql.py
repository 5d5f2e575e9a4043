"""Helpers for admin dashboard aggregates."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain import OrderStatus
from ..models import Order, Restaurant, User


async def totals(session: AsyncSession) -> dict:
    """Return platform wide counts and revenue from delivered orders."""

    users = await session.scalar(select(func.count()).select_from(User))
    restaurants = await session.scalar(select(func.count()).select_from(Restaurant))
    orders = await session.scalar(select(func.count()).select_from(Order))
    revenue = await session.scalar(
        select(func.coalesce(func.sum(Order.total), 0)).where(
            Order.status == OrderStatus.DELIVERED.value
        )
    )
    return {
        "users": int(users or 0),
        "restaurants": int(restaurants or 0),
        "orders": int(orders or 0),
        "revenue": float(revenue or 0),
    }


async def daily_chart(
    session: AsyncSession, days: int = 7, today: date | None = None
) -> list[dict]:
    """Return per-day order counts and delivered revenue, oldest day first.

    Days are UTC calendar days ending with ``today``. Orders are bucketed by
    creation time; revenue only counts orders that reached ``DELIVERED``.
    """

    today = today or datetime.now(timezone.utc).date()
    first = today - timedelta(days=days - 1)
    start = datetime.combine(first, time.min, timezone.utc)
    result = await session.execute(
        select(Order.created_at, Order.status, Order.total).where(
            Order.created_at >= start
        )
    )
    buckets = {
        first + timedelta(days=offset): {"orders": 0, "revenue": 0.0}
        for offset in range(days)
    }
    for created_at, status, total in result.all():
        bucket = buckets.get(created_at.astimezone(timezone.utc).date())
        if bucket is None:
            continue
        bucket["orders"] += 1
        if status == OrderStatus.DELIVERED.value:
            bucket["revenue"] += float(total)

    return [
        {
            "date": f"{day:%b} {day.day}",
            "revenue": bucket["revenue"],
            "orders": bucket["orders"],
        }
        for day, bucket in buckets.items()
    ]
