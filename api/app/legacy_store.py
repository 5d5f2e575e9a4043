"""Import and export of the single-document ``db.json`` layout.

Older deployments kept every entity in one JSON file shaped as
``{"users": [...], "restaurants": [...], "orders": [...], "vouchers": [...]}``
with camelCase keys and menus nested under each restaurant. These helpers move
such a document into the relational tables and back.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, Dict, Iterable, Mapping, Type

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Base, FoodItem, Order, Restaurant, User, Voucher, utcnow
from .schemas import OrderOut, RestaurantOut, UserOut, VoucherOut

logger = logging.getLogger("api.legacy_store")

_CAMEL = re.compile(r"(?<!^)(?=[A-Z])")


def _snake(key: str) -> str:
    return _CAMEL.sub("_", key).lower()


def _parse_ts(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if not value:
        return utcnow()
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _columns(model: Type[Base], record: Mapping[str, Any]) -> Dict[str, Any]:
    """Map a camelCase ``record`` onto the columns ``model`` defines."""

    names = set(model.__table__.columns.keys())
    return {
        _snake(key): value for key, value in record.items() if _snake(key) in names
    }


async def import_document(session: AsyncSession, doc: Mapping[str, Any]) -> Dict[str, int]:
    """Copy every record of ``doc`` into the database.

    Records whose id already exists are skipped, so importing the same file
    twice is harmless. Legacy password hashes are kept as-is; accounts whose
    hash the current hasher cannot verify simply fail to log in. Returns the
    number of inserted rows per collection.
    """

    counts = {"users": 0, "restaurants": 0, "items": 0, "orders": 0, "vouchers": 0}

    for record in doc.get("users") or []:
        if await session.get(User, record["id"]) is not None:
            continue
        data = _columns(User, record)
        data["password_hash"] = record.get("password") or ""
        session.add(User(**data))
        counts["users"] += 1

    for record in doc.get("restaurants") or []:
        if await session.get(Restaurant, record["id"]) is not None:
            continue
        restaurant = Restaurant(**_columns(Restaurant, record))
        for position, item in enumerate(record.get("items") or []):
            data = _columns(FoodItem, item)
            data.pop("restaurant_id", None)
            restaurant.items.append(FoodItem(position=position, **data))
            counts["items"] += 1
        session.add(restaurant)
        counts["restaurants"] += 1

    for record in doc.get("orders") or []:
        if await session.get(Order, record["id"]) is not None:
            continue
        data = _columns(Order, record)
        data["created_at"] = _parse_ts(record.get("createdAt"))
        data["updated_at"] = _parse_ts(record.get("updatedAt") or record.get("createdAt"))
        data.setdefault("delivery_address", "")
        data["version"] = 1
        session.add(Order(**data))
        counts["orders"] += 1

    for record in doc.get("vouchers") or []:
        if await session.get(Voucher, record["id"]) is not None:
            continue
        data = _columns(Voucher, record)
        data["code"] = str(data["code"]).upper()
        session.add(Voucher(**data))
        counts["vouchers"] += 1

    await session.commit()
    logger.info("imported legacy document %s", counts)
    return counts


def _dump(schema, rows: Iterable[Any]) -> list:
    return [
        schema.model_validate(row).model_dump(mode="json", by_alias=True, exclude_none=True)
        for row in rows
    ]


async def export_document(session: AsyncSession) -> Dict[str, list]:
    """Return the database as a single camelCase document.

    Password hashes are never exported.
    """

    users = (await session.execute(select(User).order_by(User.created_at))).scalars()
    restaurants = (await session.execute(select(Restaurant))).scalars()
    orders = (
        await session.execute(select(Order).order_by(Order.created_at, Order.id))
    ).scalars()
    vouchers = (await session.execute(select(Voucher))).scalars()

    return {
        "users": _dump(UserOut, users),
        "restaurants": _dump(RestaurantOut, restaurants),
        "orders": _dump(OrderOut, orders),
        "vouchers": _dump(VoucherOut, vouchers),
    }
