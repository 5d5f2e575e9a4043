"""Restaurant and menu persistence helpers."""

from __future__ import annotations

from typing import Any, List, Mapping

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.errors import NotFound
from ..models import FoodItem, Restaurant, new_id

DEFAULT_BANNER = (
    "https://images.unsplash.com/photo-1517248135467-4c7edcad34c4"
    "?auto=format&fit=crop&q=80&w=600"
)
DEFAULT_ITEM_IMAGE = "https://picsum.photos/seed/food/400/400"

PROFILE_FIELDS = ("name", "cuisine", "address", "lat", "lng", "image", "is_open")
ITEM_FIELDS = (
    "name",
    "price",
    "description",
    "category",
    "image",
    "is_popular",
    "is_spicy",
    "is_new",
    "is_available",
)


async def list_restaurants(session: AsyncSession) -> List[Restaurant]:
    result = await session.execute(select(Restaurant).order_by(Restaurant.name))
    return list(result.scalars())


async def get_restaurant(session: AsyncSession, restaurant_id: str) -> Restaurant:
    """Return ``restaurant_id`` with its menu or raise :class:`NotFound`."""

    restaurant = await session.get(Restaurant, restaurant_id, populate_existing=True)
    if restaurant is None:
        raise NotFound("Restaurant not found")
    return restaurant


async def create_restaurant(
    session: AsyncSession, name: str, owner_id: str | None = None, **fields: Any
) -> Restaurant:
    """Add a partner restaurant without committing."""

    restaurant = Restaurant(
        id=new_id(),
        name=name,
        owner_id=owner_id,
        image=fields.pop("image", None) or DEFAULT_BANNER,
        **fields,
    )
    session.add(restaurant)
    await session.flush()
    return restaurant


async def update_restaurant(
    session: AsyncSession, restaurant_id: str, changes: Mapping[str, Any]
) -> Restaurant:
    """Patch profile fields; ``None`` values leave a field untouched."""

    restaurant = await get_restaurant(session, restaurant_id)
    for field in PROFILE_FIELDS:
        value = changes.get(field)
        if value is not None:
            setattr(restaurant, field, value)
    await session.commit()
    return await get_restaurant(session, restaurant_id)


async def add_item(
    session: AsyncSession, restaurant_id: str, data: Mapping[str, Any]
) -> FoodItem:
    """Append a menu item to ``restaurant_id``."""

    await get_restaurant(session, restaurant_id)
    position = await session.scalar(
        select(func.coalesce(func.max(FoodItem.position), -1)).where(
            FoodItem.restaurant_id == restaurant_id
        )
    )
    item = FoodItem(
        id=new_id(),
        restaurant_id=restaurant_id,
        position=int(position) + 1,
        **{field: data[field] for field in ITEM_FIELDS if data.get(field) is not None},
    )
    if not item.image:
        item.image = DEFAULT_ITEM_IMAGE
    session.add(item)
    await session.commit()
    return item


async def _get_item(session: AsyncSession, restaurant_id: str, item_id: str) -> FoodItem:
    await get_restaurant(session, restaurant_id)
    item = await session.get(FoodItem, item_id, populate_existing=True)
    if item is None or item.restaurant_id != restaurant_id:
        raise NotFound("Item not found")
    return item


async def update_item(
    session: AsyncSession,
    restaurant_id: str,
    item_id: str,
    changes: Mapping[str, Any],
) -> FoodItem:
    """Patch a menu item in place; orders already placed keep their snapshot."""

    item = await _get_item(session, restaurant_id, item_id)
    for field in ITEM_FIELDS:
        value = changes.get(field)
        if value is not None:
            setattr(item, field, value)
    await session.commit()
    return item


async def delete_item(session: AsyncSession, restaurant_id: str, item_id: str) -> None:
    """Remove ``item_id`` from the menu. Unknown item ids are ignored."""

    await get_restaurant(session, restaurant_id)
    item = await session.get(FoodItem, item_id)
    if item is not None and item.restaurant_id == restaurant_id:
        await session.delete(item)
        await session.commit()
