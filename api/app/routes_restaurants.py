"""Restaurant directory and merchant menu management.

Menu edits never touch orders already placed: order lines are snapshots
taken at checkout.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from .db import get_db
from .repos_sqlalchemy import restaurants_repo_sql
from .schemas import (
    FoodItemCreate,
    FoodItemOut,
    FoodItemUpdate,
    RestaurantOut,
    RestaurantUpdate,
)

router = APIRouter(prefix="/api/restaurants", tags=["restaurants"])


@router.get("", response_model=List[RestaurantOut])
async def list_restaurants(session: AsyncSession = Depends(get_db)):
    return await restaurants_repo_sql.list_restaurants(session)


@router.get("/{restaurant_id}", response_model=RestaurantOut)
async def get_restaurant(restaurant_id: str, session: AsyncSession = Depends(get_db)):
    return await restaurants_repo_sql.get_restaurant(session, restaurant_id)


@router.patch("/{restaurant_id}", response_model=RestaurantOut)
async def update_restaurant(
    restaurant_id: str,
    payload: RestaurantUpdate,
    session: AsyncSession = Depends(get_db),
):
    changes = payload.model_dump(exclude_unset=True)
    return await restaurants_repo_sql.update_restaurant(session, restaurant_id, changes)


@router.post("/{restaurant_id}/items", response_model=FoodItemOut)
async def add_item(
    restaurant_id: str,
    payload: FoodItemCreate,
    session: AsyncSession = Depends(get_db),
):
    return await restaurants_repo_sql.add_item(session, restaurant_id, payload.model_dump())


@router.patch("/{restaurant_id}/items/{item_id}", response_model=FoodItemOut)
async def update_item(
    restaurant_id: str,
    item_id: str,
    payload: FoodItemUpdate,
    session: AsyncSession = Depends(get_db),
):
    changes = payload.model_dump(exclude_unset=True)
    return await restaurants_repo_sql.update_item(
        session, restaurant_id, item_id, changes
    )


@router.delete("/{restaurant_id}/items/{item_id}")
async def delete_item(
    restaurant_id: str, item_id: str, session: AsyncSession = Depends(get_db)
) -> dict:
    await restaurants_repo_sql.delete_item(session, restaurant_id, item_id)
    return {"message": "Item deleted"}
