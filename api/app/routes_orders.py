"""Order routes: checkout, dashboard listings and lifecycle updates.

Responses are bare order objects or arrays in the camelCase shape the
dashboards consume. Callers sort listings themselves; they are returned in
creation order.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from config import get_settings

from .auth import Actor, optional_actor
from .db import get_db
from .deps.realtime import get_notifier
from .domain import Role
from .domain.errors import ActorNotAllowed
from .realtime import Notifier
from .repos_sqlalchemy import orders_repo_sql
from .schemas import ClaimRequest, LocationUpdate, OrderCreate, OrderOut, StatusUpdate
from .services import lifecycle

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("", response_model=OrderOut)
async def create_order(
    payload: OrderCreate,
    session: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    """Place an order in ``PENDING``; items and total are stored as sent."""
    draft = payload.model_dump()
    return await lifecycle.create_order(session, notifier, draft)


@router.get("/available", response_model=List[OrderOut])
async def list_available(session: AsyncSession = Depends(get_db)):
    """Orders riders can currently claim."""
    include_pending = get_settings().available_includes_pending
    return await orders_repo_sql.list_available(session, include_pending)


@router.get("/customer/{customer_id}", response_model=List[OrderOut])
async def list_customer_orders(customer_id: str, session: AsyncSession = Depends(get_db)):
    return await orders_repo_sql.list_by_customer(session, customer_id)


@router.get("/restaurant/{restaurant_id}", response_model=List[OrderOut])
async def list_restaurant_orders(
    restaurant_id: str, session: AsyncSession = Depends(get_db)
):
    return await orders_repo_sql.list_by_restaurant(session, restaurant_id)


@router.get("/rider/{rider_id}", response_model=List[OrderOut])
async def list_rider_orders(rider_id: str, session: AsyncSession = Depends(get_db)):
    return await orders_repo_sql.list_by_rider(session, rider_id)


@router.get("/{order_id}", response_model=OrderOut)
async def get_order(order_id: str, session: AsyncSession = Depends(get_db)):
    """Full current state, used by clients to resync after reconnecting."""
    return await orders_repo_sql.get_order(session, order_id)


@router.patch("/{order_id}/status", response_model=OrderOut)
async def update_status(
    order_id: str,
    payload: StatusUpdate,
    session: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    actor: Optional[Actor] = Depends(optional_actor),
):
    """Apply a status transition.

    A bearer token, when sent, decides the acting role and, for riders, the
    rider id; otherwise the optional ``role`` and ``riderId`` body fields are
    used.
    """

    role, rider_id = payload.role, payload.rider_id
    if actor is not None:
        role = actor.role
        if actor.role is Role.RIDER:
            rider_id = actor.user_id
    return await lifecycle.apply_transition(
        session, notifier, order_id, payload.status, role=role, rider_id=rider_id
    )


@router.post("/{order_id}/claim", response_model=OrderOut)
async def claim_order(
    order_id: str,
    payload: ClaimRequest,
    session: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    actor: Optional[Actor] = Depends(optional_actor),
):
    """Assign a rider to an order from the available pool."""

    rider_id = payload.rider_id
    if actor is not None:
        if actor.role not in (Role.RIDER, Role.ADMIN):
            raise ActorNotAllowed(f"{actor.role.value} may not claim orders")
        if actor.role is Role.RIDER:
            rider_id = actor.user_id
    return await lifecycle.claim_order(
        session,
        notifier,
        order_id,
        rider_id,
        include_pending=get_settings().available_includes_pending,
    )


@router.patch("/{order_id}/location", response_model=OrderOut)
async def update_location(
    order_id: str,
    payload: LocationUpdate,
    session: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    """Rider position ping, sent every few seconds while delivering."""
    return await lifecycle.update_location(
        session, notifier, order_id, payload.lat, payload.lng
    )
