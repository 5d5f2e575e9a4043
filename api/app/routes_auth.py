"""Account registration and email/password login."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from .auth import create_access_token, hash_password, verify_password
from .db import get_db
from .domain import Role
from .domain.errors import Unauthorized
from .repos_sqlalchemy import restaurants_repo_sql, users_repo_sql
from .schemas import AuthResponse, LoginRequest, RegisterRequest

router = APIRouter(prefix="/api/auth", tags=["auth"])

logger = logging.getLogger("api.auth")


@router.post("/register", response_model=AuthResponse)
async def register(payload: RegisterRequest, session: AsyncSession = Depends(get_db)):
    """Create an account and return it with a fresh token.

    Merchants get a partner restaurant named ``restaurantName`` or, failing
    that, after themselves.
    """

    user = await users_repo_sql.create_user(
        session,
        email=payload.email,
        password_hash=hash_password(payload.password),
        name=payload.name,
        role=payload.role,
    )
    if payload.role is Role.MERCHANT:
        restaurant = await restaurants_repo_sql.create_restaurant(
            session,
            payload.restaurant_name or f"{payload.name}'s Kitchen",
            owner_id=user.id,
        )
        user.restaurant_id = restaurant.id
    elif payload.role is Role.RIDER:
        user.rider_status = "PENDING"
        user.is_online = False
    await session.commit()
    logger.info("user registered role=%s", user.role)
    return {"user": user, "token": create_access_token(user)}


@router.post("/login", response_model=AuthResponse)
async def login(payload: LoginRequest, session: AsyncSession = Depends(get_db)):
    user = await users_repo_sql.find_by_email(session, payload.email.strip().lower())
    if user is None or not verify_password(payload.password, user.password_hash):
        raise Unauthorized("Invalid credentials")
    return {"user": user, "token": create_access_token(user)}
