"""User persistence helpers."""

from __future__ import annotations

from typing import Any, List, Mapping

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain import Role
from ..domain.errors import NotFound, ValidationError
from ..models import User, new_id

PROFILE_FIELDS = (
    "address",
    "phone",
    "lat",
    "lng",
    "vehicle_type",
    "license_plate",
    "photo_url",
)


async def get_user(session: AsyncSession, user_id: str) -> User:
    user = await session.get(User, user_id, populate_existing=True)
    if user is None:
        raise NotFound("User not found")
    return user


async def find_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def create_user(
    session: AsyncSession,
    email: str,
    password_hash: str,
    name: str,
    role: Role = Role.CUSTOMER,
    **fields: Any,
) -> User:
    """Add a user without committing. Duplicate emails are rejected."""

    if await find_by_email(session, email) is not None:
        raise ValidationError("User already exists")
    user = User(
        id=new_id(),
        email=email,
        password_hash=password_hash,
        name=name,
        role=role.value,
        **fields,
    )
    session.add(user)
    await session.flush()
    return user


async def update_profile(
    session: AsyncSession, user_id: str, changes: Mapping[str, Any]
) -> User:
    """Patch profile fields. An empty name keeps the current one."""

    user = await get_user(session, user_id)
    if changes.get("name"):
        user.name = changes["name"]
    for field in PROFILE_FIELDS:
        if field in changes:
            setattr(user, field, changes[field])
    await session.commit()
    return user


async def list_riders(session: AsyncSession) -> List[User]:
    result = await session.execute(
        select(User).where(User.role == Role.RIDER.value).order_by(User.created_at)
    )
    return list(result.scalars())


async def set_rider_status(session: AsyncSession, user_id: str, status: str) -> User:
    """Record the admin's vetting decision for a rider."""

    user = await get_user(session, user_id)
    if user.role != Role.RIDER.value:
        raise ValidationError("User is not a rider")
    user.rider_status = status
    await session.commit()
    return user
