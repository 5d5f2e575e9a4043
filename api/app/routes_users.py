"""Profile management for every role."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from .db import get_db
from .repos_sqlalchemy import users_repo_sql
from .schemas import ProfileUpdate, UserOut

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/{user_id}", response_model=UserOut)
async def get_user(user_id: str, session: AsyncSession = Depends(get_db)):
    return await users_repo_sql.get_user(session, user_id)


@router.patch("/{user_id}", response_model=UserOut)
async def update_profile(
    user_id: str, payload: ProfileUpdate, session: AsyncSession = Depends(get_db)
):
    """Patch the fields present in the body; omitted fields are kept."""
    changes = payload.model_dump(exclude_unset=True)
    return await users_repo_sql.update_profile(session, user_id, changes)
