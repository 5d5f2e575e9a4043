"""Platform administration: headline stats and rider vetting."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from .db import get_db
from .repos_sqlalchemy import dashboard_repo_sql, users_repo_sql
from .schemas import AdminStats, RiderStatusUpdate, UserOut

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/stats", response_model=AdminStats)
async def stats(session: AsyncSession = Depends(get_db)):
    """Totals plus a seven day chart of orders and delivered revenue."""

    data = await dashboard_repo_sql.totals(session)
    data["chart_data"] = await dashboard_repo_sql.daily_chart(session, days=7)
    return data


@router.get("/riders", response_model=List[UserOut])
async def list_riders(session: AsyncSession = Depends(get_db)):
    return await users_repo_sql.list_riders(session)


@router.patch("/riders/{user_id}/status", response_model=UserOut)
async def set_rider_status(
    user_id: str, payload: RiderStatusUpdate, session: AsyncSession = Depends(get_db)
):
    return await users_repo_sql.set_rider_status(session, user_id, payload.status)
