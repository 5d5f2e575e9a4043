"""Voucher persistence helpers."""

from __future__ import annotations

from typing import Any, List, Mapping

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.errors import NotFound, ValidationError
from ..models import Voucher, new_id

FIELDS = (
    "code",
    "discount_type",
    "discount_value",
    "min_order_value",
    "max_discount",
    "expiry_date",
    "is_active",
    "description",
)

REQUIRED = (
    "code",
    "discount_type",
    "discount_value",
    "min_order_value",
    "expiry_date",
    "is_active",
)


async def _ensure_code_free(
    session: AsyncSession, code: str, voucher_id: str | None = None
) -> None:
    query = select(Voucher.id).where(Voucher.code == code)
    if voucher_id is not None:
        query = query.where(Voucher.id != voucher_id)
    if (await session.execute(query)).first() is not None:
        raise ValidationError(f"voucher code {code!r} already exists")


async def list_vouchers(session: AsyncSession) -> List[Voucher]:
    result = await session.execute(select(Voucher).order_by(Voucher.code))
    return list(result.scalars())


async def find_active(session: AsyncSession, code: str) -> Voucher | None:
    """Return the active voucher for ``code`` regardless of its case."""

    result = await session.execute(
        select(Voucher).where(
            Voucher.code == code.upper(), Voucher.is_active.is_(True)
        )
    )
    return result.scalar_one_or_none()


async def create_voucher(session: AsyncSession, data: Mapping[str, Any]) -> Voucher:
    code = data["code"].upper()
    await _ensure_code_free(session, code)
    voucher = Voucher(id=new_id(), **{k: data.get(k) for k in FIELDS})
    voucher.code = code
    voucher.is_active = True
    session.add(voucher)
    await session.commit()
    return voucher


async def update_voucher(
    session: AsyncSession, voucher_id: str, changes: Mapping[str, Any]
) -> Voucher:
    """Apply ``changes`` to a voucher.

    Required fields cannot be cleared and a new code must not belong to
    another voucher.
    """

    voucher = await session.get(Voucher, voucher_id)
    if voucher is None:
        raise NotFound("Voucher not found")
    for field in REQUIRED:
        if field in changes and changes[field] is None:
            raise ValidationError(f"{field} cannot be empty")
    if "code" in changes:
        changes = {**changes, "code": changes["code"].strip().upper()}
        if not changes["code"]:
            raise ValidationError("code cannot be empty")
        await _ensure_code_free(session, changes["code"], voucher_id)
    for field in FIELDS:
        if field in changes:
            setattr(voucher, field, changes[field])
    await session.commit()
    return voucher


async def delete_voucher(session: AsyncSession, voucher_id: str) -> None:
    voucher = await session.get(Voucher, voucher_id)
    if voucher is not None:
        await session.delete(voucher)
        await session.commit()
