"""Voucher administration and checkout validation."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from config import get_settings

from .db import get_db
from .domain.errors import NotFound, ValidationError
from .repos_sqlalchemy import vouchers_repo_sql
from .schemas import VoucherCreate, VoucherOut, VoucherQuote, VoucherUpdate
from .services import billing_service

router = APIRouter(prefix="/api/vouchers", tags=["vouchers"])


@router.get("", response_model=List[VoucherOut])
async def list_vouchers(session: AsyncSession = Depends(get_db)):
    return await vouchers_repo_sql.list_vouchers(session)


@router.post("", response_model=VoucherOut)
async def create_voucher(payload: VoucherCreate, session: AsyncSession = Depends(get_db)):
    return await vouchers_repo_sql.create_voucher(session, payload.model_dump())


@router.get("/validate/{code}", response_model=VoucherQuote)
async def validate_voucher(
    code: str,
    subtotal: Optional[float] = Query(None, ge=0),
    session: AsyncSession = Depends(get_db),
):
    """Check ``code`` at checkout.

    Without ``subtotal`` only activity and expiry are checked. With it the
    minimum order is enforced too and the response carries the quote the
    cart should display.
    """

    voucher = await vouchers_repo_sql.find_active(session, code)
    if voucher is None:
        raise NotFound("Invalid or inactive voucher code")
    body = VoucherOut.model_validate(voucher).model_dump()
    try:
        if subtotal is None:
            billing_service.check_voucher(voucher)
        else:
            body.update(
                billing_service.quote(subtotal, get_settings().delivery_fee, voucher)
            )
    except billing_service.VoucherError as exc:
        raise ValidationError(str(exc)) from exc
    return body


@router.patch("/{voucher_id}", response_model=VoucherOut)
async def update_voucher(
    voucher_id: str, payload: VoucherUpdate, session: AsyncSession = Depends(get_db)
):
    changes = payload.model_dump(exclude_unset=True)
    return await vouchers_repo_sql.update_voucher(session, voucher_id, changes)


@router.delete("/{voucher_id}")
async def delete_voucher(voucher_id: str, session: AsyncSession = Depends(get_db)) -> dict:
    await vouchers_repo_sql.delete_voucher(session, voucher_id)
    return {"message": "Voucher deleted"}
