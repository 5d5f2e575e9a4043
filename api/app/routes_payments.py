"""Online payment checkout."""

from __future__ import annotations

from typing import AsyncGenerator

import httpx
from fastapi import APIRouter, Depends

from config import get_settings

from .schemas import CheckoutRequest, CheckoutResponse
from .services import payments

router = APIRouter(prefix="/api/payments", tags=["payments"])


async def get_payment_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client used to reach the payment gateway."""
    async with httpx.AsyncClient() as client:
        yield client


@router.post("/create-checkout-session", response_model=CheckoutResponse)
async def create_checkout_session(
    payload: CheckoutRequest,
    client: httpx.AsyncClient = Depends(get_payment_client),
):
    """Return the hosted checkout URL the customer is redirected to."""

    items = [item.model_dump() for item in payload.items]
    url = await payments.create_checkout_session(
        client,
        get_settings(),
        payload.order_id,
        items,
        customer_email=payload.customer_email,
    )
    return {"url": url}
