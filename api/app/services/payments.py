"""Hosted checkout sessions through the Stripe REST API.

Only session creation is supported. Payment confirmation arrives through the
redirect back to ``app_url``; webhooks are not handled.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional

import httpx

from config import Settings

from ..domain.errors import PaymentNotConfigured, UpstreamPaymentError
from .billing_service import subtotal

logger = logging.getLogger("api.payments")

TIMEOUT = 10.0


def _form(
    settings: Settings,
    order_id: str,
    items: Iterable[Mapping],
    customer_email: Optional[str],
) -> Dict[str, str]:
    """Encode a checkout session request in Stripe's bracketed form syntax."""

    fields: Dict[str, str] = {
        "mode": "payment",
        "payment_method_types[0]": "card",
        "success_url": f"{settings.app_url}?payment_success=true&order_id={order_id}",
        "cancel_url": f"{settings.app_url}?payment_cancelled=true&order_id={order_id}",
        "metadata[orderId]": order_id,
    }
    for idx, item in enumerate(items):
        prefix = f"line_items[{idx}]"
        fields[f"{prefix}[price_data][currency]"] = settings.payment_currency
        fields[f"{prefix}[price_data][product_data][name]"] = item["name"]
        fields[f"{prefix}[price_data][unit_amount]"] = str(round(item["price"] * 100))
        fields[f"{prefix}[quantity]"] = str(item["quantity"])
    if customer_email:
        fields["customer_email"] = customer_email
    return fields


async def create_checkout_session(
    client: httpx.AsyncClient,
    settings: Settings,
    order_id: str,
    items: List[Mapping],
    customer_email: Optional[str] = None,
) -> str:
    """Create a hosted checkout session and return its redirect URL.

    Amounts are sent in minor units. Gateway failures surface as
    :class:`UpstreamPaymentError` carrying the gateway's message.
    """

    if not settings.stripe_secret_key:
        raise PaymentNotConfigured("Stripe is not configured")

    url = f"{settings.stripe_api_base.rstrip('/')}/v1/checkout/sessions"
    try:
        resp = await client.post(
            url,
            data=_form(settings, order_id, items, customer_email),
            auth=(settings.stripe_secret_key, ""),
            timeout=TIMEOUT,
        )
    except httpx.HTTPError as exc:
        logger.warning("checkout session request failed: %s", exc, extra={"order": order_id})
        raise UpstreamPaymentError(str(exc) or "Payment gateway unreachable") from exc

    body = {}
    if resp.headers.get("content-type", "").startswith("application/json"):
        body = resp.json()
    if resp.status_code >= 400:
        message = (body.get("error") or {}).get("message") or f"HTTP {resp.status_code}"
        logger.warning(
            "checkout session rejected status=%s", resp.status_code, extra={"order": order_id}
        )
        raise UpstreamPaymentError(message)

    if not body.get("url"):
        raise UpstreamPaymentError("Payment gateway returned no checkout URL")
    logger.info(
        "checkout session created amount=%s", subtotal(items), extra={"order": order_id}
    )
    return body["url"]
