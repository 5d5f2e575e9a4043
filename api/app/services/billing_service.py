"""Checkout quoting: subtotal, delivery fee and voucher discount.

The quote mirrors what the checkout screen shows. It is informational only;
the order stores whatever ``total`` the client submits.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping

from ..models import Voucher


class VoucherError(ValueError):
    """Raised when a voucher cannot be applied."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


def _money(value: Decimal) -> float:
    return float(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def subtotal(items: Iterable[Mapping[str, float]]) -> float:
    """Sum ``price * quantity`` over ``items``."""

    total = Decimal("0")
    for item in items:
        total += Decimal(str(item["price"])) * Decimal(str(item.get("quantity", 1)))
    return _money(total)


def _expiry(voucher: Voucher) -> date:
    return date.fromisoformat(str(voucher.expiry_date)[:10])


def check_voucher(voucher: Voucher, today: date | None = None) -> None:
    """Raise :class:`VoucherError` if ``voucher`` is inactive or expired.

    A voucher stays valid through the whole of its expiry day.
    """

    today = today or datetime.now(timezone.utc).date()
    if not voucher.is_active:
        raise VoucherError("INACTIVE", "Invalid or inactive voucher code")
    if _expiry(voucher) < today:
        raise VoucherError("EXPIRED", "Voucher has expired")


def discount_for(voucher: Voucher, amount: float) -> float:
    """Return the discount ``voucher`` grants on a subtotal of ``amount``.

    Percentage vouchers are capped by ``max_discount`` when set; fixed vouchers
    never exceed the amount they apply to.
    """

    amount_d = Decimal(str(amount))
    if amount_d < Decimal(str(voucher.min_order_value or 0)):
        raise VoucherError(
            "MIN_ORDER",
            f"Minimum order of {voucher.min_order_value:g} required",
        )
    value = Decimal(str(voucher.discount_value))
    if voucher.discount_type == "PERCENTAGE":
        discount = amount_d * value / Decimal("100")
        if voucher.max_discount is not None:
            discount = min(discount, Decimal(str(voucher.max_discount)))
    else:
        discount = value
    return _money(min(discount, amount_d))


def quote(
    amount: float,
    delivery_fee: float,
    voucher: Voucher | None = None,
    today: date | None = None,
) -> dict:
    """Return ``{subtotal, delivery_fee, discount, total}`` for a cart."""

    discount = 0.0
    if voucher is not None:
        check_voucher(voucher, today)
        discount = discount_for(voucher, amount)
    total = max(Decimal("0"), Decimal(str(amount)) + Decimal(str(delivery_fee)) - Decimal(str(discount)))
    return {
        "subtotal": _money(Decimal(str(amount))),
        "delivery_fee": _money(Decimal(str(delivery_fee))),
        "discount": discount,
        "total": _money(total),
    }
