"""Demo data inserted into an empty database.

Seeding is idempotent: rows are keyed by fixed ids and codes and skipped
when already present.
"""

from __future__ import annotations

import logging
import secrets

from sqlalchemy.ext.asyncio import AsyncSession

from .auth import hash_password
from .models import User, Voucher

logger = logging.getLogger("api.seed")

DEMO_RIDERS = [
    {
        "id": "rider1",
        "email": "rider1@ayoo.com",
        "name": "Juan Dela Cruz",
        "phone": "09171234567",
        "rider_status": "PENDING",
        "vehicle_type": "MOTORCYCLE",
        "license_plate": "ABC 1234",
        "is_online": False,
    },
    {
        "id": "rider2",
        "email": "rider2@ayoo.com",
        "name": "Pedro Penduko",
        "phone": "09187654321",
        "rider_status": "APPROVED",
        "vehicle_type": "BICYCLE",
        "is_online": True,
        "lat": 8.2285,
        "lng": 124.2452,
    },
]

DEMO_VOUCHERS = [
    {
        "id": "v1",
        "code": "AYOO2026",
        "discount_type": "PERCENTAGE",
        "discount_value": 20,
        "min_order_value": 200,
        "max_discount": 100,
        "expiry_date": "2026-12-31",
        "is_active": True,
        "description": "20% off on your next order!",
    }
]


async def seed_demo_data(session: AsyncSession) -> int:
    """Insert missing demo riders and vouchers and return how many were added.

    Demo riders get a random password; they exist to populate the admin
    rider list, not to log in.
    """

    added = 0
    for data in DEMO_RIDERS:
        if await session.get(User, data["id"]) is None:
            session.add(
                User(
                    role="RIDER",
                    password_hash=hash_password(secrets.token_urlsafe(16)),
                    **data,
                )
            )
            added += 1
    for data in DEMO_VOUCHERS:
        if await session.get(Voucher, data["id"]) is None:
            session.add(Voucher(**data))
            added += 1
    await session.commit()
    if added:
        logger.info("seeded %d demo rows", added)
    return added
