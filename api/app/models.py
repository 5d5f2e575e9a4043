# models.py

"""Database models for the delivery service.

Every entity gets its own table so that orders can be updated row by row. The
legacy single-document layout is only used for import/export, see
:mod:`api.app.legacy_store`.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    TypeDecorator,
)
from sqlalchemy.orm import declarative_base, relationship

from .domain import OrderStatus, Role

Base = declarative_base()


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime that reads back as UTC even on SQLite."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):  # type: ignore[no-untyped-def]
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value

    def process_result_value(self, value, dialect):  # type: ignore[no-untyped-def]
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class User(Base):
    """Customer, merchant, rider or admin account."""

    __tablename__ = "users"

    id = Column(String, primary_key=True, default=new_id)
    email = Column(String, nullable=False, unique=True)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False, default=Role.CUSTOMER.value)
    phone = Column(String, nullable=True)
    address = Column(Text, nullable=True)
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)
    photo_url = Column(String, nullable=True)
    restaurant_id = Column(String, nullable=True)
    vehicle_type = Column(String, nullable=True)
    license_plate = Column(String, nullable=True)
    rider_status = Column(String, nullable=True)
    is_online = Column(Boolean, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)


class Restaurant(Base):
    """Restaurant profile owning a menu of :class:`FoodItem` rows."""

    __tablename__ = "restaurants"

    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    rating = Column(Float, nullable=False, default=5.0)
    delivery_time = Column(String, nullable=False, default="20-30 min")
    image = Column(String, nullable=True)
    cuisine = Column(String, nullable=False, default="Various")
    address = Column(Text, nullable=True)
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)
    is_partner = Column(Boolean, nullable=False, default=True)
    is_open = Column(Boolean, nullable=False, default=True)
    owner_id = Column(String, ForeignKey("users.id"), nullable=True)

    items = relationship(
        "FoodItem",
        back_populates="restaurant",
        cascade="all, delete-orphan",
        order_by="FoodItem.position",
        lazy="selectin",
    )


class FoodItem(Base):
    """Menu entry of a restaurant."""

    __tablename__ = "food_items"

    id = Column(String, primary_key=True, default=new_id)
    restaurant_id = Column(
        String, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False
    )
    position = Column(Integer, nullable=False, default=0)
    name = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=True)
    image = Column(String, nullable=True)
    is_popular = Column(Boolean, nullable=False, default=False)
    is_spicy = Column(Boolean, nullable=False, default=False)
    is_new = Column(Boolean, nullable=False, default=False)
    is_available = Column(Boolean, nullable=False, default=True)

    restaurant = relationship("Restaurant", back_populates="items")


class Order(Base):
    """Customer order.

    ``items``, ``total`` and the display names are snapshots taken at creation
    and never recomputed from the menu. ``version`` is bumped on every write
    and used as an optimistic concurrency check.
    """

    __tablename__ = "orders"

    id = Column(String, primary_key=True, default=new_id)
    customer_id = Column(String, nullable=False, index=True)
    restaurant_id = Column(String, nullable=False, index=True)
    rider_id = Column(String, nullable=True, index=True)
    items = Column(JSON, nullable=False, default=list)
    total = Column(Float, nullable=False)
    status = Column(String, nullable=False, default=OrderStatus.PENDING.value)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow)
    delivery_address = Column(Text, nullable=False, default="")
    delivery_lat = Column(Float, nullable=True)
    delivery_lng = Column(Float, nullable=True)
    rider_lat = Column(Float, nullable=True)
    rider_lng = Column(Float, nullable=True)
    restaurant_lat = Column(Float, nullable=True)
    restaurant_lng = Column(Float, nullable=True)
    customer_name = Column(String, nullable=True)
    restaurant_name = Column(String, nullable=True)
    payment_method = Column(String, nullable=True)
    payment_status = Column(String, nullable=True)
    version = Column(Integer, nullable=False, default=1)


class Voucher(Base):
    """Discount code quoted at checkout."""

    __tablename__ = "vouchers"

    id = Column(String, primary_key=True, default=new_id)
    code = Column(String, nullable=False, unique=True)
    discount_type = Column(String, nullable=False)
    discount_value = Column(Float, nullable=False)
    min_order_value = Column(Float, nullable=False, default=0.0)
    max_discount = Column(Float, nullable=True)
    expiry_date = Column(String, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    description = Column(Text, nullable=True)


__all__ = [
    "Base",
    "FoodItem",
    "Order",
    "Restaurant",
    "User",
    "Voucher",
    "new_id",
    "utcnow",
]
