"""Pydantic request and response models.

Field names are snake_case in Python and camelCase on the wire, which keeps
the JSON contract the dashboards already speak.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .domain import OrderStatus, Role

PaymentMethod = Literal["COD", "ONLINE"]
PaymentStatus = Literal["PENDING", "AWAITING_PAYMENT", "PAID"]
DiscountType = Literal["PERCENTAGE", "FIXED"]
RiderStatus = Literal["PENDING", "APPROVED", "REJECTED", "SUSPENDED"]


class CamelModel(BaseModel):
    """Base model using camelCase aliases while accepting either spelling."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


# Orders


class OrderLine(CamelModel):
    """Line item snapshot as placed at checkout."""

    id: str
    name: str = ""
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=1)


class OrderCreate(CamelModel):
    customer_id: str = Field(..., min_length=1)
    restaurant_id: str = Field(..., min_length=1)
    items: List[OrderLine] = Field(..., min_length=1)
    total: float = Field(..., ge=0)
    delivery_address: str = ""
    delivery_lat: Optional[float] = None
    delivery_lng: Optional[float] = None
    rider_lat: Optional[float] = None
    rider_lng: Optional[float] = None
    restaurant_lat: Optional[float] = None
    restaurant_lng: Optional[float] = None
    customer_name: Optional[str] = None
    restaurant_name: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    payment_status: Optional[PaymentStatus] = None


class OrderOut(CamelModel):
    id: str
    customer_id: str
    restaurant_id: str
    rider_id: Optional[str] = None
    items: List[OrderLine]
    total: float
    status: OrderStatus
    created_at: datetime
    updated_at: datetime
    delivery_address: str
    delivery_lat: Optional[float] = None
    delivery_lng: Optional[float] = None
    rider_lat: Optional[float] = None
    rider_lng: Optional[float] = None
    restaurant_lat: Optional[float] = None
    restaurant_lng: Optional[float] = None
    customer_name: Optional[str] = None
    restaurant_name: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    payment_status: Optional[PaymentStatus] = None
    version: int


class StatusUpdate(CamelModel):
    status: OrderStatus
    rider_id: Optional[str] = None
    role: Optional[Role] = None


class ClaimRequest(CamelModel):
    rider_id: str = Field(..., min_length=1)


class LocationUpdate(CamelModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


# Users and auth


class UserOut(CamelModel):
    id: str
    email: str
    name: str
    role: Role
    phone: Optional[str] = None
    address: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    photo_url: Optional[str] = None
    restaurant_id: Optional[str] = None
    vehicle_type: Optional[str] = None
    license_plate: Optional[str] = None
    rider_status: Optional[RiderStatus] = None
    is_online: Optional[bool] = None


class RegisterRequest(CamelModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    role: Role = Role.CUSTOMER
    restaurant_name: Optional[str] = None

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError("invalid email address")
        return value.strip().lower()


class LoginRequest(CamelModel):
    email: str
    password: str


class AuthResponse(CamelModel):
    user: UserOut
    token: str


class ProfileUpdate(CamelModel):
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    vehicle_type: Optional[str] = None
    license_plate: Optional[str] = None
    photo_url: Optional[str] = None


class RiderStatusUpdate(CamelModel):
    status: RiderStatus


# Restaurants and menu


class FoodItemOut(CamelModel):
    id: str
    name: str
    price: float
    description: Optional[str] = None
    image: Optional[str] = None
    category: Optional[str] = None
    is_popular: bool = False
    is_spicy: bool = False
    is_new: bool = False
    is_available: bool = True


class FoodItemCreate(CamelModel):
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    description: Optional[str] = None
    category: Optional[str] = None
    image: Optional[str] = None
    is_popular: bool = False
    is_spicy: bool = False
    is_new: bool = False
    is_available: bool = True


class FoodItemUpdate(CamelModel):
    name: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    category: Optional[str] = None
    image: Optional[str] = None
    is_popular: Optional[bool] = None
    is_spicy: Optional[bool] = None
    is_new: Optional[bool] = None
    is_available: Optional[bool] = None


class RestaurantOut(CamelModel):
    id: str
    name: str
    rating: float
    delivery_time: str
    image: Optional[str] = None
    cuisine: str
    items: List[FoodItemOut] = []
    is_partner: bool = True
    is_open: bool = True
    address: Optional[str] = None
    owner_id: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None


class RestaurantUpdate(CamelModel):
    name: Optional[str] = None
    cuisine: Optional[str] = None
    address: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    image: Optional[str] = None
    is_open: Optional[bool] = None


# Vouchers


def _check_iso_date(value: str) -> str:
    datetime.fromisoformat(value[:10])
    return value


class VoucherOut(CamelModel):
    id: str
    code: str
    discount_type: DiscountType
    discount_value: float
    min_order_value: float
    max_discount: Optional[float] = None
    expiry_date: str
    is_active: bool
    description: Optional[str] = None


class VoucherCreate(CamelModel):
    code: str = Field(..., min_length=1)
    discount_type: DiscountType
    discount_value: float = Field(..., gt=0)
    min_order_value: float = Field(0, ge=0)
    max_discount: Optional[float] = Field(None, gt=0)
    expiry_date: str
    description: Optional[str] = None

    @field_validator("expiry_date")
    @classmethod
    def _iso_date(cls, value: str) -> str:
        return _check_iso_date(value)


class VoucherUpdate(CamelModel):
    code: Optional[str] = Field(None, min_length=1)
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[float] = Field(None, gt=0)
    min_order_value: Optional[float] = Field(None, ge=0)
    max_discount: Optional[float] = Field(None, gt=0)
    expiry_date: Optional[str] = None
    is_active: Optional[bool] = None
    description: Optional[str] = None

    @field_validator("expiry_date")
    @classmethod
    def _iso_date(cls, value: Optional[str]) -> Optional[str]:
        return value if value is None else _check_iso_date(value)


class VoucherQuote(VoucherOut):
    subtotal: Optional[float] = None
    delivery_fee: Optional[float] = None
    discount: Optional[float] = None
    total: Optional[float] = None


# Payments


class CheckoutItem(CamelModel):
    name: str
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=1)


class CheckoutRequest(CamelModel):
    order_id: str
    items: List[CheckoutItem] = Field(..., min_length=1)
    total: Optional[float] = None
    customer_email: Optional[str] = None


class CheckoutResponse(CamelModel):
    url: str


# Admin


class ChartPoint(CamelModel):
    date: str
    revenue: float
    orders: int


class AdminStats(CamelModel):
    users: int
    restaurants: int
    orders: int
    revenue: float
    chart_data: List[ChartPoint]


def order_payload(order) -> dict:
    """Serialise an ORM order the way clients and subscribers receive it."""

    return OrderOut.model_validate(order).model_dump(mode="json", by_alias=True)
