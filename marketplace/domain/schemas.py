# marketplace/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List
from decimal import Decimal
from datetime import datetime

from marketplace.domain.order_status import OrderStatus


class UserCreate(BaseModel):
    """Payload for registering a user."""

    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    username: str = Field(..., min_length=3, max_length=50)
    full_name: str | None = Field(None, max_length=100)
    phone: str | None = Field(None, max_length=20)
    address: str | None = Field(None, max_length=255)


class UserRead(BaseModel):
    id: int
    email: str
    username: str
    full_name: str | None = None
    phone: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileOut(UserRead):
    address: str | None = None
    profile_image: str | None = None
    updated_at: datetime


class UserUpdate(BaseModel):
    """Profile changes; omitted or null fields keep their current value."""

    username: str | None = Field(None, min_length=3, max_length=50)
    full_name: str | None = Field(None, max_length=100)
    phone: str | None = Field(None, max_length=20)
    address: str | None = Field(None, max_length=255)


class CategoryOut(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class ProductCreate(BaseModel):
    """Payload for listing a product for sale."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    category_id: int = Field(..., gt=0)
    condition: str = Field("good", max_length=20)
    image_url: str | None = Field(None, max_length=255)


class ProductUpdate(BaseModel):
    """Partial update, only the fields that were sent are changed."""

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    price: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)
    category_id: int | None = Field(None, gt=0)
    condition: str | None = Field(None, max_length=20)
    is_available: bool | None = None


class ProductOut(BaseModel):
    id: int
    seller_id: int
    category_id: int
    title: str
    description: str | None = None
    price: Decimal
    condition: str
    image_url: str
    is_available: bool
    created_at: datetime
    updated_at: datetime
    category_name: str | None = None
    seller_name: str | None = None

    model_config = ConfigDict(from_attributes=True)


class Pagination(BaseModel):
    page: int
    limit: int
    count: int
    total: int | None = None
    total_pages: int | None = None


class ProductListOut(BaseModel):
    products: List[ProductOut]
    pagination: Pagination


class ItemIn(BaseModel):
    """Payload for adding a product to the cart."""

    product_id: int = Field(..., gt=0)
    quantity: int = Field(1, gt=0)


class ItemUpdate(BaseModel):
    quantity: int = Field(..., gt=0)


class CartItemOut(BaseModel):
    id: int
    product_id: int
    quantity: int
    title: str
    price: Decimal
    is_available: bool
    seller_id: int
    category_name: str | None = None
    seller_name: str | None = None
    added_at: datetime


class CartOut(BaseModel):
    """Cart with live catalog prices."""

    cart_id: int
    user_id: int
    items: List[CartItemOut]
    total: Decimal


class CartItemUpdatedOut(BaseModel):
    id: int
    cart_id: int
    product_id: int
    quantity: int

    model_config = ConfigDict(from_attributes=True)


class CartClearedOut(BaseModel):
    cart_id: int
    removed: int


class OrderItemOut(BaseModel):
    id: int
    product_id: int
    quantity: int
    price_at_purchase: Decimal
    title: str | None = None
    seller_name: str | None = None


class OrderOut(BaseModel):
    id: int
    user_id: int
    status: OrderStatus
    total_amount: Decimal
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemOut] = []


class OrderSummaryOut(BaseModel):
    id: int
    user_id: int
    status: OrderStatus
    total_amount: Decimal
    created_at: datetime
    updated_at: datetime
    item_count: int


class OrderListOut(BaseModel):
    orders: List[OrderSummaryOut]
    pagination: Pagination


class OrderStatusIn(BaseModel):
    status: OrderStatus
