# market/schemas/order.py
# Checkout body and order snapshots.
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from market.models.order import OrderStatus


class CheckoutRequest(BaseModel):
    shipping_address: str = Field(default="", max_length=1000)
    payment_method: str | None = Field(default=None, max_length=50)
    notes: str | None = Field(default=None, max_length=1000)


class OrderItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    product_name: str
    quantity: int
    price: float
    subtotal: float


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    total_amount: float
    status: OrderStatus
    shipping_address: str
    payment_method: str | None = None
    payment_status: str
    notes: str | None = None
    items: list[OrderItemOut] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None
