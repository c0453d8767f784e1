"""
Order schemas.
"""
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from cozy_corner.models.order import OrderStatus, OrderType, PaymentMethod, PaymentStatus
from .user import UserSummary


class DeliveryAddress(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


class OrderItemIn(BaseModel):
    menu_item_id: int
    quantity: int = Field(..., ge=1)
    special_instructions: Optional[str] = None


class OrderCreate(BaseModel):
    items: List[OrderItemIn] = Field(..., min_length=1)
    order_type: OrderType
    delivery_address: Optional[DeliveryAddress] = None
    special_instructions: Optional[str] = None
    payment_method: PaymentMethod = PaymentMethod.card

    @model_validator(mode="after")
    def delivery_needs_address(self):
        if self.order_type == OrderType.delivery:
            address = self.delivery_address
            if address is None or not (address.street and address.city):
                raise ValueError("Delivery orders need a street and city")
        return self


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderItemOut(BaseModel):
    id: int
    menu_item_id: Optional[int] = None
    name: str
    quantity: int
    price: float
    special_instructions: Optional[str] = None

    class Config:
        from_attributes = True


class OrderOut(BaseModel):
    id: int
    user_id: int
    items: List[OrderItemOut]
    total_amount: float
    status: OrderStatus
    order_type: OrderType
    delivery_address: Optional[DeliveryAddress] = None
    special_instructions: Optional[str] = None
    payment_status: PaymentStatus
    payment_id: Optional[str] = None
    payment_method: PaymentMethod
    refund_id: Optional[str] = None
    refunded_amount: Optional[float] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class OrderAdminOut(OrderOut):
    user: Optional[UserSummary] = None


class DailyStats(BaseModel):
    count: int
    revenue: float


class OrderStatsSummary(BaseModel):
    daily: DailyStats
    status: Dict[str, int]
    order_types: Dict[str, int]
