"""
Order model: a customer checkout with its copied item lines.
Prices are copied into order_items at order time so later catalog edits
do not rewrite history.
"""
from datetime import datetime
from sqlalchemy import (CheckConstraint, Column, DateTime, Enum, ForeignKey,
                        Integer, Numeric, String, Text)
from sqlalchemy.orm import relationship
import enum

from ..db import Base


class OrderStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    preparing = "preparing"
    ready = "ready"
    delivered = "delivered"
    cancelled = "cancelled"


class PaymentStatus(str, enum.Enum):
    pending = "pending"
    processing = "processing"
    completed = "completed"
    failed = "failed"
    refunded = "refunded"


class OrderType(str, enum.Enum):
    pickup = "pickup"
    delivery = "delivery"


class PaymentMethod(str, enum.Enum):
    card = "card"
    cash = "cash"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(Enum(OrderStatus), default=OrderStatus.pending,
                    nullable=False, index=True)
    order_type = Column(Enum(OrderType), nullable=False)

    # Delivery address (only meaningful for delivery orders)
    street = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    zip_code = Column(String, nullable=True)

    special_instructions = Column(Text, nullable=True)

    # Payment reconciliation fields
    payment_status = Column(Enum(PaymentStatus), default=PaymentStatus.pending,
                            nullable=False, index=True)
    # NULLs never collide, so the constraint only binds issued intents
    payment_id = Column(String, unique=True, nullable=True, index=True)
    payment_method = Column(Enum(PaymentMethod), default=PaymentMethod.card,
                            nullable=False)
    refund_id = Column(String, nullable=True)
    # Less than total_amount for a partial refund
    refunded_amount = Column(Numeric(10, 2), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow,
                        onupdate=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="orders", lazy="select")
    items = relationship("OrderItem", back_populates="order",
                         cascade="all, delete-orphan", lazy="selectin")

    @property
    def delivery_address(self):
        if not any([self.street, self.city, self.state, self.zip_code]):
            return None
        return {
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
        }


class OrderItem(Base):
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_order_items_quantity_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"),
                      nullable=False, index=True)
    menu_item_id = Column(Integer, ForeignKey("menu_items.id", ondelete="SET NULL"),
                          nullable=True)

    name = Column(String(120), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    special_instructions = Column(Text, nullable=True)

    order = relationship("Order", back_populates="items")
    menu_item = relationship("MenuItem", lazy="select")
