"""
Notification model: Stores customer notifications about orders and reservations.
Path: cozy_corner/models/notification.py
"""
from sqlalchemy import Column, Integer, String, ForeignKey, Boolean, DateTime, Enum, Text
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from ..db import Base


class NotificationType(str, enum.Enum):
    order_confirmation = "order_confirmation"
    order_status_update = "order_status_update"
    order_cancelled = "order_cancelled"
    payment_update = "payment_update"
    reservation_confirmation = "reservation_confirmation"
    reservation_update = "reservation_update"
    reservation_cancelled = "reservation_cancelled"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)

    # The customer who should receive this notification
    user_id = Column(Integer, ForeignKey(
        "users.id", ondelete="CASCADE"), nullable=False, index=True)

    # The entity that triggered this notification
    order_id = Column(Integer, ForeignKey(
        "orders.id", ondelete="CASCADE"), nullable=True)
    reservation_id = Column(Integer, ForeignKey(
        "reservations.id", ondelete="CASCADE"), nullable=True)

    # Notification details
    notification_type = Column(Enum(NotificationType), nullable=False)
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)

    # Status tracking
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    read_at = Column(DateTime, nullable=True)

    # Relationships
    user = relationship("User", backref="notifications", lazy="select")

    def mark_as_read(self):
        """Mark notification as read"""
        self.is_read = True
        self.read_at = datetime.utcnow()
