"""
User model: Admin, Customer.
"""
from datetime import datetime
from sqlalchemy import Column, DateTime, Integer, String, Enum
from sqlalchemy.orm import relationship
import enum

from ..db import Base


class UserRole(str, enum.Enum):
    admin = "admin"
    customer = "customer"


class UserStatus(str, enum.Enum):
    active = "active"
    inactive = "inactive"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    phone_number = Column(String, nullable=True)
    password_hash = Column(String, nullable=False)
    role = Column(Enum(UserRole), default=UserRole.customer, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    status = Column(Enum(UserStatus),
                    default=UserStatus.active, nullable=False)

    # Relationships
    orders = relationship("Order", back_populates="user", lazy="select")
    reservations = relationship(
        "Reservation", back_populates="user", lazy="select")
    reviews = relationship(
        "Review", back_populates="user", lazy="select",
        foreign_keys="Review.user_id")

    def is_admin(self):
        return self.role == UserRole.admin

    def is_customer(self):
        return self.role == UserRole.customer
