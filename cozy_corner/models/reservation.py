# cozy_corner/models/reservation.py
"""
Reservation model: a table booking for a (date, time) slot.
Reservations are never deleted, only cancelled.
"""
from sqlalchemy import CheckConstraint, Column, Integer, Date, ForeignKey, Index, String, Enum, DateTime, Text
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from ..db import Base


class ReservationStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"


class Reservation(Base):
    __tablename__ = "reservations"
    __table_args__ = (
        Index("ix_reservations_date_time", "date", "time"),
        CheckConstraint("party_size >= 1 AND party_size <= 20",
                        name="ck_reservations_party_size"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    date = Column(Date, nullable=False)
    # "HH:MM", 24h clock
    time = Column(String(5), nullable=False)
    party_size = Column(Integer, nullable=False)
    special_requests = Column(Text, nullable=True)

    status = Column(Enum(ReservationStatus),
                    default=ReservationStatus.pending, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="reservations", lazy="select")
