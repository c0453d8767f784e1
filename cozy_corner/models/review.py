"""
Review model: customer feedback on a delivered order, moderated by admins.
"""
from datetime import datetime
from sqlalchemy import (JSON, CheckConstraint, Column, DateTime, Enum, ForeignKey,
                        Integer, Text, UniqueConstraint)
from sqlalchemy.orm import relationship
import enum

from ..db import Base


class ReviewStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("user_id", "order_id", name="uq_reviews_user_order"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False)

    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=False)
    images = Column(JSON, nullable=False, default=list)

    status = Column(Enum(ReviewStatus), default=ReviewStatus.pending,
                    nullable=False, index=True)
    moderation_comment = Column(Text, nullable=True)
    moderated_at = Column(DateTime, nullable=True)
    moderated_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, nullable=True)

    # Relationships
    user = relationship("User", back_populates="reviews",
                        foreign_keys=[user_id], lazy="select")
    moderator = relationship("User", foreign_keys=[moderated_by], lazy="select")
    order = relationship("Order", lazy="select")
