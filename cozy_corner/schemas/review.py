"""
Review schemas.
"""
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from cozy_corner.models.review import ReviewStatus
from .user import PublicUserSummary


class ReviewBody(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str
    images: Optional[List[str]] = None

    @field_validator("comment")
    @classmethod
    def comment_length(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 10:
            raise ValueError("Comment must be at least 10 characters long")
        return value


class ReviewCreate(ReviewBody):
    order_id: int


class ReviewUpdate(ReviewBody):
    pass


class ReviewModerate(BaseModel):
    status: ReviewStatus
    moderation_comment: Optional[str] = None


class ReviewOut(BaseModel):
    id: int
    user_id: int
    order_id: int
    rating: int
    comment: str
    images: List[str] = []
    status: ReviewStatus
    moderation_comment: Optional[str] = None
    moderated_at: Optional[datetime] = None
    moderated_by: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReviewPublicOut(BaseModel):
    id: int
    order_id: int
    rating: int
    comment: str
    images: List[str] = []
    created_at: datetime
    user: Optional[PublicUserSummary] = None

    class Config:
        from_attributes = True


class ReviewStats(BaseModel):
    average_rating: float
    total_reviews: int
    rating_distribution: Dict[int, int]
