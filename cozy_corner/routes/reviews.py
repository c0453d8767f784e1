"""
Review routes: public listing and stats, customer submissions, admin moderation.
"""
import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth_utils import admin_required, get_current_user
from ..db import get_db
from ..models.order import Order, OrderStatus
from ..models.review import Review, ReviewStatus
from ..models.user import User
from ..schemas.review import (ReviewCreate, ReviewModerate, ReviewOut, ReviewPublicOut,
                              ReviewStats, ReviewUpdate)
from ..utils.exceptions import DuplicateReview, OrderNotEligible

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/reviews",
    tags=["reviews"]
)


def get_own_review_or_404(db: Session, review_id: int, user: User) -> Review:
    review = db.query(Review).filter(
        Review.id == review_id,
        Review.user_id == user.id
    ).first()
    if not review:
        raise HTTPException(status_code=404, detail="Review not found")
    return review


@router.get("", response_model=List[ReviewPublicOut])
def list_approved_reviews(db: Session = Depends(get_db)):
    return db.query(Review).filter(
        Review.status == ReviewStatus.approved
    ).order_by(Review.created_at.desc(), Review.id.desc()).all()


@router.get("/featured", response_model=List[ReviewPublicOut])
def get_featured_reviews(db: Session = Depends(get_db)):
    return db.query(Review).filter(
        Review.status == ReviewStatus.approved,
        Review.rating >= 4
    ).order_by(Review.rating.desc(), Review.created_at.desc()).limit(6).all()


@router.get("/stats", response_model=ReviewStats)
def get_review_stats(db: Session = Depends(get_db)):
    rows = db.query(Review.rating, func.count(Review.id)).filter(
        Review.status == ReviewStatus.approved
    ).group_by(Review.rating).all()

    distribution = {rating: 0 for rating in range(1, 6)}
    for rating, count in rows:
        distribution[rating] = count

    total = sum(distribution.values())
    average = sum(r * c for r, c in distribution.items()) / total if total else 0.0

    return {
        "average_rating": round(average, 1),
        "total_reviews": total,
        "rating_distribution": distribution,
    }


@router.get("/my-reviews", response_model=List[ReviewOut])
def get_my_reviews(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return db.query(Review).filter(
        Review.user_id == current_user.id
    ).order_by(Review.created_at.desc()).all()


@router.post("", response_model=ReviewOut, status_code=status.HTTP_201_CREATED)
def create_review(
    review_in: ReviewCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    order = db.query(Order).filter(
        Order.id == review_in.order_id,
        Order.user_id == current_user.id,
        Order.status == OrderStatus.delivered
    ).first()
    if not order:
        raise OrderNotEligible()

    existing = db.query(Review).filter(
        Review.user_id == current_user.id,
        Review.order_id == order.id
    ).first()
    if existing:
        raise DuplicateReview()

    review = Review(
        user_id=current_user.id,
        order_id=order.id,
        rating=review_in.rating,
        comment=review_in.comment,
        images=review_in.images or [],
        status=ReviewStatus.pending,
    )
    db.add(review)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent submission for the same order
        db.rollback()
        raise DuplicateReview()

    db.refresh(review)
    logger.info(f"Review {review.id} submitted by user {current_user.id} for order {order.id}")
    return review


@router.put("/{review_id}", response_model=ReviewOut)
def update_review(
    review_id: int,
    review_in: ReviewUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    review = get_own_review_or_404(db, review_id, current_user)

    review.rating = review_in.rating
    review.comment = review_in.comment
    if review_in.images is not None:
        review.images = review_in.images
    # Edited text goes back through moderation
    review.status = ReviewStatus.pending
    review.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(review)
    return review


@router.delete("/{review_id}")
def delete_review(
    review_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    review = get_own_review_or_404(db, review_id, current_user)
    db.delete(review)
    db.commit()
    logger.info(f"Review {review_id} deleted by user {current_user.id}")
    return {"message": "Review deleted successfully"}


@router.patch("/{review_id}/moderate", response_model=ReviewOut)
def moderate_review(
    review_id: int,
    moderation: ReviewModerate,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required)
):
    review = db.query(Review).filter(Review.id == review_id).first()
    if not review:
        raise HTTPException(status_code=404, detail="Review not found")

    review.status = moderation.status
    review.moderation_comment = moderation.moderation_comment
    review.moderated_by = current_user.id
    review.moderated_at = datetime.utcnow()
    db.commit()
    db.refresh(review)
    logger.info(f"Admin {current_user.id} set review {review.id} to {review.status.value}")
    return review
