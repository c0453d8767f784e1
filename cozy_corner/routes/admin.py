# cozy_corner/routes/admin.py
"""
Admin dashboard and management listings. Every route requires the admin role.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..auth_utils import admin_required
from ..db import get_db
from ..models.menu_item import MenuItem
from ..models.order import Order, OrderStatus
from ..models.reservation import Reservation, ReservationStatus
from ..models.review import Review, ReviewStatus
from ..models.user import User
from ..schemas.admin import DashboardOut
from ..schemas.menu import MenuItemOut
from ..schemas.order import OrderAdminOut
from ..schemas.reservation import ReservationAdminOut, ReservationStatusUpdate
from ..schemas.review import ReviewOut
from ..schemas.user import UserAdminUpdate, UserOut
from ..utils.exceptions import SlotFull
from ..utils.notification_service import NotificationService
from ..utils.reservation_slots import has_capacity, slot_guard

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(admin_required)]
)

REVENUE_WINDOW_DAYS = 30


def daily_revenue(db: Session, days: int = REVENUE_WINDOW_DAYS) -> List[dict]:
    """Sum of order totals per calendar day, oldest first. Cancelled orders are left out."""
    since = datetime.utcnow() - timedelta(days=days)
    day = func.date(Order.created_at)

    rows = db.query(day.label("day"), func.sum(Order.total_amount).label("amount")).filter(
        Order.created_at >= since,
        Order.status != OrderStatus.cancelled
    ).group_by(day).order_by(day).all()

    # func.date is a string on SQLite and a date on PostgreSQL
    return [{"date": str(row.day), "amount": float(row.amount or 0)} for row in rows]


@router.get("/dashboard", response_model=DashboardOut)
def get_dashboard(db: Session = Depends(get_db)):
    return {
        "total_orders": db.query(func.count(Order.id)).scalar(),
        "total_reservations": db.query(func.count(Reservation.id)).scalar(),
        "active_menu_items": db.query(func.count(MenuItem.id)).filter(
            MenuItem.available == True  # noqa: E712
        ).scalar(),
        "total_users": db.query(func.count(User.id)).scalar(),
        "recent_orders": db.query(Order).order_by(
            Order.created_at.desc(), Order.id.desc()).limit(5).all(),
        "recent_reservations": db.query(Reservation).order_by(
            Reservation.date.desc(), Reservation.time.desc()).limit(5).all(),
        "daily_revenue": daily_revenue(db),
    }


@router.get("/menu", response_model=List[MenuItemOut])
def list_all_menu_items(db: Session = Depends(get_db)):
    return db.query(MenuItem).order_by(MenuItem.category, MenuItem.name).all()


@router.get("/orders", response_model=List[OrderAdminOut])
def list_all_orders(
    status: Optional[OrderStatus] = None,
    db: Session = Depends(get_db)
):
    query = db.query(Order)
    if status is not None:
        query = query.filter(Order.status == status)
    return query.order_by(Order.created_at.desc(), Order.id.desc()).all()


@router.get("/reservations", response_model=List[ReservationAdminOut])
def list_all_reservations(
    status: Optional[ReservationStatus] = None,
    db: Session = Depends(get_db)
):
    query = db.query(Reservation)
    if status is not None:
        query = query.filter(Reservation.status == status)
    return query.order_by(Reservation.date.desc(), Reservation.time.desc()).all()


@router.put("/reservations/{reservation_id}", response_model=ReservationAdminOut)
def update_reservation_status(
    reservation_id: int,
    status_in: ReservationStatusUpdate,
    db: Session = Depends(get_db)
):
    reservation = db.query(Reservation).filter(Reservation.id == reservation_id).first()
    if not reservation:
        raise HTTPException(status_code=404, detail="Reservation not found")

    if reservation.status == status_in.status:
        return reservation

    if reservation.status == ReservationStatus.cancelled:
        # Reinstating takes a table back in the slot
        with slot_guard.hold(reservation.date, reservation.time):
            if not has_capacity(db, reservation.date, reservation.time,
                                exclude_id=reservation.id):
                raise SlotFull()
            reservation.status = status_in.status
            db.commit()
    else:
        reservation.status = status_in.status
        db.commit()
    db.refresh(reservation)
    logger.info(f"Reservation {reservation.id} set to {reservation.status.value}")

    if reservation.status == ReservationStatus.cancelled:
        NotificationService.reservation_cancelled(db, reservation)
    else:
        NotificationService.reservation_update(db, reservation)
    return reservation


@router.get("/users", response_model=List[UserOut])
def list_users(db: Session = Depends(get_db)):
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


@router.put("/users/{user_id}", response_model=UserOut)
def update_user(
    user_id: int,
    user_in: UserAdminUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required)
):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if user.id == current_user.id:
        raise HTTPException(status_code=400, detail="Admins cannot change their own role or status")

    for field, value in user_in.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(user, field, value)
    db.commit()
    db.refresh(user)
    logger.info(f"Admin {current_user.id} updated user {user.id}: "
                f"role={user.role.value}, status={user.status.value}")
    return user


@router.get("/reviews", response_model=List[ReviewOut])
def list_all_reviews(
    status: Optional[ReviewStatus] = None,
    db: Session = Depends(get_db)
):
    query = db.query(Review)
    if status is not None:
        query = query.filter(Review.status == status)
    return query.order_by(Review.created_at.desc(), Review.id.desc()).all()
