# cozy_corner/routes/reservations.py
"""
Table reservation routes. Capacity checks and writes for a slot happen
under that slot's lock.
"""
import logging
import re
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..auth_utils import get_current_user
from ..db import get_db
from ..models.reservation import Reservation, ReservationStatus
from ..models.user import User
from ..schemas.reservation import (TIME_PATTERN, AvailabilityOut, ReservationCreate,
                                   ReservationOut, ReservationUpdate, normalize_time)
from ..utils.exceptions import SlotFull
from ..utils.notification_service import NotificationService
from ..utils.reservation_slots import check_availability, has_capacity, slot_guard

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/reservations",
    tags=["reservations"]
)


def get_own_reservation_or_404(db: Session, reservation_id: int, user: User) -> Reservation:
    reservation = db.query(Reservation).filter(
        Reservation.id == reservation_id,
        Reservation.user_id == user.id
    ).first()
    if not reservation:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return reservation


@router.get("/check-availability/{slot_date}/{slot_time}", response_model=AvailabilityOut)
def get_availability(slot_date: date, slot_time: str, db: Session = Depends(get_db)):
    if not re.match(TIME_PATTERN, slot_time):
        raise HTTPException(status_code=400, detail="Time must be in HH:MM format")
    return check_availability(db, slot_date, normalize_time(slot_time))


@router.get("/my-reservations", response_model=List[ReservationOut])
def get_my_reservations(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return db.query(Reservation).filter(
        Reservation.user_id == current_user.id
    ).order_by(Reservation.date.desc(), Reservation.time.desc()).all()


@router.get("/{reservation_id}", response_model=ReservationOut)
def get_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return get_own_reservation_or_404(db, reservation_id, current_user)


@router.post("", response_model=ReservationOut, status_code=status.HTTP_201_CREATED)
def create_reservation(
    reservation_in: ReservationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    with slot_guard.hold(reservation_in.date, reservation_in.time):
        if not has_capacity(db, reservation_in.date, reservation_in.time):
            raise SlotFull()

        reservation = Reservation(
            user_id=current_user.id,
            date=reservation_in.date,
            time=reservation_in.time,
            party_size=reservation_in.party_size,
            special_requests=reservation_in.special_requests,
            status=ReservationStatus.pending,
        )
        db.add(reservation)
        db.commit()

    db.refresh(reservation)
    logger.info(f"Reservation {reservation.id} booked by user {current_user.id} "
                f"for {reservation.date} {reservation.time}")

    NotificationService.reservation_confirmation(db, reservation)
    return reservation


@router.put("/{reservation_id}", response_model=ReservationOut)
def update_reservation(
    reservation_id: int,
    reservation_in: ReservationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    reservation = get_own_reservation_or_404(db, reservation_id, current_user)
    if reservation.status == ReservationStatus.cancelled:
        raise HTTPException(status_code=400, detail="Cancelled reservations cannot be modified")

    with slot_guard.hold(reservation_in.date, reservation_in.time):
        if not has_capacity(db, reservation_in.date, reservation_in.time,
                            exclude_id=reservation.id):
            raise SlotFull()

        reservation.date = reservation_in.date
        reservation.time = reservation_in.time
        reservation.party_size = reservation_in.party_size
        reservation.special_requests = reservation_in.special_requests
        db.commit()

    db.refresh(reservation)
    logger.info(f"Reservation {reservation.id} moved to {reservation.date} {reservation.time}")

    NotificationService.reservation_update(db, reservation)
    return reservation


@router.delete("/{reservation_id}")
def cancel_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    reservation = get_own_reservation_or_404(db, reservation_id, current_user)
    if reservation.status == ReservationStatus.cancelled:
        raise HTTPException(status_code=400, detail="Reservation is already cancelled")

    reservation.status = ReservationStatus.cancelled
    db.commit()
    db.refresh(reservation)
    logger.info(f"Reservation {reservation.id} cancelled by user {current_user.id}")

    NotificationService.reservation_cancelled(db, reservation)
    return {"message": "Reservation cancelled successfully"}
