"""
Reservation slot capacity.

A slot is a (date, time) pair holding at most SLOT_CAPACITY non-cancelled
reservations. The count and the write happen under a per-slot lock so two
requests in this process cannot both take the last table.
"""
import logging
import threading
import weakref
from contextlib import contextmanager
from datetime import date
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from ..config import settings
from ..models.reservation import Reservation, ReservationStatus

logger = logging.getLogger(__name__)

SlotKey = Tuple[date, str]


class _SlotLock:
    __slots__ = ("_lock", "__weakref__")

    def __init__(self):
        self._lock = threading.Lock()

    def __enter__(self):
        self._lock.acquire()
        return self

    def __exit__(self, *exc_info):
        self._lock.release()


class SlotGuard:
    """Single writer per slot key. A key's lock is dropped once nobody holds it."""

    def __init__(self):
        self._locks = weakref.WeakValueDictionary()
        self._registry_lock = threading.Lock()

    def _lock_for(self, key: SlotKey) -> _SlotLock:
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = _SlotLock()
            return lock

    def tracked_slots(self) -> int:
        return len(self._locks)

    @contextmanager
    def hold(self, slot_date: date, slot_time: str):
        with self._lock_for((slot_date, slot_time)):
            yield


slot_guard = SlotGuard()


def count_active(
    db: Session, slot_date: date, slot_time: str, exclude_id: Optional[int] = None
) -> int:
    """Number of non-cancelled reservations in the slot."""
    query = db.query(Reservation).filter(
        Reservation.date == slot_date,
        Reservation.time == slot_time,
        Reservation.status != ReservationStatus.cancelled,
    )
    if exclude_id is not None:
        query = query.filter(Reservation.id != exclude_id)
    return query.count()


def check_availability(db: Session, slot_date: date, slot_time: str) -> dict:
    taken = count_active(db, slot_date, slot_time)
    capacity = settings.SLOT_CAPACITY
    return {
        "available": taken < capacity,
        "remaining_tables": max(capacity - taken, 0),
    }


def has_capacity(
    db: Session, slot_date: date, slot_time: str, exclude_id: Optional[int] = None
) -> bool:
    return count_active(db, slot_date, slot_time, exclude_id) < settings.SLOT_CAPACITY
