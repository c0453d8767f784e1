"""
Notification Routes
Path: cozy_corner/routes/notifications.py
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..auth_utils import get_current_user
from ..db import get_db
from ..models.notification import Notification
from ..models.user import User
from ..schemas.notification import MarkAllReadOut, NotificationOut
from ..utils.notification_service import NotificationService

router = APIRouter(
    prefix="/notifications",
    tags=["notifications"]
)


@router.get("", response_model=List[NotificationOut])
def get_notifications(
    unread_only: bool = False,
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return NotificationService.get_user_notifications(
        db, current_user.id, unread_only=unread_only, limit=limit)


@router.patch("/read-all", response_model=MarkAllReadOut)
def mark_all_notifications_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    updated = NotificationService.mark_all_read(db, current_user.id)
    return {"message": "All notifications marked as read", "updated": updated}


@router.patch("/{notification_id}/read", response_model=NotificationOut)
def mark_notification_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == current_user.id
    ).first()
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")

    notification.mark_as_read()
    db.commit()
    db.refresh(notification)
    return notification
