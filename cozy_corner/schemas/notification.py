"""
Notification Pydantic Schemas
Path: cozy_corner/schemas/notification.py
"""
from pydantic import BaseModel
from datetime import datetime
from typing import Optional

from cozy_corner.models.notification import NotificationType


class NotificationOut(BaseModel):
    id: int
    user_id: int
    order_id: Optional[int] = None
    reservation_id: Optional[int] = None
    notification_type: NotificationType
    title: str
    message: str
    is_read: bool
    created_at: datetime
    read_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MarkAllReadOut(BaseModel):
    message: str
    updated: int
