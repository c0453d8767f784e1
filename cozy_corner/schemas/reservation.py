from datetime import date as date_type, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from cozy_corner.models.reservation import ReservationStatus
from .user import UserSummary

TIME_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"


def normalize_time(value: str) -> str:
    """'9:30' -> '09:30' so slots compare equal."""
    hours, minutes = value.split(":")
    return f"{int(hours):02d}:{minutes}"


class ReservationBase(BaseModel):
    date: date_type
    time: str = Field(..., pattern=TIME_PATTERN)
    party_size: int = Field(..., ge=1, le=20)
    special_requests: Optional[str] = None

    @field_validator("time")
    @classmethod
    def pad_time(cls, value: str) -> str:
        return normalize_time(value)


class ReservationCreate(ReservationBase):
    pass


class ReservationUpdate(ReservationBase):
    pass


class ReservationStatusUpdate(BaseModel):
    status: ReservationStatus


class ReservationOut(BaseModel):
    id: int
    user_id: int
    date: date_type
    time: str
    party_size: int
    special_requests: Optional[str] = None
    status: ReservationStatus
    created_at: datetime

    class Config:
        from_attributes = True


class ReservationAdminOut(ReservationOut):
    user: Optional[UserSummary] = None


class AvailabilityOut(BaseModel):
    available: bool
    remaining_tables: int
