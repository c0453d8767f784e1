"""
User schemas.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from cozy_corner.models.user import UserRole, UserStatus


class UserBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: str
    phone_number: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        value = value.strip().lower()
        local, _, domain = value.partition("@")
        if not local or "." not in domain:
            raise ValueError("Invalid email address")
        return value


class UserCreate(UserBase):
    password: str = Field(..., min_length=6)


class UserOut(BaseModel):
    id: int
    name: str
    email: str
    phone_number: Optional[str] = None
    role: UserRole
    status: UserStatus
    created_at: datetime

    class Config:
        from_attributes = True


class PublicUserSummary(BaseModel):
    """What anonymous visitors see of a reviewer."""
    id: int
    name: str

    class Config:
        from_attributes = True


class UserSummary(BaseModel):
    id: int
    name: str
    email: str

    class Config:
        from_attributes = True


class UserAdminUpdate(BaseModel):
    """Fields an admin may change on another account."""
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None
