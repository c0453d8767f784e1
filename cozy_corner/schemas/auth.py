"""
Schemas for authentication (login, token).
"""
from pydantic import BaseModel

from .user import UserOut


class Token(BaseModel):
    access_token: str
    token_type: str


class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterResponse(BaseModel):
    message: str
    user: UserOut
    access_token: str
    token_type: str = "bearer"
