# cozy_corner/routes/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from cozy_corner.models.user import User, UserRole, UserStatus
from cozy_corner.schemas.auth import LoginRequest, RegisterResponse, Token
from cozy_corner.schemas.user import UserCreate, UserOut

from .. import auth_utils
from ..db import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_for(user: User) -> str:
    return auth_utils.create_access_token(
        data={"sub": str(user.id), "role": user.role.value}
    )


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(user_in: UserCreate, db: Session = Depends(get_db)):
    """Customer self-registration. Admin accounts are promoted by an admin."""
    if auth_utils.get_user_by_email(db, user_in.email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An account with this email already exists"
        )

    user = User(
        name=user_in.name.strip(),
        email=user_in.email,
        phone_number=user_in.phone_number,
        password_hash=auth_utils.get_password_hash(user_in.password),
        role=UserRole.customer,
        status=UserStatus.active,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Registered customer {user.id}")

    return {
        "message": "Registration successful",
        "user": user,
        "access_token": _token_for(user),
        "token_type": "bearer",
    }


@router.post("/login", response_model=Token)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    user = auth_utils.authenticate_user(db, request.email, request.password)

    if not user:
        logger.info("Authentication failed")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if user.status != UserStatus.active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account is inactive. Please contact the cafe."
        )

    return {
        "access_token": _token_for(user),
        "token_type": "bearer"
    }


@router.get("/me", response_model=UserOut)
def get_current_user_info(current: User = Depends(auth_utils.get_current_user)):
    return current
