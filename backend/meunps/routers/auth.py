"""
Authentication routes.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Optional
import logging

from meunps.database import get_db
from meunps.models import User, UserProfile, UserAffiliate
from meunps.schemas import (
    UserRegister,
    UserLogin,
    PasswordChange,
    AccountDeletion,
    RegisteredUser,
    RegisterResponse,
    LoginUser,
    LoginResponse,
    UserResponse,
    CurrentUserResponse,
    MessageResponse,
)
from meunps.auth import (
    get_current_user,
    get_password_hash,
    verify_password,
    create_user_token,
)
from meunps.services.affiliate import delete_user_and_refresh_referrers
from meunps.utils import generate_affiliate_code, utcnow

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def email_taken(db: Session, email: str) -> bool:
    return db.query(User.id).filter(User.email == email).first() is not None


@router.post("/register", response_model=RegisterResponse, status_code=201)
def register(payload: UserRegister, db: Session = Depends(get_db)):
    """
    Create an account together with its profile and affiliate record.

    A concurrent sign-up with the same email loses on the unique constraint
    and gets the same 400 as the pre-check.
    """
    if not payload.email or not payload.password or not payload.name:
        raise HTTPException(status_code=400, detail="Email, password and name are required")

    if email_taken(db, payload.email):
        raise HTTPException(status_code=400, detail="User already exists")

    now = utcnow()
    user = User(
        email=payload.email,
        name=payload.name,
        password_hash=get_password_hash(payload.password),
        trial_start_date=now,
    )
    try:
        db.add(user)
        db.flush()

        db.add(UserProfile(
            user_id=user.id,
            name=payload.name,
            email=payload.email,
            trial_start_date=now,
        ))
        db.add(UserAffiliate(user_id=user.id, affiliate_code=generate_affiliate_code()))
        db.commit()
    except IntegrityError:
        db.rollback()
        if email_taken(db, payload.email):
            logger.info("Concurrent registration for %s", payload.email)
            raise HTTPException(status_code=400, detail="User already exists")
        raise
    db.refresh(user)

    logger.info("Registered user %s (%s)", user.id, user.email)
    return RegisterResponse(
        message="User created successfully",
        user=RegisteredUser.model_validate(user),
    )


@router.post("/login", response_model=LoginResponse)
def login(credentials: UserLogin, db: Session = Depends(get_db)):
    """Validate email and password and issue a 7-day JWT."""
    if not credentials.email or not credentials.password:
        raise HTTPException(status_code=400, detail="Email and password are required")

    user = db.query(User).filter(User.email == credentials.email).first()
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    if user.is_deactivated:
        raise HTTPException(status_code=401, detail="Account deactivated")

    if not verify_password(credentials.password, user.password_hash):
        logger.info("Failed login for %s", credentials.email)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return LoginResponse(
        token=create_user_token(user),
        user=LoginUser.model_validate(user),
    )


@router.get("/me", response_model=CurrentUserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return CurrentUserResponse(user=UserResponse.model_validate(current_user))


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    payload: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not payload.currentPassword or not payload.newPassword:
        raise HTTPException(
            status_code=400,
            detail="Current password and new password are required",
        )

    if not verify_password(payload.currentPassword, current_user.password_hash):
        raise HTTPException(status_code=401, detail="Current password is incorrect")

    current_user.password_hash = get_password_hash(payload.newPassword)
    db.commit()

    logger.info("Password changed for user %s", current_user.id)
    return MessageResponse(message="Password changed successfully")


@router.delete("/account", response_model=MessageResponse)
def delete_account(
    payload: Optional[AccountDeletion] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete the caller and, through the cascading foreign keys, everything they own."""
    confirmation = payload.confirmationEmail if payload else None
    if confirmation != current_user.email:
        raise HTTPException(status_code=400, detail="Email confirmation does not match")

    user_id = current_user.id
    delete_user_and_refresh_referrers(db, current_user)
    db.commit()

    logger.info("Deleted account %s", user_id)
    return MessageResponse(message="Account deleted successfully")
