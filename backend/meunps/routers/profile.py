"""
User profile routes.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from meunps.database import get_db
from meunps.models import User, UserProfile
from meunps.schemas import ProfileUpdate, ProfileResponse, DataResponse
from meunps.schemas.blobs import default_preferences
from meunps.auth import get_current_user
from meunps.utils import get_or_create

router = APIRouter(prefix="/api/profile", tags=["profile"])
logger = logging.getLogger(__name__)

# Mirrored on users and user_profiles
SHARED_FIELDS = ("name", "phone", "company", "position", "avatar")


def _get_profile(db: Session, user: User) -> UserProfile:
    return get_or_create(
        db,
        UserProfile,
        user.id,
        lambda: UserProfile(
            user_id=user.id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            company=user.company,
            position=user.position,
            avatar=user.avatar,
            trial_start_date=user.trial_start_date,
        ),
    )


@router.get("", response_model=DataResponse[ProfileResponse])
def get_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """The caller's profile, created on first access."""
    profile = _get_profile(db, current_user)
    return DataResponse(data=ProfileResponse.model_validate(profile))


@router.put("", response_model=DataResponse[ProfileResponse])
def update_profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Update the profile and the matching columns on the user in one commit."""
    profile = _get_profile(db, current_user)
    update_data = payload.model_dump(exclude_unset=True)

    for field in SHARED_FIELDS:
        if field not in update_data:
            continue
        value = update_data[field]
        if field == "name" and not value:
            continue
        setattr(current_user, field, value)
        setattr(profile, field, value)

    if "preferences" in update_data:
        profile.preferences = (
            payload.preferences.to_document()
            if payload.preferences is not None
            else default_preferences()
        )

    db.commit()
    db.refresh(profile)

    logger.info("Updated profile for user %s", current_user.id)
    return DataResponse(data=ProfileResponse.model_validate(profile))
