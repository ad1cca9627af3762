"""
Administrative routes: user lifecycle and referral payouts.

All routes require a UserAdmin grant with ``view_users``.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, aliased
from typing import List, Optional
from uuid import UUID
import logging

from meunps.database import get_db
from meunps.models import (
    User,
    Campaign,
    UserProfile,
    UserAffiliate,
    AffiliateReferral,
    COMMISSION_STATUSES,
)
from meunps.schemas import (
    AdminUserSummary,
    AdminReferralResponse,
    ReferralStatusUpdate,
    DataResponse,
    MessageResponse,
)
from meunps.auth import require_admin
from meunps.services.affiliate import delete_user_and_refresh_referrers, recalculate_affiliate_stats
from meunps.utils import utcnow

router = APIRouter(prefix="/api/admin", tags=["admin"])
logger = logging.getLogger(__name__)


def _get_user_for_update(db: Session, user_id: UUID) -> User:
    user = db.query(User).filter(User.id == user_id).with_for_update().first()
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/users", response_model=DataResponse[List[AdminUserSummary]])
def list_users(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """All users with their profile preferences, newest first."""
    rows = (
        db.query(User, UserProfile.preferences)
        .outerjoin(UserProfile, UserProfile.user_id == User.id)
        .order_by(User.created_at.desc())
        .all()
    )
    users = [
        AdminUserSummary(
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.role,
            phone=user.phone,
            company=user.company,
            position=user.position,
            avatar=user.avatar,
            is_deactivated=user.is_deactivated,
            trial_start_date=user.trial_start_date,
            created_at=user.created_at,
            updated_at=user.updated_at,
            preferences=preferences or {},
        )
        for user, preferences in rows
    ]
    return DataResponse(data=users)


@router.post("/users/{user_id}/deactivate", response_model=MessageResponse)
def deactivate_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """
    Block the user from signing in and close all of their campaigns.

    Both updates commit together: a deactivated user never has an active
    campaign.
    """
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail="Cannot deactivate your own account")

    user = _get_user_for_update(db, user_id)
    user.is_deactivated = True
    closed = (
        db.query(Campaign)
        .filter(Campaign.user_id == user.id)
        .update(
            {Campaign.active: False, Campaign.updated_at: utcnow()},
            synchronize_session="fetch",
        )
    )
    db.commit()

    logger.info("Admin %s deactivated user %s (%d campaigns closed)", admin.id, user_id, closed)
    return MessageResponse(message="User deactivated successfully")


@router.post("/users/{user_id}/reactivate", response_model=MessageResponse)
def reactivate_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Clear the deactivation flag. Campaigns stay inactive until their owner reopens them."""
    user = _get_user_for_update(db, user_id)
    user.is_deactivated = False
    db.commit()

    logger.info("Admin %s reactivated user %s", admin.id, user_id)
    return MessageResponse(message="User reactivated successfully")


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail="Cannot delete your own account")

    user = _get_user_for_update(db, user_id)
    delete_user_and_refresh_referrers(db, user)
    db.commit()

    logger.info("Admin %s deleted user %s", admin.id, user_id)
    return MessageResponse(message="User deleted successfully")


@router.get("/affiliate/referrals", response_model=DataResponse[List[AdminReferralResponse]])
def list_all_referrals(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Every referral with the affiliate's code and both parties' names."""
    affiliate_profile = aliased(UserProfile)
    referred_profile = aliased(UserProfile)
    rows = (
        db.query(
            AffiliateReferral,
            UserAffiliate.affiliate_code,
            affiliate_profile.name,
            affiliate_profile.email,
            referred_profile.name,
            referred_profile.email,
        )
        .outerjoin(UserAffiliate, UserAffiliate.user_id == AffiliateReferral.affiliate_user_id)
        .outerjoin(affiliate_profile, affiliate_profile.user_id == AffiliateReferral.affiliate_user_id)
        .outerjoin(referred_profile, referred_profile.user_id == AffiliateReferral.referred_user_id)
        .order_by(AffiliateReferral.created_at.desc())
        .all()
    )

    referrals = []
    for referral, code, affiliate_name, affiliate_email, referred_name, referred_email in rows:
        referrals.append(AdminReferralResponse(
            id=referral.id,
            affiliate_user_id=referral.affiliate_user_id,
            referred_user_id=referral.referred_user_id,
            subscription_id=referral.subscription_id,
            commission_amount=referral.commission_amount,
            commission_status=referral.commission_status,
            paid_at=referral.paid_at,
            created_at=referral.created_at,
            updated_at=referral.updated_at,
            referred_name=referred_name,
            referred_email=referred_email,
            affiliate_code=code,
            affiliate_name=affiliate_name,
            affiliate_email=affiliate_email,
        ))
    return DataResponse(data=referrals)


@router.put("/affiliate/referrals/{referral_id}/status", response_model=MessageResponse)
def update_referral_status(
    referral_id: UUID,
    payload: ReferralStatusUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Move a commission between pending, paid and cancelled and refresh the affiliate totals."""
    status: Optional[str] = payload.status
    if status not in COMMISSION_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")

    referral = (
        db.query(AffiliateReferral)
        .filter(AffiliateReferral.id == referral_id)
        .with_for_update()
        .first()
    )
    if referral is None:
        raise HTTPException(status_code=404, detail="Referral not found")

    referral.commission_status = status
    if status == "paid":
        referral.paid_at = utcnow()

    recalculate_affiliate_stats(db, referral.affiliate_user_id)
    db.commit()

    logger.info("Admin %s set referral %s to %s", admin.id, referral_id, status)
    return MessageResponse(message="Referral status updated successfully")
