"""
Affiliate program routes for the signed-in user.
"""
from decimal import Decimal
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
import logging

from meunps.config import get_settings
from meunps.database import get_db
from meunps.models import User, UserAffiliate, AffiliateReferral, UserProfile
from meunps.schemas import (
    AffiliateUpdate,
    AffiliateResponse,
    ReferralCreate,
    ReferralCreated,
    ReferralResponse,
    DataResponse,
)
from meunps.schemas.blobs import default_bank_account
from meunps.auth import get_current_user
from meunps.services.affiliate import recalculate_affiliate_stats
from meunps.utils import generate_affiliate_code, get_or_create

router = APIRouter(prefix="/api/affiliate", tags=["affiliate"])
logger = logging.getLogger(__name__)


def get_affiliate(db: Session, user: User) -> UserAffiliate:
    return get_or_create(
        db,
        UserAffiliate,
        user.id,
        lambda: UserAffiliate(user_id=user.id, affiliate_code=generate_affiliate_code()),
    )


def referral_to_response(referral: AffiliateReferral, referred_name, referred_email) -> ReferralResponse:
    return ReferralResponse(
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
    )


@router.get("", response_model=DataResponse[AffiliateResponse])
def read_affiliate(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    affiliate = get_affiliate(db, current_user)
    return DataResponse(data=AffiliateResponse.model_validate(affiliate))


@router.put("", response_model=DataResponse[AffiliateResponse])
def update_affiliate(
    payload: AffiliateUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Only the payout bank account is user-editable; totals are derived."""
    affiliate = get_affiliate(db, current_user)
    affiliate.bank_account = (
        payload.bank_account.to_document()
        if payload.bank_account is not None
        else default_bank_account()
    )
    db.commit()
    db.refresh(affiliate)
    return DataResponse(data=AffiliateResponse.model_validate(affiliate))


@router.get("/referrals", response_model=DataResponse[List[ReferralResponse]])
def list_referrals(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Referrals credited to the caller, newest first."""
    rows = (
        db.query(AffiliateReferral, UserProfile.name, UserProfile.email)
        .outerjoin(UserProfile, UserProfile.user_id == AffiliateReferral.referred_user_id)
        .filter(AffiliateReferral.affiliate_user_id == current_user.id)
        .order_by(AffiliateReferral.created_at.desc())
        .all()
    )
    return DataResponse(data=[referral_to_response(*row) for row in rows])


@router.post("/referrals", response_model=DataResponse[ReferralCreated], status_code=201)
def create_referral(
    payload: ReferralCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Credit the owner of ``affiliate_code`` with referring the caller.

    The referral insert and the totals update commit together.
    """
    if not payload.affiliate_code:
        raise HTTPException(status_code=400, detail="Affiliate code is required")

    affiliate = (
        db.query(UserAffiliate)
        .filter(UserAffiliate.affiliate_code == payload.affiliate_code)
        .first()
    )
    if affiliate is None:
        raise HTTPException(status_code=404, detail="Affiliate code not found")

    if affiliate.user_id == current_user.id:
        raise HTTPException(status_code=400, detail="Cannot create self-referral")

    if payload.commission_amount is not None and payload.commission_amount < 0:
        raise HTTPException(status_code=400, detail="Commission amount cannot be negative")

    amount = payload.commission_amount
    if amount is None:
        amount = get_settings().default_commission_amount
    referral = AffiliateReferral(
        affiliate_user_id=affiliate.user_id,
        referred_user_id=current_user.id,
        subscription_id=payload.subscription_id,
        commission_amount=Decimal(str(amount)),
    )
    db.add(referral)
    recalculate_affiliate_stats(db, affiliate.user_id)
    db.commit()

    logger.info(
        "Referral %s: user %s referred by %s",
        referral.id, current_user.id, affiliate.user_id,
    )
    return DataResponse(data=ReferralCreated(id=referral.id))
