"""
Referral schemas, for both the affiliate's own view and the admin view.
"""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from uuid import UUID


class ReferralCreate(BaseModel):
    affiliate_code: Optional[str] = None
    subscription_id: Optional[str] = None
    commission_amount: Optional[float] = None


class ReferralCreated(BaseModel):
    id: UUID


class ReferralStatusUpdate(BaseModel):
    status: Optional[str] = None


class ReferralResponse(BaseModel):
    id: UUID
    affiliate_user_id: UUID
    referred_user_id: UUID
    subscription_id: Optional[str] = None
    commission_amount: float
    commission_status: str
    paid_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    referred_name: Optional[str] = None
    referred_email: Optional[str] = None


class AdminReferralResponse(ReferralResponse):
    affiliate_code: Optional[str] = None
    affiliate_name: Optional[str] = None
    affiliate_email: Optional[str] = None
