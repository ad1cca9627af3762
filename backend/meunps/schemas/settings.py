"""
Per-user singleton records: profile, app config, affiliate.
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
from datetime import datetime
from uuid import UUID

from .blobs import BankAccount, CompanyInfo, Integrations, Preferences


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    position: Optional[str] = None
    avatar: Optional[str] = None
    preferences: Optional[Preferences] = None


class ProfileResponse(BaseModel):
    id: UUID
    user_id: UUID
    name: str
    email: str
    phone: Optional[str] = None
    company: Optional[str] = None
    position: Optional[str] = None
    avatar: Optional[str] = None
    preferences: Dict[str, Any] = Field(default_factory=dict)
    trial_start_date: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AppConfigUpdate(BaseModel):
    theme_color: Optional[str] = None
    language: Optional[str] = None
    company: Optional[CompanyInfo] = None
    integrations: Optional[Integrations] = None


class AppConfigResponse(BaseModel):
    id: UUID
    user_id: UUID
    theme_color: str
    language: str
    company: Dict[str, Any] = Field(default_factory=dict)
    integrations: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AffiliateUpdate(BaseModel):
    bank_account: Optional[BankAccount] = None


class AffiliateResponse(BaseModel):
    id: UUID
    user_id: UUID
    affiliate_code: str
    bank_account: Dict[str, Any] = Field(default_factory=dict)
    total_referrals: int
    total_earnings: float
    total_received: float
    total_pending: float
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
