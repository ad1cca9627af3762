"""
Referral program bookkeeping.

The totals on UserAffiliate are derived from AffiliateReferral rows and are
rewritten by services.affiliate.recalculate_affiliate_stats after every
referral insert or status change.
"""
from sqlalchemy import Column, String, DateTime, Integer, Numeric, ForeignKey, CheckConstraint, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
from decimal import Decimal
from meunps.database import Base, JSONType
from meunps.schemas.blobs import default_bank_account
from meunps.utils import utcnow

COMMISSION_STATUSES = ("pending", "paid", "cancelled")


class UserAffiliate(Base):
    __tablename__ = "user_affiliates"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True)
    affiliate_code = Column(String(16), nullable=False, unique=True)
    bank_account = Column(JSONType, nullable=False, default=default_bank_account)
    total_referrals = Column(Integer, nullable=False, default=0)
    total_earnings = Column(Numeric(12, 2), nullable=False, default=0)
    total_received = Column(Numeric(12, 2), nullable=False, default=0)
    total_pending = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    user = relationship("User", back_populates="affiliate")

    def __repr__(self):
        return f"<UserAffiliate(user_id={self.user_id}, code={self.affiliate_code})>"


class AffiliateReferral(Base):
    __tablename__ = "affiliate_referrals"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    affiliate_user_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    referred_user_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    subscription_id = Column(String(255), nullable=True)
    commission_amount = Column(Numeric(12, 2), nullable=False, default=Decimal('25.00'))
    commission_status = Column(String(20), nullable=False, default='pending')  # pending, paid, cancelled
    paid_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    __table_args__ = (
        CheckConstraint(
            "commission_status IN ('pending', 'paid', 'cancelled')",
            name='affiliate_referrals_status_check',
        ),
    )

    def __repr__(self):
        return (
            f"<AffiliateReferral(id={self.id}, affiliate_user_id={self.affiliate_user_id}, "
            f"status={self.commission_status})>"
        )
