"""
Derived totals for the referral program.
"""
import logging
from decimal import Decimal
from typing import Dict, List
from uuid import UUID

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from meunps.models import AffiliateReferral, User, UserAffiliate

logger = logging.getLogger(__name__)


def compute_affiliate_totals(db: Session, affiliate_user_id: UUID) -> Dict[str, object]:
    """Grouped sums over every referral of one affiliate."""
    amount = AffiliateReferral.commission_amount
    status = AffiliateReferral.commission_status
    row = (
        db.query(
            func.count(AffiliateReferral.id),
            func.coalesce(func.sum(amount), 0),
            func.coalesce(func.sum(case((status == "paid", amount), else_=0)), 0),
            func.coalesce(func.sum(case((status == "pending", amount), else_=0)), 0),
        )
        .filter(AffiliateReferral.affiliate_user_id == affiliate_user_id)
        .one()
    )
    return {
        "total_referrals": int(row[0]),
        "total_earnings": Decimal(str(row[1])),
        "total_received": Decimal(str(row[2])),
        "total_pending": Decimal(str(row[3])),
    }


def referrer_ids(db: Session, referred_user_id: UUID) -> List[UUID]:
    """Affiliates credited with referring ``referred_user_id``."""
    rows = (
        db.query(AffiliateReferral.affiliate_user_id)
        .filter(AffiliateReferral.referred_user_id == referred_user_id)
        .distinct()
        .all()
    )
    return [row[0] for row in rows]


def delete_user_and_refresh_referrers(db: Session, user: User) -> None:
    """
    Delete ``user`` and rewrite the totals of every affiliate who referred them.

    The foreign keys drop the user's referral rows; the referrers' totals are
    recalculated in the same transaction. The caller commits.
    """
    affected = [affiliate_id for affiliate_id in referrer_ids(db, user.id) if affiliate_id != user.id]
    db.delete(user)
    db.flush()
    for affiliate_user_id in affected:
        recalculate_affiliate_stats(db, affiliate_user_id)


def recalculate_affiliate_stats(db: Session, affiliate_user_id: UUID) -> UserAffiliate | None:
    """
    Rewrite the four totals on the affiliate row from its referrals.

    Runs inside the caller's transaction and locks the affiliate row first,
    so concurrent referral changes for the same affiliate serialize on it.
    The caller commits. Returns None when the user has no affiliate row.
    """
    affiliate = (
        db.query(UserAffiliate)
        .filter(UserAffiliate.user_id == affiliate_user_id)
        .with_for_update()
        .first()
    )
    if affiliate is None:
        logger.warning("No affiliate record for user %s; totals not updated", affiliate_user_id)
        return None

    db.flush()
    totals = compute_affiliate_totals(db, affiliate_user_id)
    for field, value in totals.items():
        setattr(affiliate, field, value)

    logger.info(
        "Affiliate %s totals: %s referrals, earnings %s",
        affiliate_user_id,
        totals["total_referrals"],
        totals["total_earnings"],
    )
    return affiliate
