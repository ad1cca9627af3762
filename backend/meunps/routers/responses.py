"""
NPS response routes: public submission and the owner's listings.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
import logging

from meunps.database import get_db
from meunps.models import User, Campaign, NpsResponse, Source, Situation, Group
from meunps.schemas import (
    ResponseSubmit,
    SubmissionReceipt,
    NpsResponseOut,
    DataResponse,
)
from meunps.auth import get_current_user
from meunps.authorization import get_owned_campaign, owns
from meunps.utils import ensure_aware, utcnow

router = APIRouter(prefix="/api/responses", tags=["responses"])
logger = logging.getLogger(__name__)

MIN_SCORE = 0
MAX_SCORE = 10

CLASSIFICATIONS = (
    ("source_id", Source, "Invalid source"),
    ("situation_id", Situation, "Invalid situation"),
    ("group_id", Group, "Invalid group"),
)


def is_accepting_responses(campaign: Campaign, now=None) -> bool:
    """True when ``start_date <= now <= end_date`` (open-ended without an end date)."""
    now = now or utcnow()
    if now < ensure_aware(campaign.start_date):
        return False
    if campaign.end_date is not None and now > ensure_aware(campaign.end_date):
        return False
    return True


@router.post("/submit", response_model=DataResponse[SubmissionReceipt], status_code=201)
def submit_response(payload: ResponseSubmit, db: Session = Depends(get_db)):
    """
    Record an anonymous survey answer.

    The campaign row stays locked from the validity check to the insert, so
    a concurrent deactivation cannot slip in between.
    """
    if payload.campaign_id is None or payload.score is None:
        raise HTTPException(status_code=400, detail="Campaign ID and score are required")

    if payload.score < MIN_SCORE or payload.score > MAX_SCORE:
        raise HTTPException(status_code=400, detail="Score must be between 0 and 10")

    campaign = (
        db.query(Campaign)
        .filter(Campaign.id == payload.campaign_id)
        .with_for_update()
        .first()
    )
    if campaign is None:
        raise HTTPException(status_code=404, detail="Campaign not found")

    if not campaign.active:
        raise HTTPException(status_code=400, detail="Campaign is not active")

    if not is_accepting_responses(campaign):
        raise HTTPException(
            status_code=400,
            detail="Campaign is not currently accepting responses",
        )

    classification = {
        "source_id": payload.source_id or campaign.default_source_id,
        "situation_id": payload.situation_id,
        "group_id": payload.group_id or campaign.default_group_id,
    }
    for field, model, message in CLASSIFICATIONS:
        value = classification[field]
        if value is not None and not owns(db, model, value, campaign.user_id):
            raise HTTPException(status_code=400, detail=message)

    response = NpsResponse(
        campaign_id=campaign.id,
        score=payload.score,
        feedback=payload.feedback or None,
        form_responses=payload.form_responses or {},
        **classification,
    )
    db.add(response)
    db.commit()
    db.refresh(response)

    logger.info("Response %s (score %s) recorded for campaign %s", response.id, response.score, campaign.id)
    return DataResponse(data=SubmissionReceipt(id=response.id, created_at=response.created_at))


@router.get("", response_model=DataResponse[List[NpsResponseOut]])
def list_responses(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Every response across the caller's campaigns, newest first."""
    responses = (
        db.query(NpsResponse)
        .join(Campaign, NpsResponse.campaign_id == Campaign.id)
        .filter(Campaign.user_id == current_user.id)
        .order_by(NpsResponse.created_at.desc())
        .all()
    )
    return DataResponse(data=[NpsResponseOut.model_validate(r) for r in responses])


@router.get("/campaign/{campaign_id}", response_model=DataResponse[List[NpsResponseOut]])
def list_campaign_responses(
    campaign_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    campaign = get_owned_campaign(db, campaign_id, current_user)
    responses = (
        db.query(NpsResponse)
        .filter(NpsResponse.campaign_id == campaign.id)
        .order_by(NpsResponse.created_at.desc())
        .all()
    )
    return DataResponse(data=[NpsResponseOut.model_validate(r) for r in responses])
