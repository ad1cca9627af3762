"""
Campaign management routes.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
import logging

from meunps.database import get_db
from meunps.models import User, Campaign, NpsResponse, Source, Group
from meunps.schemas import (
    CampaignCreate,
    CampaignUpdate,
    CampaignResponse,
    CampaignStats,
    DataResponse,
    MessageResponse,
)
from meunps.schemas.blobs import default_automation, default_survey_customization
from meunps.auth import get_current_user
from meunps.authorization import get_owned_campaign, owns
from meunps.services.nps import (
    calculate_nps,
    categorize_responses,
    nps_over_time,
    responses_by_score,
)

router = APIRouter(prefix="/api/campaigns", tags=["campaigns"])
logger = logging.getLogger(__name__)

BLOB_DEFAULTS = {
    "survey_customization": default_survey_customization,
    "automation": default_automation,
}


def _check_defaults(db: Session, user_id, source_id, group_id) -> None:
    if source_id is not None and not owns(db, Source, source_id, user_id):
        raise HTTPException(status_code=400, detail="Invalid default source")
    if group_id is not None and not owns(db, Group, group_id, user_id):
        raise HTTPException(status_code=400, detail="Invalid default group")


@router.get("", response_model=DataResponse[List[CampaignResponse]])
def list_campaigns(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List the caller's campaigns, newest first."""
    campaigns = (
        db.query(Campaign)
        .filter(Campaign.user_id == current_user.id)
        .order_by(Campaign.created_at.desc())
        .all()
    )
    return DataResponse(data=[CampaignResponse.model_validate(c) for c in campaigns])


@router.get("/{campaign_id}", response_model=DataResponse[CampaignResponse])
def get_campaign(
    campaign_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    campaign = get_owned_campaign(db, campaign_id, current_user)
    return DataResponse(data=CampaignResponse.model_validate(campaign))


@router.post("", response_model=DataResponse[CampaignResponse], status_code=201)
def create_campaign(
    payload: CampaignCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create a campaign owned by the caller; omitted JSON settings get their defaults."""
    if not payload.name or payload.start_date is None:
        raise HTTPException(status_code=400, detail="Name and start date are required")
    _check_defaults(db, current_user.id, payload.default_source_id, payload.default_group_id)

    campaign = Campaign(
        name=payload.name,
        description=payload.description,
        start_date=payload.start_date,
        end_date=payload.end_date,
        active=payload.active,
        default_source_id=payload.default_source_id,
        default_group_id=payload.default_group_id,
        survey_customization=(
            payload.survey_customization.to_document()
            if payload.survey_customization is not None
            else default_survey_customization()
        ),
        automation=(
            payload.automation.to_document()
            if payload.automation is not None
            else default_automation()
        ),
        user_id=current_user.id,
    )
    db.add(campaign)
    db.commit()
    db.refresh(campaign)

    logger.info("Created campaign %s for user %s", campaign.id, current_user.id)
    return DataResponse(data=CampaignResponse.model_validate(campaign))


@router.put("/{campaign_id}", response_model=DataResponse[CampaignResponse])
def update_campaign(
    campaign_id: UUID,
    payload: CampaignUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Update only the provided fields."""
    campaign = get_owned_campaign(db, campaign_id, current_user)

    update_data = payload.model_dump(exclude_unset=True)
    for field, default in BLOB_DEFAULTS.items():
        if field in update_data:
            blob = getattr(payload, field)
            update_data[field] = blob.to_document() if blob is not None else default()

    if "name" in update_data and not update_data["name"]:
        raise HTTPException(status_code=400, detail="Name is required")
    if "start_date" in update_data and update_data["start_date"] is None:
        raise HTTPException(status_code=400, detail="Start date is required")
    if "active" in update_data and update_data["active"] is None:
        update_data.pop("active")
    _check_defaults(
        db,
        current_user.id,
        update_data.get("default_source_id"),
        update_data.get("default_group_id"),
    )

    for field, value in update_data.items():
        setattr(campaign, field, value)

    db.commit()
    db.refresh(campaign)
    return DataResponse(data=CampaignResponse.model_validate(campaign))


@router.delete("/{campaign_id}", response_model=MessageResponse)
def delete_campaign(
    campaign_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete a campaign; its form and responses go with it."""
    campaign = get_owned_campaign(db, campaign_id, current_user)
    db.delete(campaign)
    db.commit()

    logger.info("Deleted campaign %s", campaign_id)
    return MessageResponse(message="Campaign deleted successfully")


@router.get("/{campaign_id}/stats", response_model=DataResponse[CampaignStats])
def get_campaign_stats(
    campaign_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """NPS, category split, score histogram and trend for one campaign."""
    campaign = get_owned_campaign(db, campaign_id, current_user)
    responses = (
        db.query(NpsResponse)
        .filter(NpsResponse.campaign_id == campaign.id)
        .order_by(NpsResponse.created_at)
        .all()
    )

    stats = CampaignStats(
        campaign_id=campaign.id,
        nps=calculate_nps(responses),
        categories=categorize_responses(responses),
        by_score=responses_by_score(responses),
        over_time=nps_over_time(responses),
    )
    return DataResponse(data=stats)
