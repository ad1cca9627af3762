"""
Survey form routes.

The GET is public: the survey page loads it before anyone is signed in.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from uuid import UUID
import logging

from meunps.database import get_db
from meunps.models import User, Campaign, CampaignForm
from meunps.schemas import CampaignFormSave, CampaignFormResponse, DataResponse
from meunps.schemas.blobs import default_form_fields
from meunps.auth import get_current_user
from meunps.authorization import get_owned_or_404

router = APIRouter(prefix="/api/forms", tags=["forms"])
logger = logging.getLogger(__name__)

DEFAULT_FORM_ID = "default-form"


def _form_response(form: CampaignForm) -> CampaignFormResponse:
    return CampaignFormResponse(
        id=str(form.id),
        campaign_id=form.campaign_id,
        fields=form.fields or [],
        user_id=form.user_id,
        created_at=form.created_at,
        updated_at=form.updated_at,
    )


@router.get("/campaign/{campaign_id}", response_model=DataResponse[CampaignFormResponse])
def get_campaign_form(campaign_id: UUID, db: Session = Depends(get_db)):
    """Saved form of an active campaign, or the default two-field form."""
    campaign = db.query(Campaign).filter(Campaign.id == campaign_id).first()
    if campaign is None:
        raise HTTPException(status_code=404, detail="Campaign not found")
    if not campaign.active:
        raise HTTPException(status_code=400, detail="Campaign is not active")

    form = db.query(CampaignForm).filter(CampaignForm.campaign_id == campaign_id).first()
    if form is None:
        return DataResponse(data=CampaignFormResponse(
            id=DEFAULT_FORM_ID,
            campaign_id=campaign_id,
            fields=default_form_fields(),
        ))

    return DataResponse(data=_form_response(form))


@router.post("/campaign/{campaign_id}", response_model=DataResponse[CampaignFormResponse])
def save_campaign_form(
    campaign_id: UUID,
    payload: CampaignFormSave,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create or replace the form of one of the caller's campaigns."""
    if payload.fields is None:
        raise HTTPException(status_code=400, detail="Fields array is required")

    # Lock the campaign so two first saves cannot both insert
    get_owned_or_404(
        db, Campaign, campaign_id, current_user,
        detail="Campaign not found", for_update=True,
    )

    fields = [field.to_document() for field in payload.fields]
    form = db.query(CampaignForm).filter(CampaignForm.campaign_id == campaign_id).first()
    if form is None:
        form = CampaignForm(campaign_id=campaign_id, fields=fields, user_id=current_user.id)
        db.add(form)
    else:
        form.fields = fields

    db.commit()
    db.refresh(form)

    logger.info("Saved form for campaign %s (%d fields)", campaign_id, len(fields))
    return DataResponse(data=_form_response(form))
