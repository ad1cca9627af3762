"""
Per-user application settings (theme, language, company data, integrations).
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from meunps.database import get_db
from meunps.models import User, AppConfig
from meunps.schemas import AppConfigUpdate, AppConfigResponse, DataResponse
from meunps.schemas.blobs import default_company, default_integrations
from meunps.auth import get_current_user
from meunps.utils import get_or_create

router = APIRouter(prefix="/api/config", tags=["config"])
logger = logging.getLogger(__name__)


def get_app_config(db: Session, user: User) -> AppConfig:
    """The user's config row, seeded with defaults on first access."""
    return get_or_create(db, AppConfig, user.id, lambda: AppConfig(user_id=user.id))


@router.get("", response_model=DataResponse[AppConfigResponse])
def read_config(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    config = get_app_config(db, current_user)
    return DataResponse(data=AppConfigResponse.model_validate(config))


@router.put("", response_model=DataResponse[AppConfigResponse])
def update_config(
    payload: AppConfigUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    config = get_app_config(db, current_user)
    update_data = payload.model_dump(exclude_unset=True)

    if update_data.get("theme_color"):
        config.theme_color = update_data["theme_color"]
    if update_data.get("language"):
        config.language = update_data["language"]
    if "company" in update_data:
        config.company = (
            payload.company.to_document() if payload.company is not None else default_company()
        )
    if "integrations" in update_data:
        config.integrations = (
            payload.integrations.to_document()
            if payload.integrations is not None
            else default_integrations()
        )

    db.commit()
    db.refresh(config)

    logger.info("Updated app config for user %s", current_user.id)
    return DataResponse(data=AppConfigResponse.model_validate(config))
