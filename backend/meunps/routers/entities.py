"""
Classification taxonomies: sources, situations and groups.

The three share one set of CRUD routes, built per model by
``build_entity_router``.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Type
from uuid import UUID
import logging

from meunps.database import get_db
from meunps.models import User, Source, Situation, Group
from meunps.schemas import (
    EntityCreate,
    EntityUpdate,
    EntityResponse,
    DataResponse,
    MessageResponse,
)
from meunps.auth import get_current_user
from meunps.authorization import get_owned_or_404

logger = logging.getLogger(__name__)


def build_entity_router(model: Type, label: str, has_color: bool = True) -> APIRouter:
    entity_router = APIRouter()
    not_found = f"{label} not found"

    def _payload_fields(payload) -> dict:
        data = payload.model_dump(exclude_unset=True)
        if not has_color:
            data.pop("color", None)
        return data

    @entity_router.get("", response_model=DataResponse[List[EntityResponse]])
    def list_entities(
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
    ):
        entities = (
            db.query(model)
            .filter(model.user_id == current_user.id)
            .order_by(model.name)
            .all()
        )
        return DataResponse(data=[EntityResponse.model_validate(e) for e in entities])

    @entity_router.post("", response_model=DataResponse[EntityResponse], status_code=201)
    def create_entity(
        payload: EntityCreate,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
    ):
        if not payload.name:
            raise HTTPException(status_code=400, detail="Name is required")

        data = _payload_fields(payload)
        # Explicit null keeps the column default
        if data.get("color") is None:
            data.pop("color", None)
        entity = model(**data, user_id=current_user.id)
        db.add(entity)
        db.commit()
        db.refresh(entity)
        return DataResponse(data=EntityResponse.model_validate(entity))

    @entity_router.put("/{entity_id}", response_model=DataResponse[EntityResponse])
    def update_entity(
        entity_id: UUID,
        payload: EntityUpdate,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
    ):
        entity = get_owned_or_404(db, model, entity_id, current_user, detail=not_found)

        data = _payload_fields(payload)
        if "name" in data and not data["name"]:
            raise HTTPException(status_code=400, detail="Name is required")
        for field, value in data.items():
            setattr(entity, field, value)

        db.commit()
        db.refresh(entity)
        return DataResponse(data=EntityResponse.model_validate(entity))

    @entity_router.delete("/{entity_id}", response_model=MessageResponse)
    def delete_entity(
        entity_id: UUID,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
    ):
        """Responses and campaigns pointing at the row keep existing with a null reference."""
        entity = get_owned_or_404(db, model, entity_id, current_user, detail=not_found)
        db.delete(entity)
        db.commit()

        logger.info("Deleted %s %s", label.lower(), entity_id)
        return MessageResponse(message=f"{label} deleted successfully")

    return entity_router


router = APIRouter(prefix="/api/entities", tags=["entities"])
router.include_router(build_entity_router(Source, "Source"), prefix="/sources")
router.include_router(build_entity_router(Situation, "Situation"), prefix="/situations")
router.include_router(build_entity_router(Group, "Group", has_color=False), prefix="/groups")
