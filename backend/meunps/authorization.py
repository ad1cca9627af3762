"""
Ownership checks for per-tenant resources.

Every tenant-owned row carries ``user_id``. Lookups filter on it together
with the primary key, so another tenant's row looks exactly like a missing
one (404) and its existence is never revealed.
"""
from fastapi import HTTPException
from sqlalchemy.orm import Session
from typing import Optional, Type, TypeVar
from uuid import UUID

from meunps.models import Campaign, User

ModelT = TypeVar("ModelT")


def get_owned_or_404(
    db: Session,
    model: Type[ModelT],
    resource_id: UUID,
    current_user: User,
    detail: Optional[str] = None,
    for_update: bool = False,
) -> ModelT:
    """
    Fetch a row by id that belongs to the current user.

    Args:
        db: Database session
        model: Mapped class with ``id`` and ``user_id`` columns
        resource_id: Primary key requested by the client
        current_user: The authenticated user
        detail: Error message, defaults to "<Model> not found"
        for_update: Lock the row for the rest of the transaction

    Raises:
        HTTPException: 404 if missing or owned by someone else
    """
    query = db.query(model).filter(
        model.id == resource_id,
        model.user_id == current_user.id,
    )
    if for_update:
        query = query.with_for_update()
    instance = query.first()
    if instance is None:
        raise HTTPException(
            status_code=404,
            detail=detail or f"{model.__name__} not found",
        )
    return instance


def get_owned_campaign(db: Session, campaign_id: UUID, current_user: User) -> Campaign:
    return get_owned_or_404(db, Campaign, campaign_id, current_user, detail="Campaign not found")


def owns(db: Session, model: Type[ModelT], resource_id: UUID, user_id: UUID) -> bool:
    """Check ownership without raising."""
    return (
        db.query(model.id)
        .filter(model.id == resource_id, model.user_id == user_id)
        .first()
        is not None
    )
