"""
Contact (CRM) routes.
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
import logging

from meunps.database import get_db
from meunps.models import User, Contact
from meunps.schemas import (
    ContactCreate,
    ContactUpdate,
    ContactResponse,
    DataResponse,
    MessageResponse,
)
from meunps.auth import get_current_user
from meunps.authorization import get_owned_or_404

router = APIRouter(prefix="/api/contacts", tags=["contacts"])
logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "email", "phone")


@router.get("", response_model=DataResponse[List[ContactResponse]])
def list_contacts(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    contacts = (
        db.query(Contact)
        .filter(Contact.user_id == current_user.id)
        .order_by(Contact.name)
        .all()
    )
    return DataResponse(data=[ContactResponse.model_validate(c) for c in contacts])


@router.get("/search", response_model=DataResponse[List[ContactResponse]])
def search_contacts(
    q: Optional[str] = Query(None, description="Matched against name, email, phone and company"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Substring search over the caller's contacts."""
    if not q:
        raise HTTPException(status_code=400, detail="Search query is required")

    pattern = f"%{q}%"
    contacts = (
        db.query(Contact)
        .filter(
            Contact.user_id == current_user.id,
            or_(
                Contact.name.ilike(pattern),
                Contact.email.ilike(pattern),
                Contact.phone.ilike(pattern),
                Contact.company.ilike(pattern),
            ),
        )
        .order_by(Contact.name)
        .all()
    )
    return DataResponse(data=[ContactResponse.model_validate(c) for c in contacts])


@router.get("/{contact_id}", response_model=DataResponse[ContactResponse])
def get_contact(
    contact_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    contact = get_owned_or_404(db, Contact, contact_id, current_user, detail="Contact not found")
    return DataResponse(data=ContactResponse.model_validate(contact))


@router.post("", response_model=DataResponse[ContactResponse], status_code=201)
def create_contact(
    payload: ContactCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not payload.name or not payload.email or not payload.phone:
        raise HTTPException(status_code=400, detail="Name, email and phone are required")

    contact = Contact(**payload.model_dump(), user_id=current_user.id)
    db.add(contact)
    db.commit()
    db.refresh(contact)

    logger.info("Created contact %s for user %s", contact.id, current_user.id)
    return DataResponse(data=ContactResponse.model_validate(contact))


@router.put("/{contact_id}", response_model=DataResponse[ContactResponse])
def update_contact(
    contact_id: UUID,
    payload: ContactUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Update only the provided fields; name, email and phone cannot be blanked."""
    contact = get_owned_or_404(db, Contact, contact_id, current_user, detail="Contact not found")

    update_data = payload.model_dump(exclude_unset=True)
    for field in REQUIRED_FIELDS:
        if field in update_data and not update_data[field]:
            raise HTTPException(status_code=400, detail="Name, email and phone are required")
    for field in ("group_ids", "tags"):
        if field in update_data and update_data[field] is None:
            update_data[field] = []

    for field, value in update_data.items():
        setattr(contact, field, value)

    db.commit()
    db.refresh(contact)
    return DataResponse(data=ContactResponse.model_validate(contact))


@router.delete("/{contact_id}", response_model=MessageResponse)
def delete_contact(
    contact_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    contact = get_owned_or_404(db, Contact, contact_id, current_user, detail="Contact not found")
    db.delete(contact)
    db.commit()
    return MessageResponse(message="Contact deleted successfully")
