from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from uuid import UUID


class ContactCreate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    position: Optional[str] = None
    group_ids: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    last_contact_date: Optional[datetime] = None


class ContactUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    position: Optional[str] = None
    group_ids: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    notes: Optional[str] = None
    last_contact_date: Optional[datetime] = None


class ContactResponse(BaseModel):
    id: UUID
    name: str
    email: str
    phone: str
    company: Optional[str] = None
    position: Optional[str] = None
    group_ids: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    last_contact_date: Optional[datetime] = None
    user_id: UUID
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
