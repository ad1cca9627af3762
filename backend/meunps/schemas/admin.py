from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
from datetime import datetime
from uuid import UUID


class AdminUserSummary(BaseModel):
    """Admin view of a user record"""
    id: UUID
    email: str
    name: str
    role: str
    phone: Optional[str] = None
    company: Optional[str] = None
    position: Optional[str] = None
    avatar: Optional[str] = None
    is_deactivated: bool
    trial_start_date: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    preferences: Dict[str, Any] = Field(default_factory=dict)
