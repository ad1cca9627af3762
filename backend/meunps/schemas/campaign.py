"""
Campaign, form and response schemas.
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime
from uuid import UUID

from .blobs import Automation, FormField, SurveyCustomization


class CampaignCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    active: bool = True
    default_source_id: Optional[UUID] = None
    default_group_id: Optional[UUID] = None
    survey_customization: Optional[SurveyCustomization] = None
    automation: Optional[Automation] = None


class CampaignUpdate(BaseModel):
    """Only the provided fields are replaced."""
    name: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    active: Optional[bool] = None
    default_source_id: Optional[UUID] = None
    default_group_id: Optional[UUID] = None
    survey_customization: Optional[SurveyCustomization] = None
    automation: Optional[Automation] = None


class CampaignResponse(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    active: bool
    default_source_id: Optional[UUID] = None
    default_group_id: Optional[UUID] = None
    survey_customization: Dict[str, Any] = Field(default_factory=dict)
    automation: Dict[str, Any] = Field(default_factory=dict)
    user_id: UUID
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CampaignFormSave(BaseModel):
    fields: Optional[List[FormField]] = None


class CampaignFormResponse(BaseModel):
    id: str
    campaign_id: UUID
    fields: List[Dict[str, Any]]
    user_id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ResponseSubmit(BaseModel):
    """Public survey submission"""
    campaign_id: Optional[UUID] = None
    score: Optional[int] = None
    feedback: Optional[str] = None
    source_id: Optional[UUID] = None
    situation_id: Optional[UUID] = None
    group_id: Optional[UUID] = None
    form_responses: Optional[Dict[str, Any]] = None


class SubmissionReceipt(BaseModel):
    """All a public submitter gets back."""
    id: UUID
    created_at: datetime


class NpsResponseOut(BaseModel):
    id: UUID
    campaign_id: UUID
    score: int
    feedback: Optional[str] = None
    source_id: Optional[UUID] = None
    situation_id: Optional[UUID] = None
    group_id: Optional[UUID] = None
    form_responses: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime

    class Config:
        from_attributes = True


class NpsCategories(BaseModel):
    promoters: int
    passives: int
    detractors: int
    total: int


class NpsPeriod(BaseModel):
    date: str
    nps: int


class CampaignStats(BaseModel):
    """Dashboard aggregates for one campaign"""
    campaign_id: UUID
    nps: int
    categories: NpsCategories
    by_score: Dict[int, int]
    over_time: List[NpsPeriod]
