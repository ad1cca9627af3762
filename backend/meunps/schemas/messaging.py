"""
Email and webhook request/response schemas.
"""
from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from uuid import UUID


class SmtpConfigPayload(BaseModel):
    host: Optional[str] = None
    port: Optional[int] = None
    secure: bool = False
    username: Optional[str] = None
    password: Optional[str] = None
    fromName: str = ""
    fromEmail: str = ""


class EmailTestRequest(BaseModel):
    smtpConfig: Optional[SmtpConfigPayload] = None


class EmailTestResponse(BaseModel):
    success: bool = True
    message: str
    messageId: Optional[str] = None


class CampaignEmailRequest(BaseModel):
    campaignId: Optional[UUID] = None
    contactIds: Optional[List[UUID]] = None
    subject: str = ""
    message: str = ""
    includeLink: bool = False


class EmailDeliveryResult(BaseModel):
    contact: str
    success: bool
    messageId: Optional[str] = None
    error: Optional[str] = None


class EmailDeliverySummary(BaseModel):
    total: int
    successful: int
    failed: int


class CampaignEmailResponse(BaseModel):
    success: bool = True
    message: str
    results: List[EmailDeliveryResult]
    summary: EmailDeliverySummary


class WebhookProxyRequest(BaseModel):
    url: Optional[str] = None
    headers: Optional[Dict[str, str]] = None
    payload: Any = None


class WebhookProxyResponse(BaseModel):
    success: bool
    status: int
    statusText: str
    data: Any = None
