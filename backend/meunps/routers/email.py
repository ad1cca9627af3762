"""
Email routes: SMTP test and campaign invitations.
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
import logging
import smtplib

from meunps.config import get_settings
from meunps.database import get_db
from meunps.models import User, AppConfig, Contact
from meunps.schemas import (
    EmailTestRequest,
    EmailTestResponse,
    CampaignEmailRequest,
    CampaignEmailResponse,
    EmailDeliveryResult,
    EmailDeliverySummary,
)
from meunps.auth import get_current_user
from meunps.authorization import get_owned_campaign
from meunps.services.email import (
    OutgoingEmail,
    SmtpCredentials,
    SmtpEmailService,
    TEST_EMAIL_SUBJECT,
    build_campaign_email_html,
    build_test_email_html,
    personalize_content,
)
from meunps.utils import extract_origin

router = APIRouter(prefix="/api/email", tags=["email"])
logger = logging.getLogger(__name__)


def build_email_service(smtp_document: dict) -> SmtpEmailService:
    settings = get_settings()
    return SmtpEmailService(
        SmtpCredentials.from_document(smtp_document),
        timeout=settings.smtp_timeout_seconds,
    )


def survey_url_for(request: Request, campaign_id) -> str:
    """Public survey link on the caller's frontend origin."""
    origin = extract_origin(request.headers.get("origin")) or get_settings().frontend_base_url.rstrip("/")
    return f"{origin}/survey/{campaign_id}"


@router.post("/test", response_model=EmailTestResponse)
def send_test_email(
    payload: EmailTestRequest,
    current_user: User = Depends(get_current_user),
):
    """Send a test message to the caller with the SMTP settings being edited."""
    smtp = payload.smtpConfig
    if smtp is None or not smtp.host or not smtp.port or not smtp.username or not smtp.password:
        raise HTTPException(status_code=400, detail="SMTP configuration is incomplete")

    service = build_email_service(smtp.model_dump())
    try:
        message_id = service.send(OutgoingEmail(
            to_email=current_user.email,
            to_name=current_user.name,
            subject=TEST_EMAIL_SUBJECT,
            html_body=build_test_email_html(current_user.name),
        ))
    except (smtplib.SMTPException, OSError) as exc:
        logger.error("Test email for user %s failed: %s", current_user.id, exc)
        raise HTTPException(status_code=500, detail=str(exc) or "Failed to send test email")

    return EmailTestResponse(message="Test email sent successfully", messageId=message_id)


@router.post("/campaign", response_model=CampaignEmailResponse)
def send_campaign_emails(
    payload: CampaignEmailRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Email a survey invitation to each selected contact.

    Failures are reported per contact; one bad address does not stop the batch.
    """
    if payload.campaignId is None or not payload.contactIds:
        raise HTTPException(status_code=400, detail="Campaign ID and contact IDs are required")

    config = db.query(AppConfig).filter(AppConfig.user_id == current_user.id).first()
    if config is None:
        raise HTTPException(status_code=400, detail="SMTP not configured")

    smtp_document = (config.integrations or {}).get("smtp") or {}
    if not smtp_document.get("enabled"):
        raise HTTPException(status_code=400, detail="SMTP not enabled")

    campaign = get_owned_campaign(db, payload.campaignId, current_user)

    contacts = (
        db.query(Contact)
        .filter(Contact.user_id == current_user.id, Contact.id.in_(payload.contactIds))
        .order_by(Contact.name)
        .all()
    )
    if not contacts:
        raise HTTPException(status_code=404, detail="No valid contacts found")

    service = build_email_service(smtp_document)
    if not service.is_configured():
        raise HTTPException(status_code=400, detail="SMTP configuration is incomplete")

    survey_url = survey_url_for(request, campaign.id)
    from_name = service.credentials.from_name

    results = []
    for contact in contacts:
        subject = personalize_content(payload.subject, contact, campaign.name, survey_url)
        message = personalize_content(payload.message, contact, campaign.name, survey_url)
        text_body = message
        if payload.includeLink:
            text_body += f"\n\nLink da pesquisa: {survey_url}"

        try:
            message_id = service.send(OutgoingEmail(
                to_email=contact.email,
                to_name=contact.name,
                subject=subject,
                html_body=build_campaign_email_html(
                    message, contact.name, survey_url, payload.includeLink, from_name,
                ),
                text_body=text_body,
            ))
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("Campaign email to %s failed: %s", contact.email, exc)
            results.append(EmailDeliveryResult(contact=contact.email, success=False, error=str(exc)))
            continue

        results.append(EmailDeliveryResult(contact=contact.email, success=True, messageId=message_id))

    successful = sum(1 for r in results if r.success)
    failed = len(results) - successful
    logger.info(
        "Campaign %s emails for user %s: %d sent, %d failed",
        campaign.id, current_user.id, successful, failed,
    )

    return CampaignEmailResponse(
        message=f"Emails enviados: {successful} sucessos, {failed} falhas",
        results=results,
        summary=EmailDeliverySummary(total=len(results), successful=successful, failed=failed),
    )
