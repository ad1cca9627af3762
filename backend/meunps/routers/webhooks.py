"""
Webhook relay used by campaign automations.
"""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
import logging

from meunps.config import get_settings
from meunps.models import User
from meunps.schemas import WebhookProxyRequest, WebhookProxyResponse
from meunps.auth import get_current_user
from meunps.services.webhook_proxy import (
    WebhookProxy,
    WebhookTimeoutError,
    WebhookTransportError,
    is_valid_webhook_url,
)

router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])
logger = logging.getLogger(__name__)


def get_webhook_proxy() -> WebhookProxy:
    return WebhookProxy(timeout_seconds=get_settings().webhook_timeout_seconds)


@router.post("/proxy", response_model=WebhookProxyResponse)
async def proxy_webhook(
    payload: WebhookProxyRequest,
    current_user: User = Depends(get_current_user),
    proxy: WebhookProxy = Depends(get_webhook_proxy),
):
    """
    Forward a JSON payload to the automation's webhook URL.

    Answers 200 when the target returned 2xx and the target's own status
    otherwise, with its body in ``data`` either way.
    """
    if not payload.url:
        raise HTTPException(status_code=400, detail="Webhook URL is required")
    if not is_valid_webhook_url(payload.url):
        raise HTTPException(status_code=400, detail="Invalid webhook URL format")

    try:
        result = await proxy.forward(payload.url, payload.headers or {}, payload.payload)
    except (WebhookTimeoutError, WebhookTransportError) as exc:
        raise HTTPException(status_code=408, detail=str(exc))

    body = WebhookProxyResponse(
        success=result.ok,
        status=result.status_code,
        statusText=result.reason_phrase,
        data=result.data,
    )
    if result.ok:
        return body

    logger.info("Webhook for user %s answered %s", current_user.id, result.status_code)
    return JSONResponse(status_code=result.status_code, content=jsonable_encoder(body))
