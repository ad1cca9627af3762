"""
Server-side relay for campaign automation webhooks.

The browser cannot call arbitrary third-party endpoints (CORS), so the survey
page posts the payload here and the service forwards it.
"""
import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import httpx

logger = logging.getLogger(__name__)

USER_AGENT = "MeuNPS-Webhook-Proxy/1.0"


class WebhookTimeoutError(Exception):
    """The target did not answer within the timeout."""


class WebhookTransportError(Exception):
    """Connection-level failure talking to the target."""


@dataclass
class WebhookResult:
    ok: bool
    status_code: int
    reason_phrase: str
    data: Any


def is_valid_webhook_url(url: Optional[str]) -> bool:
    if not url:
        return False
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _parse_body(response: httpx.Response) -> Any:
    text = response.text
    try:
        return json.loads(text)
    except ValueError:
        return {"message": text}


class WebhookProxy:
    """POSTs JSON payloads to a user-configured URL."""

    def __init__(
        self,
        timeout_seconds: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    async def forward(self, url: str, headers: Dict[str, str], payload: Any) -> WebhookResult:
        """
        Send ``payload`` to ``url``.

        Raises:
            WebhookTimeoutError: The request exceeded the timeout.
            WebhookTransportError: Any other transport failure.
        """
        request_headers = {
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
            **(headers or {}),
        }

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                transport=self.transport,
            ) as client:
                # Per-phase httpx timeouts do not bound a slowly trickling body
                response = await asyncio.wait_for(
                    client.post(
                        url,
                        content=json.dumps(payload),
                        headers=request_headers,
                    ),
                    timeout=self.timeout_seconds,
                )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            logger.warning("Webhook to %s timed out after %ss", url, self.timeout_seconds)
            raise WebhookTimeoutError(
                f"Webhook request timed out ({int(self.timeout_seconds)}s)"
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("Webhook to %s failed: %s", url, exc)
            raise WebhookTransportError(str(exc) or "Unknown error occurred") from exc

        logger.info("Webhook to %s answered %s", url, response.status_code)
        return WebhookResult(
            ok=response.is_success,
            status_code=response.status_code,
            reason_phrase=response.reason_phrase,
            data=_parse_body(response),
        )
