from .affiliate import (
    compute_affiliate_totals,
    delete_user_and_refresh_referrers,
    recalculate_affiliate_stats,
)
from .email import (
    OutgoingEmail,
    SmtpCredentials,
    SmtpEmailService,
    build_campaign_email_html,
    build_test_email_html,
    personalize_content,
)
from .nps import (
    calculate_nps,
    categorize_responses,
    nps_over_time,
    responses_by_score,
    responses_by_source,
)
from .webhook_proxy import (
    WebhookProxy,
    WebhookResult,
    WebhookTimeoutError,
    WebhookTransportError,
    is_valid_webhook_url,
)

__all__ = [
    "compute_affiliate_totals",
    "delete_user_and_refresh_referrers",
    "recalculate_affiliate_stats",
    "OutgoingEmail",
    "SmtpCredentials",
    "SmtpEmailService",
    "build_campaign_email_html",
    "build_test_email_html",
    "personalize_content",
    "calculate_nps",
    "categorize_responses",
    "nps_over_time",
    "responses_by_score",
    "responses_by_source",
    "WebhookProxy",
    "WebhookResult",
    "WebhookTimeoutError",
    "WebhookTransportError",
    "is_valid_webhook_url",
]
