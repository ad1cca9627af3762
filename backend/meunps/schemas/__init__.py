"""
Pydantic schemas organized by domain.
"""

from .common import DataResponse, MessageResponse, ErrorResponse

from .blobs import (
    JsonBlob,
    SurveyCustomization,
    Automation,
    Preferences,
    CompanyInfo,
    Integrations,
    SmtpSettings,
    BankAccount,
    AdminPermissions,
    FormField,
)

from .auth import (
    UserRegister,
    UserLogin,
    PasswordChange,
    AccountDeletion,
    TokenData,
    RegisteredUser,
    RegisterResponse,
    LoginUser,
    LoginResponse,
    UserResponse,
    CurrentUserResponse,
)

from .campaign import (
    CampaignCreate,
    CampaignUpdate,
    CampaignResponse,
    CampaignFormSave,
    CampaignFormResponse,
    ResponseSubmit,
    SubmissionReceipt,
    NpsResponseOut,
    NpsCategories,
    NpsPeriod,
    CampaignStats,
)

from .entity import EntityCreate, EntityUpdate, EntityResponse

from .contact import ContactCreate, ContactUpdate, ContactResponse

from .settings import (
    ProfileUpdate,
    ProfileResponse,
    AppConfigUpdate,
    AppConfigResponse,
    AffiliateUpdate,
    AffiliateResponse,
)

from .affiliate import (
    ReferralCreate,
    ReferralCreated,
    ReferralStatusUpdate,
    ReferralResponse,
    AdminReferralResponse,
)

from .admin import AdminUserSummary

from .messaging import (
    SmtpConfigPayload,
    EmailTestRequest,
    EmailTestResponse,
    CampaignEmailRequest,
    EmailDeliveryResult,
    EmailDeliverySummary,
    CampaignEmailResponse,
    WebhookProxyRequest,
    WebhookProxyResponse,
)
