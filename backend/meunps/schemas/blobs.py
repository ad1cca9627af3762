"""
Typed shapes for the JSON columns.

Each model accepts unknown keys so the stored document survives a round trip
unchanged. ``default_*`` helpers return the document a fresh row is seeded with.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Literal, Optional


class JsonBlob(BaseModel):
    """Base for JSON column documents."""
    model_config = ConfigDict(extra="allow")

    def to_document(self) -> Dict[str, Any]:
        """Only what was explicitly provided, unknown keys included."""
        return self.model_dump(exclude_unset=True)


class SurveyCustomization(JsonBlob):
    backgroundType: Literal["color", "image"] = "color"
    backgroundColor: Optional[str] = "#f8fafc"
    backgroundImage: Optional[str] = None
    logoImage: Optional[str] = None
    primaryColor: Optional[str] = "#073143"
    textColor: Optional[str] = "#1f2937"
    cardBackgroundColor: Optional[str] = None


class Automation(JsonBlob):
    enabled: bool = False
    action: Literal["webhook_return", "webhook_redirect", "redirect_only", "return_only"] = "return_only"
    webhookUrl: Optional[str] = None
    redirectUrl: Optional[str] = None
    webhookHeaders: Optional[Dict[str, str]] = None
    webhookPayload: Optional[str] = None
    successMessage: Optional[str] = "Obrigado pelo seu feedback!"
    errorMessage: Optional[str] = "Ocorreu um erro. Tente novamente."


class EmailNotifications(JsonBlob):
    newResponses: bool = True
    weeklyReports: bool = True
    productUpdates: bool = False


class Preferences(JsonBlob):
    language: str = "pt-BR"
    theme: str = "light"
    emailNotifications: EmailNotifications = Field(default_factory=EmailNotifications)


class CompanyInfo(JsonBlob):
    name: str = ""
    document: str = ""
    address: str = ""
    email: str = ""
    phone: str = ""


class SmtpSettings(JsonBlob):
    enabled: bool = False
    host: str = ""
    port: int = 587
    secure: bool = False
    username: str = ""
    password: str = ""
    fromName: str = ""
    fromEmail: str = ""


class ZenviaEmailSettings(JsonBlob):
    enabled: bool = False
    apiKey: str = ""
    fromEmail: str = ""
    fromName: str = ""


class ZenviaChannelSettings(JsonBlob):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    enabled: bool = False
    apiKey: str = ""
    from_: str = Field(default="", alias="from")


class ZenviaSettings(JsonBlob):
    email: ZenviaEmailSettings = Field(default_factory=ZenviaEmailSettings)
    sms: ZenviaChannelSettings = Field(default_factory=ZenviaChannelSettings)
    whatsapp: ZenviaChannelSettings = Field(default_factory=ZenviaChannelSettings)


class Integrations(JsonBlob):
    smtp: SmtpSettings = Field(default_factory=SmtpSettings)
    zenvia: ZenviaSettings = Field(default_factory=ZenviaSettings)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True, by_alias=True)


class BankAccount(JsonBlob):
    type: str = ""
    bank: str = ""
    agency: str = ""
    account: str = ""
    pixKey: str = ""
    pixType: str = ""


class AdminPermissions(JsonBlob):
    view_users: bool = True
    view_subscriptions: bool = True


class FormField(JsonBlob):
    id: str
    type: Literal["nps", "text", "select", "radio"]
    label: str
    required: bool = False
    order: int = 0
    options: Optional[List[str]] = None


def default_survey_customization() -> Dict[str, Any]:
    return {
        "backgroundType": "color",
        "backgroundColor": "#f8fafc",
        "primaryColor": "#073143",
        "textColor": "#1f2937",
    }


def default_automation() -> Dict[str, Any]:
    return {
        "enabled": False,
        "action": "return_only",
        "successMessage": "Obrigado pelo seu feedback!",
        "errorMessage": "Ocorreu um erro. Tente novamente.",
    }


def default_preferences() -> Dict[str, Any]:
    return {
        "language": "pt-BR",
        "theme": "light",
        "emailNotifications": {
            "newResponses": True,
            "weeklyReports": True,
            "productUpdates": False,
        },
    }


def default_company() -> Dict[str, Any]:
    return CompanyInfo().model_dump()


def default_integrations() -> Dict[str, Any]:
    return Integrations().model_dump(by_alias=True)


def default_bank_account() -> Dict[str, Any]:
    return BankAccount().model_dump()


def default_permissions() -> Dict[str, Any]:
    return AdminPermissions().model_dump()


def default_form_fields() -> List[Dict[str, Any]]:
    """Fields served for a campaign that has no saved form."""
    return [
        {
            "id": "nps-field",
            "type": "nps",
            "label": "O quanto você recomendaria nosso serviço para um amigo ou colega?",
            "required": True,
            "order": 0,
        },
        {
            "id": "feedback-field",
            "type": "text",
            "label": "Por favor, compartilhe seu feedback",
            "required": False,
            "order": 1,
        },
    ]
