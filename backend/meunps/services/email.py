import html
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from typing import Any, Mapping, Optional


logger = logging.getLogger(__name__)

PLACEHOLDERS = {
    "{{nome}}": "name",
    "{{email}}": "email",
    "{{telefone}}": "phone",
    "{{empresa}}": "company",
    "{{cargo}}": "position",
}


@dataclass
class SmtpCredentials:
    """Connection parameters for one user's SMTP server."""

    host: str
    port: int
    username: str
    password: str
    secure: bool = False
    from_name: str = ""
    from_email: str = ""

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "SmtpCredentials":
        """Build from the ``integrations.smtp`` document or a test payload."""
        return cls(
            host=document.get("host") or "",
            port=int(document.get("port") or 0),
            username=document.get("username") or "",
            password=document.get("password") or "",
            secure=bool(document.get("secure")),
            from_name=document.get("fromName") or "",
            from_email=document.get("fromEmail") or "",
        )


@dataclass
class OutgoingEmail:
    to_email: str
    subject: str
    html_body: str
    text_body: str = ""
    to_name: Optional[str] = None


class SmtpEmailService:
    """Sends mail through the user's own SMTP server."""

    def __init__(self, credentials: SmtpCredentials, timeout: float = 15.0) -> None:
        self.credentials = credentials
        self.timeout = timeout

    def is_configured(self) -> bool:
        c = self.credentials
        return bool(c.host and c.port and c.username and c.password)

    def _connect(self) -> smtplib.SMTP:
        c = self.credentials
        if c.secure:
            return smtplib.SMTP_SSL(c.host, c.port, timeout=self.timeout)
        client = smtplib.SMTP(c.host, c.port, timeout=self.timeout)
        client.ehlo()
        if client.has_extn("starttls"):
            client.starttls()
            client.ehlo()
        return client

    def send(self, email: OutgoingEmail) -> str:
        """
        Deliver one message and return its Message-ID.

        Raises:
            RuntimeError: When the service is not configured.
            smtplib.SMTPException, OSError: When delivery fails.
        """
        if not self.is_configured():
            raise RuntimeError("SMTP configuration is incomplete")

        c = self.credentials
        sender_address = c.from_email or c.username
        message_id = make_msgid(domain=sender_address.split("@")[-1] or None)

        message = EmailMessage()
        message["From"] = formataddr((c.from_name, sender_address))
        message["To"] = formataddr((email.to_name, email.to_email)) if email.to_name else email.to_email
        message["Subject"] = email.subject
        message["Message-ID"] = message_id
        message.set_content(email.text_body or email.subject)
        message.add_alternative(email.html_body, subtype="html")

        client = self._connect()
        try:
            client.login(c.username, c.password)
            client.send_message(message)
        finally:
            client.quit()

        logger.info("Email sent to %s via %s:%s", email.to_email, c.host, c.port)
        return message_id


def personalize_content(content: str, contact: Any, campaign_name: str, survey_url: str) -> str:
    """Replace the {{...}} placeholders with contact and campaign values."""
    result = content or ""
    for placeholder, attribute in PLACEHOLDERS.items():
        result = result.replace(placeholder, getattr(contact, attribute, None) or "")
    return (
        result
        .replace("{{campanha}}", campaign_name or "")
        .replace("{{link_pesquisa}}", survey_url)
    )


def build_campaign_email_html(
    message: str,
    contact_name: str,
    survey_url: str,
    include_link: bool,
    from_name: str,
) -> str:
    """Render the campaign email; every interpolated value is HTML-escaped."""
    message = html.escape(message or "")
    contact_name = html.escape(contact_name or "")
    survey_url = html.escape(survey_url or "", quote=True)
    from_name = html.escape(from_name or "")

    link_block = ""
    if include_link:
        link_block = f"""
      <div style="background-color: #00ac75; color: white; border-radius: 8px; padding: 20px; margin-bottom: 20px; text-align: center;">
        <h3 style="margin-top: 0; margin-bottom: 15px;">Responder Pesquisa NPS</h3>
        <p style="margin-bottom: 20px;">Clique no botão abaixo para acessar a pesquisa:</p>
        <a href="{survey_url}" style="display: inline-block; background-color: #073143; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; font-weight: bold;">
          Responder Pesquisa
        </a>
        <p style="margin-top: 15px; font-size: 12px; opacity: 0.9;">
          Ou copie e cole este link: {survey_url}
        </p>
      </div>"""

    return f"""<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; border: 1px solid #e0e0e0; border-radius: 8px;">
      <div style="text-align: center; margin-bottom: 20px;">
        <h1 style="color: #00ac75; margin-bottom: 5px;">Meu NPS</h1>
        <p style="color: #666; font-size: 14px;">Plataforma de Gestão de NPS</p>
      </div>

      <div style="background-color: #f9f9f9; border-radius: 8px; padding: 20px; margin-bottom: 20px;">
        <h2 style="color: #073143; margin-top: 0;">Olá {contact_name}!</h2>
        <div style="white-space: pre-line; line-height: 1.6; color: #333;">
          {message}
        </div>
      </div>
{link_block}
      <p style="color: #666; font-size: 12px; text-align: center; margin-top: 30px;">
        Este email foi enviado por {from_name} através da plataforma Meu NPS.<br>
        © 2025 Meu NPS. Todos os direitos reservados.
      </p>
    </div>"""


TEST_EMAIL_SUBJECT = "Teste de Configuração de Email - Meu NPS"


def build_test_email_html(user_name: str) -> str:
    user_name = html.escape(user_name or "")
    return f"""<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
      <h1 style="color: #073143;">Teste de Email Bem-Sucedido!</h1>
      <p>Olá {user_name},</p>
      <p>Este é um email de teste para confirmar que suas configurações de SMTP estão funcionando corretamente.</p>
      <p>Agora você pode enviar emails através da plataforma Meu NPS.</p>
      <hr>
      <p style="color: #666; font-size: 12px;">© 2025 Meu NPS. Todos os direitos reservados.</p>
    </div>"""
