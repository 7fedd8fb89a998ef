"""Email service for sending transactional emails.

Supports two providers:
- console: Logs emails (development default)
- smtp: Standard SMTP delivery (Gmail by default)

The only message the platform sends is the welcome email. Every send is
bounded by ``EMAIL_SEND_TIMEOUT_SECONDS`` and reports its outcome as a
``DeliveryResult`` instead of raising.
"""

import html
import re
import smtplib
import socket
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Union

from email_validator import EmailNotValidError, validate_email
from loguru import logger

from models.config import settings
from models.exceptions import EmailDeliveryException

WELCOME_SUBJECT = "Welcome to Global Study Share"

WELCOME_HTML = """
      <h3>Hi {name},</h3>
      <p>Thank you for registering on our platform!</p>
      <p>We're excited to have you with us.</p>
    """

WELCOME_TEXT = """Hi {name},

Thank you for registering on our platform!
We're excited to have you with us.
"""


@dataclass(frozen=True)
class Sent:
    """The transport accepted the message."""

    to_address: str


@dataclass(frozen=True)
class Failed:
    """The message was not handed off."""

    to_address: str
    reason: str


DeliveryResult = Union[Sent, Failed]


class EmailProvider(ABC):
    """Abstract base class for email providers."""

    @abstractmethod
    def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> None:
        """
        Send an email.

        Raises:
            EmailDeliveryException: With a short reason when delivery fails.
        """


class SMTPProvider(EmailProvider):
    """SMTP email provider."""

    def __init__(self) -> None:
        """Initialize SMTP provider with settings."""
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.user = settings.SMTP_USER
        self.password = settings.SMTP_PASSWORD
        self.from_email = settings.sender_address
        self.from_name = settings.SMTP_FROM_NAME
        self.use_tls = settings.SMTP_USE_TLS
        self.use_ssl = settings.SMTP_USE_SSL
        self.timeout = settings.EMAIL_SEND_TIMEOUT_SECONDS

    def _connect(self) -> smtplib.SMTP:
        if self.use_ssl:
            # Implicit SSL (port 465)
            return smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        if self.use_tls:
            # STARTTLS (port 587)
            try:
                server.starttls()
            except Exception:
                server.close()
                raise
        return server

    def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> None:
        """Send email via SMTP.

        The socket timeout bounds connect and every SMTP command, so a slow
        provider cannot hold a dispatcher worker indefinitely.
        """
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = formataddr((self.from_name, self.from_email))
        msg["To"] = to_email

        msg.attach(MIMEText(text_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))

        logger.debug(
            f"SMTP: Connecting to {self.host}:{self.port} "
            f"(SSL={self.use_ssl}, TLS={self.use_tls})"
        )

        try:
            server = self._connect()
            try:
                if self.user and self.password:
                    server.login(self.user, self.password)
                server.sendmail(self.from_email, [to_email], msg.as_string())
            finally:
                try:
                    server.quit()
                except (smtplib.SMTPException, OSError):
                    server.close()
        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"SMTP: Authentication failed - {e.smtp_code}: {e.smtp_error!r}")
            raise EmailDeliveryException("authentication failed") from e
        except smtplib.SMTPRecipientsRefused as e:
            logger.error(f"SMTP: Recipients refused - {list(e.recipients)}")
            raise EmailDeliveryException("recipient refused") from e
        except smtplib.SMTPSenderRefused as e:
            logger.error(f"SMTP: Sender refused - {e.smtp_code}: {e.smtp_error!r}")
            raise EmailDeliveryException("sender refused") from e
        except (socket.timeout, TimeoutError) as e:
            logger.error(f"SMTP: Timed out after {self.timeout}s talking to {self.host}")
            raise EmailDeliveryException("timeout") from e
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP: Transport error sending to {to_email}: {e!r}")
            raise EmailDeliveryException(f"transport error: {e}") from e

        logger.info(f"Email sent successfully to {to_email}")


class ConsoleProvider(EmailProvider):
    """Console email provider for development/testing."""

    def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> None:
        """Log email to console."""
        clean_html = re.sub(r"<[^>]+>", "", html_body)[:500]
        logger.info(
            f"\n{'=' * 60}\n"
            f"EMAIL (Console Provider - Development Mode)\n"
            f"{'=' * 60}\n"
            f"To: {to_email}\n"
            f"Subject: {subject}\n"
            f"{'-' * 60}\n"
            f"PLAIN TEXT:\n{text_body}\n"
            f"{'-' * 60}\n"
            f"HTML (preview):\n{clean_html}\n"
            f"{'=' * 60}\n"
        )


def get_email_provider() -> EmailProvider:
    """Get the configured email provider."""
    provider_name = settings.EMAIL_PROVIDER.lower()

    if provider_name == "smtp":
        return SMTPProvider()
    elif provider_name == "console":
        return ConsoleProvider()
    else:
        logger.warning(f"Unknown email provider '{provider_name}', using console")
        return ConsoleProvider()


class EmailService:
    """High-level email service with the welcome template."""

    @staticmethod
    def render_welcome(display_name: str) -> tuple[str, str, str]:
        """
        Render the welcome email.

        Args:
            display_name: Recipient's display name (HTML-escaped in the HTML part)

        Returns:
            Tuple of (subject, html_body, text_body)
        """
        html_body = WELCOME_HTML.format(name=html.escape(display_name))
        text_body = WELCOME_TEXT.format(name=display_name)
        return WELCOME_SUBJECT, html_body, text_body

    @staticmethod
    def send_welcome(
        to_address: str,
        display_name: str,
        provider: EmailProvider | None = None,
    ) -> DeliveryResult:
        """
        Send the welcome email to a newly registered user.

        Never raises: every failure is returned as ``Failed`` with one of
        "invalid recipient address", "authentication failed",
        "recipient refused", "sender refused", "timeout" or
        "transport error: ...".

        Args:
            to_address: Recipient email
            display_name: Name used in the greeting
            provider: Transport to use (configured provider when None)
        """
        try:
            validate_email(to_address, check_deliverability=False)
        except EmailNotValidError:
            logger.warning(f"Welcome email not sent: invalid recipient {to_address!r}")
            return Failed(to_address, "invalid recipient address")

        subject, html_body, text_body = EmailService.render_welcome(display_name)
        transport = provider or get_email_provider()

        try:
            transport.send(to_address, subject, html_body, text_body)
        except EmailDeliveryException as e:
            return Failed(to_address, e.reason)

        return Sent(to_address)
