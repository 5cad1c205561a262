# =============================================================================
# lib/mailer.py - Outbound Email (SendGrid)
# =============================================================================
# Thin wrapper around the SendGrid Web API used for compliance reminders,
# scheduled email notifications and urgent alerts.
#
# Usage:
#   from lib.mailer import Mailer
#   Mailer().send("owner@acme.test", "Subject", "<p>Hi</p>", "Hi")
# =============================================================================

from __future__ import annotations

import logging

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Content, Email, Mail, To

from app.config import settings
from lib.utils import ApplicationError, mask_email

logger = logging.getLogger(__name__)


class DeliveryError(ApplicationError):
    """Raised when an email or SMS could not be handed to the provider."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("code", "DELIVERY_FAILED")
        super().__init__(message, **kwargs)


class Mailer:
    """
    Sends email through SendGrid.

    Configuration defaults to settings (SENDGRID_API_KEY, MAIL_FROM,
    MAIL_FROM_NAME); pass values explicitly in tests.
    """

    def __init__(
        self,
        api_key: str | None = None,
        from_email: str | None = None,
        from_name: str | None = None,
    ):
        self.api_key = settings.SENDGRID_API_KEY if api_key is None else api_key
        self.from_email = from_email or settings.MAIL_FROM
        self.from_name = from_name or settings.MAIL_FROM_NAME

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def send(self, to: str, subject: str, html: str, text: str | None = None) -> int:
        """
        Send one email.

        Args:
            to: Recipient address
            subject: Subject line
            html: HTML body
            text: Plain-text alternative (recommended)

        Returns:
            HTTP status code returned by SendGrid (200 or 202)

        Raises:
            DeliveryError: Missing configuration, provider error or non-2xx
        """
        if not self.configured:
            raise DeliveryError(
                "Email delivery is not configured",
                code="EMAIL_NOT_CONFIGURED",
                suggestion="Set SENDGRID_API_KEY in your .env file",
            )
        if not to or "@" not in to:
            raise DeliveryError(
                f"Invalid recipient address: {to!r}",
                code="INVALID_RECIPIENT",
                suggestion="Add a contact email to the business or its owner",
            )

        message = Mail(
            from_email=Email(self.from_email, self.from_name),
            to_emails=To(to),
            subject=subject,
        )
        if text:
            message.add_content(Content("text/plain", text))
        message.add_content(Content("text/html", html))

        try:
            response = SendGridAPIClient(self.api_key).send(message)
        except Exception as e:
            logger.error(f"SendGrid send to {mask_email(to)} failed: {e}")
            raise DeliveryError(
                f"SendGrid request failed: {e}",
                suggestion="Check SENDGRID_API_KEY and that MAIL_FROM is a verified sender",
                details={"to": mask_email(to)},
            )

        if response.status_code not in (200, 202):
            raise DeliveryError(
                f"SendGrid returned status {response.status_code}",
                details={"to": mask_email(to), "status_code": response.status_code},
            )

        logger.info(f"Email sent to {mask_email(to)}: {subject}")
        return response.status_code
