# =============================================================================
# lib/sms.py - Outbound SMS (Telnyx)
# =============================================================================
# Sends SMS notifications through the Telnyx Messaging REST API with httpx.
# SMS is optional: without TELNYX_API_KEY the channel is reported as
# not configured and scheduled SMS notifications fail after their retries.
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

import httpx

from app.config import settings
from lib.mailer import DeliveryError

logger = logging.getLogger(__name__)

TELNYX_MESSAGES_URL = "https://api.telnyx.com/v2/messages"


def mask_phone(phone: str) -> str:
    """Keep only the last four digits for logging."""
    return f"***{phone[-4:]}" if phone and len(phone) > 4 else "***"


class SmsClient:
    """Telnyx messaging client."""

    def __init__(
        self,
        api_key: str | None = None,
        from_number: str | None = None,
        messaging_profile_id: str | None = None,
        timeout: float = 10.0,
    ):
        self.api_key = settings.TELNYX_API_KEY if api_key is None else api_key
        self.from_number = from_number or settings.TELNYX_PHONE_NUMBER
        self.messaging_profile_id = messaging_profile_id or settings.TELNYX_MESSAGING_PROFILE_ID
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.from_number)

    def send(self, to: str, text: str) -> dict[str, Any]:
        """
        Send one SMS.

        Returns:
            The "data" object of the Telnyx response (message id, status)

        Raises:
            DeliveryError: Missing configuration or provider error
        """
        if not self.configured:
            raise DeliveryError(
                "SMS delivery is not configured",
                code="SMS_NOT_CONFIGURED",
                suggestion="Set TELNYX_API_KEY and TELNYX_PHONE_NUMBER in your .env file",
            )

        payload: dict[str, Any] = {"from": self.from_number, "to": to, "text": text}
        if self.messaging_profile_id:
            payload["messaging_profile_id"] = self.messaging_profile_id

        try:
            response = httpx.post(
                TELNYX_MESSAGES_URL,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Telnyx send to {mask_phone(to)} failed: {e}")
            raise DeliveryError(
                f"Telnyx request failed: {e}",
                suggestion="Check TELNYX_API_KEY and that the phone number is in E.164 format",
                details={"to": mask_phone(to)},
            )

        logger.info(f"SMS sent to {mask_phone(to)}")
        return response.json().get("data", {})
