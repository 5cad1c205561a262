# =============================================================================
# tests/test_delivery.py - Email and SMS Delivery Tests
# =============================================================================
# Tests for the SendGrid mailer and the Telnyx SMS client. The provider
# clients are mocked; nothing leaves the machine.
# =============================================================================

from unittest.mock import MagicMock, patch

import httpx
import pytest

from lib.mailer import DeliveryError, Mailer
from lib.sms import SmsClient, mask_phone


# =============================================================================
# Email
# =============================================================================

class TestMailer:

    @pytest.fixture
    def mailer(self):
        return Mailer(api_key="SG.test", from_email="compliance@parafort.test", from_name="ParaFort")

    def test_send(self, mailer):
        with patch("lib.mailer.SendGridAPIClient") as sendgrid:
            sendgrid.return_value.send.return_value = MagicMock(status_code=202)
            status = mailer.send("jane.owner@acme.test", "Upcoming: Annual Report", "<p>Hi</p>", "Hi")

        assert status == 202
        sendgrid.assert_called_once_with("SG.test")

    def test_not_configured(self):
        with pytest.raises(DeliveryError) as exc_info:
            Mailer(api_key="").send("jane.owner@acme.test", "Subject", "<p>Hi</p>")

        assert exc_info.value.code == "EMAIL_NOT_CONFIGURED"
        assert "SENDGRID_API_KEY" in exc_info.value.suggestion

    def test_invalid_recipient(self, mailer):
        with pytest.raises(DeliveryError) as exc_info:
            mailer.send("not-an-address", "Subject", "<p>Hi</p>")

        assert exc_info.value.code == "INVALID_RECIPIENT"

    def test_provider_error(self, mailer):
        with patch("lib.mailer.SendGridAPIClient") as sendgrid:
            sendgrid.return_value.send.side_effect = RuntimeError("HTTP Error 401: Unauthorized")
            with pytest.raises(DeliveryError) as exc_info:
                mailer.send("jane.owner@acme.test", "Subject", "<p>Hi</p>")

        assert exc_info.value.code == "DELIVERY_FAILED"

    def test_unexpected_status(self, mailer):
        with patch("lib.mailer.SendGridAPIClient") as sendgrid:
            sendgrid.return_value.send.return_value = MagicMock(status_code=500)
            with pytest.raises(DeliveryError) as exc_info:
                mailer.send("jane.owner@acme.test", "Subject", "<p>Hi</p>")

        assert exc_info.value.details["status_code"] == 500


# =============================================================================
# SMS
# =============================================================================

class TestSmsClient:

    @pytest.fixture
    def sms(self):
        return SmsClient(api_key="KEY-test", from_number="+15550001111", messaging_profile_id="profile-1")

    def test_send(self, sms):
        response = MagicMock()
        response.json.return_value = {"data": {"id": "msg-1", "to": [{"status": "queued"}]}}

        with patch("lib.sms.httpx.post", return_value=response) as post:
            data = sms.send("+15557654321", "Acme: Annual Report is due in 7 days")

        assert data["id"] == "msg-1"
        payload = post.call_args.kwargs["json"]
        assert payload == {
            "from": "+15550001111",
            "to": "+15557654321",
            "text": "Acme: Annual Report is due in 7 days",
            "messaging_profile_id": "profile-1",
        }
        assert post.call_args.kwargs["headers"]["Authorization"] == "Bearer KEY-test"

    def test_not_configured(self):
        client = SmsClient(api_key="", from_number="+15550001111")

        assert client.configured is False
        with pytest.raises(DeliveryError) as exc_info:
            client.send("+15557654321", "Hi")

        assert exc_info.value.code == "SMS_NOT_CONFIGURED"

    def test_http_error(self, sms):
        with patch("lib.sms.httpx.post", side_effect=httpx.ConnectError("connection refused")):
            with pytest.raises(DeliveryError) as exc_info:
                sms.send("+15557654321", "Hi")

        assert exc_info.value.details == {"to": "***4321"}

    def test_mask_phone(self):
        assert mask_phone("+15557654321") == "***4321"
        assert mask_phone("123") == "***"
