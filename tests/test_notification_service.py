# =============================================================================
# tests/test_notification_service.py - Notification Queue Tests
# =============================================================================
# Tests for NotificationService:
# - Recipient resolution (owner email, business contact fallback)
# - Building the reminder schedule (dates x channels)
# - Queue processing with retries and the attempts limit
# - In-app notification ownership
#
# SupabaseClient, Mailer and SmsClient are patched; nothing leaves the
# process.
# =============================================================================

from datetime import date, datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from app.exceptions import NotificationNotFoundError
from core.models.business import BusinessEntity
from core.models.compliance import ComplianceEvent
from core.models.notification import NotificationChannel
from core.services.notification_service import NotificationService, Recipient
from lib.mailer import DeliveryError
from lib.supabase_client import SupabaseClientError

MODULE = "core.services.notification_service"


@pytest.fixture
def business(business_row):
    return BusinessEntity.from_db_row(business_row)


@pytest.fixture
def event(make_event_row):
    return ComplianceEvent.from_db_row(make_event_row(due_date="2025-06-01"))


def queue_row(**overrides):
    row = {
        "id": 100,
        "business_entity_id": 42,
        "compliance_calendar_id": 7,
        "notification_type": "email",
        "title": "Due in 7 days: Annual Report Filing",
        "message": "Acme Widgets LLC: Annual Report Filing is due in 7 days (2025-06-01).",
        "scheduled_date": "2025-05-25",
        "status": "pending",
        "delivery_attempts": 0,
        "recipient_email": "jane.owner@acme.test",
        "recipient_phone": None,
    }
    row.update(overrides)
    return row


# =============================================================================
# Recipients
# =============================================================================

class TestResolveRecipient:

    def test_owner_email_wins(self, business, user_row):
        with patch(f"{MODULE}.SupabaseClient.fetch_user", return_value=user_row):
            recipient = NotificationService.resolve_recipient(business)

        assert recipient.email == "jane.owner@acme.test"
        assert recipient.first_name == "Jane"

    def test_falls_back_to_contact_email(self, business):
        with patch(f"{MODULE}.SupabaseClient.fetch_user", return_value=None):
            recipient = NotificationService.resolve_recipient(business)

        assert recipient.email == "contact@acme.test"
        assert recipient.first_name is None

    def test_owner_without_email(self, business, user_row):
        with patch(f"{MODULE}.SupabaseClient.fetch_user", return_value={**user_row, "email": None}):
            recipient = NotificationService.resolve_recipient(business)

        assert recipient.email == "contact@acme.test"


# =============================================================================
# Scheduling
# =============================================================================

class TestBuildSchedule:

    def test_one_row_per_date_and_channel(self, event, business):
        rows = NotificationService.build_schedule(
            event,
            business,
            Recipient(email="jane.owner@acme.test"),
            channels=[NotificationChannel.EMAIL, NotificationChannel.DASHBOARD],
            reminder_days=[60, 7],
            today=date(2025, 4, 1),
        )

        assert len(rows) == 3
        assert [r["scheduled_date"] for r in rows] == ["2025-04-02", "2025-04-02", "2025-05-25"]
        assert [r["notification_type"] for r in rows] == ["email", "dashboard", "dashboard"]
        assert rows[0]["title"] == "Upcoming: Annual Report Filing (60 days)"
        assert rows[2]["title"] == "Due in 7 days: Annual Report Filing"
        assert all(r["status"] == "pending" for r in rows)
        assert all(r["compliance_calendar_id"] == 7 for r in rows)

    def test_past_reminder_dates_are_skipped(self, event, business):
        rows = NotificationService.build_schedule(
            event,
            business,
            Recipient(email="jane.owner@acme.test"),
            channels=[NotificationChannel.DASHBOARD],
            reminder_days=[30, 14, 7, 1],
            today=date(2025, 5, 20),
        )

        assert [r["scheduled_date"] for r in rows] == ["2025-05-25", "2025-05-31"]

    def test_daily_intervals_get_no_queued_email(self, event, business):
        rows = NotificationService.build_schedule(
            event,
            business,
            Recipient(email="jane.owner@acme.test"),
            channels=[NotificationChannel.EMAIL],
            reminder_days=[60, 30, 14, 7, 1],
            today=date(2025, 3, 1),
        )

        assert [r["scheduled_date"] for r in rows] == ["2025-04-02"]

    def test_sms_needs_phone(self, event, business):
        channels = [NotificationChannel.SMS, NotificationChannel.DASHBOARD]

        without_phone = NotificationService.build_schedule(
            event, business, Recipient(email="a@b.test"), channels, [7], date(2025, 5, 1)
        )
        with_phone = NotificationService.build_schedule(
            event, business, Recipient(email="a@b.test", phone="+15555550123"), channels, [7], date(2025, 5, 1)
        )

        assert [r["notification_type"] for r in without_phone] == ["dashboard"]
        assert [r["notification_type"] for r in with_phone] == ["sms", "dashboard"]
        assert with_phone[0]["recipient_phone"] == "+15555550123"

    def test_schedule_for_event_inserts_rows(self, event, business):
        inserted = [queue_row(id=2, notification_type="dashboard")]

        with patch(f"{MODULE}.SupabaseClient.insert_scheduled_notifications", return_value=inserted) as insert:
            notifications = NotificationService.schedule_for_event(
                event,
                business,
                reminder_days=[7],
                today=date(2025, 5, 1),
                recipient=Recipient(email="jane.owner@acme.test"),
            )

        assert [r["notification_type"] for r in insert.call_args.args[0]] == ["dashboard"]
        assert [n.id for n in notifications] == [2]


# =============================================================================
# Queue Processing
# =============================================================================

class TestProcessPending:

    NOW = datetime(2025, 5, 25, 13, 0, tzinfo=timezone.utc)

    def test_sends_email_and_marks_sent(self):
        mailer = MagicMock()

        with patch(f"{MODULE}.SupabaseClient.fetch_due_notifications", return_value=[queue_row()]) as fetch, \
             patch(f"{MODULE}.SupabaseClient.update_scheduled_notification") as update, \
             patch(f"{MODULE}.Mailer", return_value=mailer):
            stats = NotificationService.process_pending(now=self.NOW)

        fetch.assert_called_once_with(date(2025, 5, 25))
        assert stats == {"processed": 1, "sent": 1, "failed": 0, "retrying": 0, "errors": 0}
        assert mailer.send.call_args.args[0] == "jane.owner@acme.test"
        update.assert_called_once_with(100, {
            "status": "sent",
            "sent_date": self.NOW.isoformat(),
            "delivery_attempts": 1,
        })

    def test_dashboard_needs_no_delivery(self):
        with patch(f"{MODULE}.SupabaseClient.fetch_due_notifications",
                   return_value=[queue_row(notification_type="dashboard")]), \
             patch(f"{MODULE}.SupabaseClient.update_scheduled_notification") as update, \
             patch(f"{MODULE}.Mailer") as mailer_cls:
            stats = NotificationService.process_pending(now=self.NOW)

        assert stats["sent"] == 1
        mailer_cls.assert_not_called()
        assert update.call_args.args[1]["status"] == "sent"

    def test_failure_is_retried(self):
        mailer = MagicMock()
        mailer.send.side_effect = DeliveryError("SendGrid returned status 500")

        with patch(f"{MODULE}.SupabaseClient.fetch_due_notifications", return_value=[queue_row()]), \
             patch(f"{MODULE}.SupabaseClient.update_scheduled_notification") as update, \
             patch(f"{MODULE}.Mailer", return_value=mailer):
            stats = NotificationService.process_pending(now=self.NOW)

        assert stats == {"processed": 1, "sent": 0, "failed": 0, "retrying": 1, "errors": 0}
        update.assert_called_once_with(100, {"delivery_attempts": 1, "status": "pending"})

    def test_gives_up_after_max_attempts(self):
        mailer = MagicMock()
        mailer.send.side_effect = DeliveryError("SendGrid returned status 500")

        with patch(f"{MODULE}.SupabaseClient.fetch_due_notifications",
                   return_value=[queue_row(delivery_attempts=2)]), \
             patch(f"{MODULE}.SupabaseClient.update_scheduled_notification") as update, \
             patch(f"{MODULE}.Mailer", return_value=mailer):
            stats = NotificationService.process_pending(now=self.NOW)

        assert stats["failed"] == 1
        update.assert_called_once_with(100, {"delivery_attempts": 3, "status": "failed"})

    def test_missing_recipient_counts_as_failure(self):
        with patch(f"{MODULE}.SupabaseClient.fetch_due_notifications",
                   return_value=[queue_row(recipient_email=None)]), \
             patch(f"{MODULE}.SupabaseClient.update_scheduled_notification") as update, \
             patch(f"{MODULE}.Mailer") as mailer_cls:
            stats = NotificationService.process_pending(now=self.NOW)

        assert stats["retrying"] == 1
        mailer_cls.assert_not_called()
        assert update.call_args.args[1]["delivery_attempts"] == 1

    def test_sms_delivery(self):
        sms = MagicMock()

        with patch(f"{MODULE}.SupabaseClient.fetch_due_notifications",
                   return_value=[queue_row(notification_type="sms", recipient_phone="+15555550123")]), \
             patch(f"{MODULE}.SupabaseClient.update_scheduled_notification"), \
             patch(f"{MODULE}.SmsClient", return_value=sms):
            stats = NotificationService.process_pending(now=self.NOW)

        assert stats["sent"] == 1
        assert sms.send.call_args.args[0] == "+15555550123"

    def test_database_error_does_not_stop_the_batch(self):
        rows = [
            queue_row(id=100, notification_type="dashboard"),
            queue_row(id=101, notification_type="dashboard"),
        ]
        failing = SupabaseClientError("connection reset")

        with patch(f"{MODULE}.SupabaseClient.fetch_due_notifications", return_value=rows), \
             patch(f"{MODULE}.SupabaseClient.update_scheduled_notification",
                   side_effect=[failing, failing, None]) as update:
            stats = NotificationService.process_pending(now=self.NOW)

        assert stats == {"processed": 2, "sent": 1, "failed": 0, "retrying": 0, "errors": 1}
        assert [c.args[0] for c in update.call_args_list] == [100, 100, 101]

    def test_marking_sent_is_retried_once(self):
        mailer = MagicMock()

        with patch(f"{MODULE}.SupabaseClient.fetch_due_notifications", return_value=[queue_row()]), \
             patch(f"{MODULE}.SupabaseClient.update_scheduled_notification",
                   side_effect=[SupabaseClientError("connection reset"), None]) as update, \
             patch(f"{MODULE}.Mailer", return_value=mailer):
            stats = NotificationService.process_pending(now=self.NOW)

        assert stats["sent"] == 1
        assert stats["errors"] == 0
        mailer.send.assert_called_once()
        assert update.call_count == 2
        assert update.call_args.args[1]["status"] == "sent"


# =============================================================================
# Dashboard & In-App
# =============================================================================

class TestDashboardAndInApp:

    def test_dashboard_notifications_exclude_future(self):
        rows = [
            queue_row(id=1, notification_type="dashboard", scheduled_date="2025-05-25"),
            queue_row(id=2, notification_type="dashboard", scheduled_date="2025-05-31"),
        ]

        with patch(f"{MODULE}.SupabaseClient.fetch_scheduled_notifications", return_value=rows) as fetch:
            notifications = NotificationService.get_dashboard_notifications(42, today=date(2025, 5, 26))

        assert [n.id for n in notifications] == [1]
        assert fetch.call_args.kwargs["since"] == date(2025, 4, 26)

    def test_list_counts_unread(self, owner_id):
        rows = [
            {"id": 1, "user_id": owner_id, "type": "compliance_reminder", "title": "A", "message": "a", "is_read": False},
            {"id": 2, "user_id": owner_id, "type": "compliance_reminder", "title": "B", "message": "b", "is_read": True},
        ]

        with patch(f"{MODULE}.SupabaseClient.fetch_in_app_notifications", return_value=rows):
            result = NotificationService.list_in_app(owner_id)

        assert len(result.notifications) == 2
        assert result.unread_count == 1

    def test_mark_read_other_users_notification(self, owner_id):
        row = {"id": 1, "user_id": "someone-else", "type": "t", "title": "A", "message": "a"}

        with patch(f"{MODULE}.SupabaseClient.fetch_in_app_notification", return_value=row), \
             patch(f"{MODULE}.SupabaseClient.mark_in_app_notification_read") as mark:
            with pytest.raises(NotificationNotFoundError):
                NotificationService.mark_read(1, owner_id)

        mark.assert_not_called()

    def test_mark_read(self, owner_id):
        row = {"id": 1, "user_id": owner_id, "type": "t", "title": "A", "message": "a", "is_read": False}

        with patch(f"{MODULE}.SupabaseClient.fetch_in_app_notification", return_value=row), \
             patch(f"{MODULE}.SupabaseClient.mark_in_app_notification_read", return_value={**row, "is_read": True}):
            notification = NotificationService.mark_read(1, owner_id)

        assert notification.is_read
