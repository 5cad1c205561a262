# =============================================================================
# tests/test_reminders_policy.py - Reminder Window & Dedupe Tests
# =============================================================================
# Tests for core.compliance.reminders:
# - Which events get a reminder on a given day
# - Dedupe by interval and by the 24 hour gap
# - Notification titles, subjects and messages
# =============================================================================

from datetime import date, datetime, timedelta, timezone

import pytest

from core.compliance.reminders import (
    email_subject,
    format_due_date,
    notification_title,
    plural_days,
    reminder_window,
    render_notification_message,
    sent_recently,
    should_send,
)
from core.models.compliance import ComplianceEvent

TODAY = date(2025, 5, 2)
NOW = datetime(2025, 5, 2, 12, 0, tzinfo=timezone.utc)
INTERVALS = [30, 14, 7, 1]


@pytest.fixture
def event_for(make_event_row):
    def _event(**overrides) -> ComplianceEvent:
        return ComplianceEvent.from_db_row(make_event_row(**overrides))
    return _event


class TestShouldSend:
    """Reminder policy decisions."""

    def test_due_on_interval(self, event_for):
        decision = should_send(event_for(due_date="2025-06-01"), TODAY, NOW, INTERVALS)

        assert decision.send
        assert decision.interval == 30
        assert decision.reason == "due"

    def test_not_pending(self, event_for):
        decision = should_send(event_for(due_date="2025-06-01", status="completed"), TODAY, NOW, INTERVALS)

        assert not decision.send
        assert decision.reason == "not_pending"

    def test_overdue_events_get_no_reminder(self, event_for):
        decision = should_send(event_for(due_date="2025-05-03", status="overdue"), TODAY, NOW, INTERVALS)
        assert decision.reason == "not_pending"

    def test_outside_window(self, event_for):
        decision = should_send(event_for(due_date="2025-06-02"), TODAY, NOW, INTERVALS)

        assert not decision.send
        assert decision.interval is None
        assert decision.reason == "outside_window"

    def test_already_sent_for_interval(self, event_for):
        event = event_for(
            due_date="2025-06-01",
            last_reminder_interval=30,
            last_reminder_sent="2025-04-20T12:00:00+00:00",
        )
        decision = should_send(event, TODAY, NOW, INTERVALS)

        assert not decision.send
        assert decision.reason == "already_sent_for_interval"

    def test_sent_within_24_hours(self, event_for):
        event = event_for(
            due_date="2025-05-16",
            last_reminder_interval=30,
            last_reminder_sent=(NOW - timedelta(hours=20)).isoformat(),
        )
        decision = should_send(event, TODAY, NOW, INTERVALS)

        assert not decision.send
        assert decision.interval == 14
        assert decision.reason == "sent_recently"

    def test_next_interval_after_gap(self, event_for):
        event = event_for(
            due_date="2025-05-16",
            last_reminder_interval=30,
            last_reminder_sent=(NOW - timedelta(hours=25)).isoformat(),
        )
        decision = should_send(event, TODAY, NOW, INTERVALS)

        assert decision.send
        assert decision.interval == 14

    def test_custom_intervals(self, event_for):
        decision = should_send(event_for(due_date="2025-07-01"), TODAY, NOW, [60])
        assert decision.send
        assert decision.interval == 60

    def test_default_intervals(self, event_for):
        assert should_send(event_for(due_date="2025-05-09"), TODAY, NOW).interval == 7


class TestSentRecently:
    """24 hour gap between reminders."""

    def test_never_sent(self, event_for):
        assert not sent_recently(event_for(), NOW)

    def test_naive_timestamp_is_utc(self, event_for):
        event = event_for(last_reminder_sent="2025-05-02T10:00:00")
        assert sent_recently(event, NOW)

    def test_exactly_24_hours_is_not_recent(self, event_for):
        event = event_for(last_reminder_sent=(NOW - timedelta(hours=24)).isoformat())
        assert not sent_recently(event, NOW)

    def test_reminder_window(self):
        assert reminder_window(14, INTERVALS) == 14
        assert reminder_window(13, INTERVALS) is None


class TestTexts:
    """Titles, subjects and plain-text messages."""

    def test_format_due_date(self):
        assert format_due_date(date(2024, 1, 15)) == "Monday, January 15, 2024"

    def test_plural_days(self):
        assert plural_days(1) == "1 day"
        assert plural_days(14) == "14 days"

    @pytest.mark.parametrize("days, expected", [
        (0, "DUE TODAY: Annual Report"),
        (1, "Due Tomorrow: Annual Report"),
        (7, "Due in 7 days: Annual Report"),
        (30, "Upcoming: Annual Report (30 days)"),
    ])
    def test_notification_title(self, days, expected):
        assert notification_title("Annual Report", days) == expected

    @pytest.mark.parametrize("days, expected", [
        (1, "URGENT: Franchise Tax is due in 1 day"),
        (14, "Important: Franchise Tax is due in 14 days"),
        (30, "Upcoming: Franchise Tax is due in 30 days"),
    ])
    def test_email_subject(self, days, expected):
        assert email_subject("Franchise Tax", days) == expected

    def test_notification_message(self):
        message = render_notification_message("Acme", "Annual Report", date(2025, 6, 1), 1)
        assert message == "Acme: Annual Report is due tomorrow (2025-06-01)."

    def test_notification_message_with_description(self):
        message = render_notification_message(
            "Acme", "Annual Report", date(2025, 6, 1), 30, "File online."
        )
        assert message == "Acme: Annual Report is due in 30 days (2025-06-01). File online."
