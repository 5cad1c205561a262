# =============================================================================
# tests/test_models.py - Pydantic Model Tests
# =============================================================================
# Unit tests for the Pydantic models to ensure:
# - Valid data is accepted and parsed correctly
# - Invalid data raises ValidationError
# - Supabase rows (ISO strings, JSON text columns) are normalised
# - Default values work as expected
#
# Run with: pytest tests/test_models.py -v
# =============================================================================

from datetime import date, datetime

import pytest
from pydantic import ValidationError

from core.models import (
    STATUS_TRANSITIONS,
    BusinessCreate,
    BusinessEntity,
    ComplianceEvent,
    ComplianceEventCreate,
    ComplianceEventUpdate,
    ComplianceNotification,
    EntityType,
    EventStatus,
    Frequency,
    InAppNotification,
    NotificationChannel,
    NotificationStatus,
    TimeRange,
)


# =============================================================================
# Business Model Tests
# =============================================================================

class TestBusinessCreate:
    """Tests for BusinessCreate model."""

    def test_valid_business(self):
        business = BusinessCreate(legal_name="Acme LLC", entity_type="LLC", state="de")

        assert business.entity_type == EntityType.LLC
        assert business.state == "DE"  # Upper-cased
        assert business.formation_date is None

    def test_invalid_state(self):
        with pytest.raises(ValidationError):
            BusinessCreate(legal_name="Acme LLC", entity_type="LLC", state="D1")

    def test_state_must_be_two_letters(self):
        with pytest.raises(ValidationError):
            BusinessCreate(legal_name="Acme LLC", entity_type="LLC", state="Delaware")

    def test_unknown_entity_type(self):
        with pytest.raises(ValidationError):
            BusinessCreate(legal_name="Acme", entity_type="Partnership", state="DE")


class TestBusinessEntity:
    """Tests for BusinessEntity rows."""

    def test_from_db_row(self, business_row):
        business = BusinessEntity.from_db_row(business_row)

        assert business.filed_date == date(2024, 3, 10)  # Timestamp -> date
        assert business.legal_name == "Acme Widgets LLC"
        assert business.entity_type_enum == EntityType.LLC

    def test_legal_name_fallback(self, business_row):
        business = BusinessEntity.from_db_row({**business_row, "name": None})
        assert business.legal_name == "your business"

    def test_unknown_entity_type_enum(self, business_row):
        business = BusinessEntity.from_db_row({**business_row, "entity_type": "Non-Profit"})
        assert business.entity_type_enum is None

    def test_is_corporation(self):
        assert EntityType.S_CORP.is_corporation
        assert not EntityType.LLC.is_corporation


# =============================================================================
# Compliance Event Model Tests
# =============================================================================

class TestComplianceEvent:
    """Tests for ComplianceEvent rows."""

    def test_from_db_row(self, make_event_row):
        event = ComplianceEvent.from_db_row(make_event_row())

        assert event.due_date == date(2025, 6, 1)
        assert event.reminder_dates[0] == date(2025, 5, 2)
        assert len(event.reminder_dates) == 4
        assert event.recurring_interval == Frequency.ANNUAL
        assert event.status == EventStatus.PENDING
        assert isinstance(event.created_at, datetime)
        assert event.is_open

    def test_reminder_dates_as_list(self, make_event_row):
        event = ComplianceEvent.from_db_row(make_event_row(reminder_dates=["2025-05-25"]))
        assert event.reminder_dates == [date(2025, 5, 25)]

    def test_null_columns(self, make_event_row):
        event = ComplianceEvent.from_db_row(make_event_row(
            reminder_dates=None,
            reminders_sent=None,
            recurring_interval="",
        ))

        assert event.reminder_dates == []
        assert event.reminders_sent == 0
        assert event.recurring_interval is None

    def test_legacy_yearly_interval(self, make_event_row):
        event = ComplianceEvent.from_db_row(make_event_row(recurring_interval="yearly"))
        assert event.recurring_interval == Frequency.ANNUAL

    def test_completed_is_not_open(self, make_event_row):
        event = ComplianceEvent.from_db_row(make_event_row(status="completed", completed_date="2025-05-20"))

        assert not event.is_open
        assert event.completed_date == date(2025, 5, 20)


class TestComplianceEventCreate:
    """Tests for ComplianceEventCreate input."""

    def test_defaults(self):
        payload = ComplianceEventCreate(business_id=42, event_title="City license", due_date="2025-07-01")

        assert payload.event_type == "custom"
        assert payload.recurring_interval == Frequency.ONE_TIME
        assert payload.reminder_days is None

    def test_negative_reminder_days(self):
        with pytest.raises(ValidationError):
            ComplianceEventCreate(
                business_id=42, event_title="X", due_date="2025-07-01", reminder_days=[7, -1]
            )

    def test_filing_link_must_be_url(self):
        with pytest.raises(ValidationError):
            ComplianceEventCreate(
                business_id=42, event_title="X", due_date="2025-07-01", filing_link="ftp://x"
            )

    def test_update_tracks_set_fields(self):
        update = ComplianceEventUpdate(notes="Filed online")
        assert update.model_dump(exclude_unset=True) == {"notes": "Filed online"}


class TestStatusTransitions:

    def test_completed_can_only_reopen(self):
        assert STATUS_TRANSITIONS[EventStatus.COMPLETED] == {EventStatus.PENDING}

    def test_overdue_cannot_return_to_pending(self):
        assert EventStatus.PENDING not in STATUS_TRANSITIONS[EventStatus.OVERDUE]

    def test_dismissed_is_final(self):
        assert STATUS_TRANSITIONS[EventStatus.DISMISSED] == set()


# =============================================================================
# Notification Model Tests
# =============================================================================

class TestNotifications:

    def test_scheduled_notification_row(self):
        notification = ComplianceNotification.from_db_row({
            "id": 1,
            "business_entity_id": 42,
            "compliance_calendar_id": 7,
            "notification_type": "email",
            "title": "Due in 7 days: Annual Report",
            "message": "Acme: Annual Report is due in 7 days (2025-06-01).",
            "scheduled_date": "2025-05-25T00:00:00+00:00",
            "status": "pending",
            "delivery_attempts": None,
        })

        assert notification.notification_type == NotificationChannel.EMAIL
        assert notification.scheduled_date == date(2025, 5, 25)
        assert notification.status == NotificationStatus.PENDING
        assert notification.delivery_attempts == 0

    def test_in_app_null_metadata(self):
        notification = InAppNotification.model_validate({
            "id": 3,
            "user_id": "u-1",
            "type": "compliance_reminder",
            "title": "T",
            "message": "M",
            "metadata": None,
        })

        assert notification.metadata == {}
        assert not notification.is_read


class TestTimeRange:

    @pytest.mark.parametrize("value, days", [("7d", 7), ("30d", 30), ("90d", 90), ("1y", 365)])
    def test_days(self, value, days):
        assert TimeRange(value).days == days
