# =============================================================================
# core/models/compliance.py - Compliance Calendar Schemas
# =============================================================================
# These models define the API contract for compliance calendar events:
# - EventStatus / Priority / EventCategory / Frequency: enums stored as text
# - ComplianceEventCreate / ComplianceEventUpdate: inputs from clients
# - ComplianceEvent: a row of the compliance_calendar table
#
# Status flow:
#   pending -> completed
#          \-> overdue -> completed
#          \-> dismissed
#   completed -> pending (reopen)
# =============================================================================

import json
from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from lib.utils import parse_date, parse_datetime


class EventStatus(str, Enum):
    """
    Lifecycle state of a compliance event.

    - pending: Not yet done, due date in the future (or today)
    - overdue: Not done and the due date has passed
    - completed: Filed / paid
    - dismissed: Not applicable to this business
    """
    PENDING = "pending"
    OVERDUE = "overdue"
    COMPLETED = "completed"
    DISMISSED = "dismissed"


# Allowed manual status changes
STATUS_TRANSITIONS: dict[EventStatus, set[EventStatus]] = {
    EventStatus.PENDING: {EventStatus.COMPLETED, EventStatus.DISMISSED, EventStatus.OVERDUE},
    EventStatus.OVERDUE: {EventStatus.COMPLETED, EventStatus.DISMISSED},
    EventStatus.COMPLETED: {EventStatus.PENDING},
    EventStatus.DISMISSED: set(),
}


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class EventCategory(str, Enum):
    """Grouping used by the dashboard and the analytics breakdown."""
    TAX = "tax"
    COMPLIANCE = "compliance"
    STATE_FILING = "state_filing"
    LICENSING = "licensing"
    REGISTERED_AGENT = "registered_agent"
    OTHER = "other"


class Frequency(str, Enum):
    """
    How often an event recurs.

    one_time events never produce a next occurrence.
    """
    ONE_TIME = "one_time"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"
    BIENNIAL = "biennial"


class ComplianceEventCreate(BaseModel):
    """
    Schema for adding a custom event to a business calendar.

    Example:
        {
            "business_id": 12,
            "event_title": "City business license renewal",
            "event_type": "business_license_renewal",
            "due_date": "2025-07-01",
            "category": "licensing",
            "priority": "medium",
            "recurring_interval": "annual"
        }
    """

    business_id: int | str = Field(
        ...,
        description="Business entity the event belongs to"
    )

    event_type: str = Field(
        default="custom",
        min_length=1,
        max_length=80,
        description="Machine-readable event type (annual_report, franchise_tax, ...)"
    )

    event_title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Title shown on the calendar and in reminders"
    )

    event_description: str | None = Field(
        default=None,
        max_length=2000,
        description="What has to be filed or paid"
    )

    due_date: date = Field(
        ...,
        description="Calendar date the filing is due"
    )

    priority: Priority = Field(default=Priority.MEDIUM)

    category: EventCategory = Field(default=EventCategory.OTHER)

    recurring_interval: Frequency = Field(
        default=Frequency.ONE_TIME,
        description="Recurrence; one_time events are not regenerated"
    )

    estimated_cost: float | None = Field(
        default=None,
        ge=0,
        description="Expected state/government fee in USD"
    )

    filing_link: str | None = Field(
        default=None,
        pattern=r"^https?://.+",
        description="Where the filing can be submitted"
    )

    reminder_days: list[int] | None = Field(
        default=None,
        description="Days before due to schedule notifications (defaults to settings)"
    )

    @field_validator("reminder_days")
    @classmethod
    def _positive_days(cls, value: list[int] | None) -> list[int] | None:
        if value is not None and any(d < 0 for d in value):
            raise ValueError("reminder_days must be zero or positive")
        return value


class ComplianceEventUpdate(BaseModel):
    """Fields a client may edit on an existing event. Omitted fields are left alone."""

    event_title: str | None = Field(default=None, min_length=1, max_length=255)
    event_description: str | None = Field(default=None, max_length=2000)
    due_date: date | None = None
    priority: Priority | None = None
    category: EventCategory | None = None
    recurring_interval: Frequency | None = None
    estimated_cost: float | None = Field(default=None, ge=0)
    filing_link: str | None = Field(default=None, pattern=r"^https?://.+")
    notes: str | None = Field(default=None, max_length=1000)


class StatusUpdateRequest(BaseModel):
    """Body of PATCH /compliance/events/{id}/status."""
    status: EventStatus


class CompleteEventRequest(BaseModel):
    """Body of POST /compliance/events/{id}/complete."""
    completed_date: date | None = Field(
        default=None,
        description="Defaults to today in the compliance timezone"
    )
    notes: str | None = Field(default=None, max_length=1000)


class ComplianceEvent(BaseModel):
    """
    A row of the compliance_calendar table.

    Supabase returns timestamps as ISO strings and reminder_dates as a JSON
    encoded text column; both are normalised on the way in.
    """

    id: int | str
    business_entity_id: int | str
    event_type: str
    event_title: str
    event_description: str | None = None
    due_date: date
    reminder_dates: list[date] = Field(default_factory=list)
    is_recurring: bool = False
    recurring_interval: Frequency | None = None
    status: EventStatus = EventStatus.PENDING
    completed_date: date | None = None
    priority: Priority = Priority.MEDIUM
    category: str = EventCategory.OTHER.value
    estimated_cost: float | None = None
    filing_link: str | None = None
    notes: str | None = None
    document_path: str | None = None
    reminders_sent: int = 0
    last_reminder_sent: datetime | None = None
    last_reminder_interval: int | None = None
    created_at: datetime | None = None

    @field_validator("due_date", "completed_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> date | None:
        return parse_date(value)

    @field_validator("last_reminder_sent", "created_at", mode="before")
    @classmethod
    def _parse_timestamps(cls, value: Any) -> datetime | None:
        return parse_datetime(value)

    @field_validator("reminder_dates", mode="before")
    @classmethod
    def _parse_reminder_dates(cls, value: Any) -> list[date]:
        if value is None or value == "":
            return []
        if isinstance(value, str):
            value = json.loads(value)
        return [parse_date(v) for v in value if v]

    @field_validator("recurring_interval", mode="before")
    @classmethod
    def _legacy_interval(cls, value: Any) -> Any:
        # Older rows use "yearly" for annual recurrence
        if value in (None, ""):
            return None
        if value == "yearly":
            return Frequency.ANNUAL.value
        return value

    @field_validator("reminders_sent", mode="before")
    @classmethod
    def _null_count(cls, value: Any) -> int:
        return value or 0

    @property
    def is_open(self) -> bool:
        """Pending or overdue events still need action."""
        return self.status in (EventStatus.PENDING, EventStatus.OVERDUE)

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> "ComplianceEvent":
        return cls.model_validate(row)
