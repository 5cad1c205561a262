# =============================================================================
# core/models/dashboard.py - Dashboard, Analytics & Reminder Run Schemas
# =============================================================================
# Read-only views computed from the compliance calendar:
# - DashboardSummary: counts and nearest deadlines for one user
# - ComplianceMetrics / TrendPoint / CategoryBreakdown / UrgentEvent:
#   progress visualisation data
# - ReminderRunResult / ReminderStatistics / ReminderStatus: output of the
#   daily reminder job and its monitoring endpoints
# =============================================================================

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field

from core.models.compliance import ComplianceEvent


class TimeRange(str, Enum):
    """Look-back window accepted by the metrics endpoint."""
    WEEK = "7d"
    MONTH = "30d"
    QUARTER = "90d"
    YEAR = "1y"

    @property
    def days(self) -> int:
        return {"7d": 7, "30d": 30, "90d": 90, "1y": 365}[self.value]


# =============================================================================
# Dashboard
# =============================================================================

class BusinessSummary(BaseModel):
    business_id: int | str
    legal_name: str
    entity_type: str | None = None
    state: str | None = None
    events_count: int = 0


class DashboardSummary(BaseModel):
    """
    Compliance dashboard for one user across all of their businesses.

    Example:
        {
            "total_businesses": 2,
            "total_events": 14,
            "pending_events": 9,
            "overdue_events": 1,
            "completed_events": 4,
            "events_next_30_days": 3,
            "nearest_events": [...],
            "businesses": [...]
        }
    """
    total_businesses: int = 0
    total_events: int = 0
    pending_events: int = 0
    overdue_events: int = 0
    completed_events: int = 0
    dismissed_events: int = 0
    events_next_30_days: int = 0
    nearest_events: list[ComplianceEvent] = Field(default_factory=list)
    businesses: list[BusinessSummary] = Field(default_factory=list)


class DashboardEvent(BaseModel):
    """An event decorated with the countdown shown on the dashboard."""
    event: ComplianceEvent
    days_until_due: int
    urgency: str


# =============================================================================
# Analytics
# =============================================================================

class BusinessMetrics(BaseModel):
    business_id: int | str
    business_name: str
    entity_type: str | None = None
    total: int = 0
    completed: int = 0
    pending: int = 0
    overdue: int = 0
    completion_rate: float = 0.0


class ComplianceMetrics(BaseModel):
    """Progress metrics over the selected time range."""
    time_range: TimeRange
    total: int = 0
    completed: int = 0
    pending: int = 0
    overdue: int = 0
    dismissed: int = 0
    completion_rate: float = Field(default=0.0, ge=0, le=100)
    on_time_rate: float = Field(default=0.0, ge=0, le=100)
    average_days_to_complete: float | None = None
    businesses: list[BusinessMetrics] = Field(default_factory=list)


class TrendPoint(BaseModel):
    """One month of the compliance trend chart."""
    month: str  # "2024-05"
    created: int = 0
    completed: int = 0
    overdue: int = 0


class CategoryBreakdown(BaseModel):
    category: str
    total: int = 0
    completed: int = 0
    open: int = 0
    completion_rate: float = 0.0


class UrgentEvent(BaseModel):
    event_id: int | str
    business_id: int | str
    business_name: str
    event_title: str
    category: str
    priority: str
    status: str
    due_date: date
    days_until_due: int
    urgency: str


# =============================================================================
# Reminder Job
# =============================================================================

class ReminderRunResult(BaseModel):
    """
    Outcome of one run of the daily reminder job.

    checked counts events that fell inside a reminder window; skipped
    covers dedupe hits and missing recipients. unrecorded counts sent
    reminders whose event row could not be updated (also in sent).
    """
    checked: int = 0
    sent: int = 0
    skipped: int = 0
    failed: int = 0
    unrecorded: int = 0
    started_at: datetime
    finished_at: datetime | None = None
    errors: list[str] = Field(default_factory=list)


class ReminderStatistics(BaseModel):
    total_events: int = 0
    pending_events: int = 0
    overdue_events: int = 0
    completed_events: int = 0
    events_needing_reminders: int = 0
    generated_at: datetime


class ReminderStatus(BaseModel):
    """Monitoring view of the reminder schedule."""
    schedule: str
    timezone: str
    reminder_intervals: list[int]
    last_run: ReminderRunResult | None = None
    current_time: datetime
