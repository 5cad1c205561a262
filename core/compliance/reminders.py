# =============================================================================
# core/compliance/reminders.py - Reminder Window & Dedupe Policy
# =============================================================================
# Decides whether a compliance event gets a reminder on a given day and
# builds the short texts used for titles, subjects and SMS bodies.
#
# A reminder goes out when:
# 1. The event is still pending
# 2. Its days-until-due equals one of the reminder intervals (30, 14, 7, 1)
# 3. No reminder was recorded for that interval yet
# 4. No reminder was sent in the last 24 hours
#
# Usage:
#   decision = should_send(event, today, now, [30, 14, 7, 1])
#   if decision.send:
#       ...
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from core.compliance.deadlines import days_until_due, urgency_for
from core.models.compliance import ComplianceEvent, EventStatus


DEFAULT_INTERVALS = [30, 14, 7, 1]

# Minimum gap between two reminders for the same event
MIN_REMINDER_GAP = timedelta(hours=24)

SUBJECT_PREFIX = {
    "urgent": "URGENT",
    "important": "Important",
    "upcoming": "Upcoming",
}


@dataclass(frozen=True)
class ReminderDecision:
    """
    Outcome of the reminder policy for one event.

    reason is one of: due, not_pending, outside_window,
    already_sent_for_interval, sent_recently.
    """
    send: bool
    interval: int | None
    reason: str


def _as_utc(value: datetime) -> datetime:
    # Supabase timestamps without an offset are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def reminder_window(days: int, intervals: list[int] | None = None) -> int | None:
    """Interval matching days-until-due exactly, or None."""
    intervals = DEFAULT_INTERVALS if intervals is None else intervals
    return days if days in intervals else None


def sent_recently(event: ComplianceEvent, now: datetime) -> bool:
    """True when the event's last reminder went out less than 24 hours ago."""
    if event.last_reminder_sent is None:
        return False
    return _as_utc(now) - _as_utc(event.last_reminder_sent) < MIN_REMINDER_GAP


def should_send(
    event: ComplianceEvent,
    today: date,
    now: datetime,
    intervals: list[int] | None = None,
) -> ReminderDecision:
    """
    Apply the reminder policy to one event.

    Args:
        event: Calendar event
        today: Calendar date in the compliance timezone
        now: Current instant (used for the 24 hour gap)
        intervals: Days-before-due at which reminders go out

    Returns:
        ReminderDecision with send flag, matched interval and reason
    """
    if event.status != EventStatus.PENDING:
        return ReminderDecision(False, None, "not_pending")

    interval = reminder_window(days_until_due(event.due_date, today), intervals)
    if interval is None:
        return ReminderDecision(False, None, "outside_window")

    if event.last_reminder_interval == interval:
        return ReminderDecision(False, interval, "already_sent_for_interval")

    if sent_recently(event, now):
        return ReminderDecision(False, interval, "sent_recently")

    return ReminderDecision(True, interval, "due")


# =============================================================================
# Texts
# =============================================================================

def format_due_date(due: date) -> str:
    """Long form used in emails: "Monday, January 15, 2024"."""
    return f"{due:%A}, {due:%B} {due.day}, {due.year}"


def plural_days(days: int) -> str:
    return f"{days} day" if days == 1 else f"{days} days"


def notification_title(event_title: str, days: int) -> str:
    """
    Title of a scheduled / in-app notification.

    Example:
        notification_title("Annual Report Filing", 7)
        # "Due in 7 days: Annual Report Filing"
    """
    if days <= 0:
        return f"DUE TODAY: {event_title}"
    if days == 1:
        return f"Due Tomorrow: {event_title}"
    if days <= 7:
        return f"Due in {days} days: {event_title}"
    return f"Upcoming: {event_title} ({days} days)"


def email_subject(event_title: str, days: int) -> str:
    """
    Reminder email subject.

    Example:
        email_subject("Franchise Tax", 14)
        # "Important: Franchise Tax is due in 14 days"
    """
    prefix = SUBJECT_PREFIX[urgency_for(days)]
    return f"{prefix}: {event_title} is due in {plural_days(days)}"


def render_notification_message(
    business_name: str,
    event_title: str,
    due: date,
    days: int,
    description: str | None = None,
) -> str:
    """Plain-text body for SMS and dashboard notifications."""
    if days <= 0:
        when = "is due today"
    elif days == 1:
        when = "is due tomorrow"
    else:
        when = f"is due in {days} days"
    message = f"{business_name}: {event_title} {when} ({due.isoformat()})."
    if description:
        message += f" {description}"
    return message
