# =============================================================================
# core/compliance/ - Compliance Rules
# =============================================================================
# Pure functions and data with no I/O:
# - templates.py: Catalog of filings each business type/state owes
# - deadlines.py: Due date arithmetic and urgency bands
# - reminders.py: Reminder window and dedupe policy, notification texts
# - emails.py: Reminder email rendering
# =============================================================================

from .deadlines import (
    add_months,
    add_years,
    dashboard_urgency,
    days_until_due,
    local_date,
    due_dates_for,
    next_occurrence,
    reminder_dates,
    roll_forward,
    today_in,
    urgency_for,
)
from .emails import RenderedEmail, render_notification_email, render_reminder_email
from .reminders import (
    DEFAULT_INTERVALS,
    ReminderDecision,
    email_subject,
    notification_title,
    reminder_window,
    render_notification_message,
    should_send,
)
from .templates import COMPLIANCE_TEMPLATES, ComplianceTemplate, templates_for

__all__ = [
    "add_months",
    "add_years",
    "dashboard_urgency",
    "days_until_due",
    "local_date",
    "due_dates_for",
    "next_occurrence",
    "reminder_dates",
    "roll_forward",
    "today_in",
    "urgency_for",
    "RenderedEmail",
    "render_notification_email",
    "render_reminder_email",
    "DEFAULT_INTERVALS",
    "ReminderDecision",
    "email_subject",
    "notification_title",
    "reminder_window",
    "render_notification_message",
    "should_send",
    "COMPLIANCE_TEMPLATES",
    "ComplianceTemplate",
    "templates_for",
]
