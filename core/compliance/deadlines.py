# =============================================================================
# core/compliance/deadlines.py - Due Date Arithmetic
# =============================================================================
# Pure date functions behind the compliance calendar:
# - Month/year arithmetic with month-end clamping
# - Next occurrence of a recurring filing
# - Due dates produced by each template rule
# - Days-until-due and urgency bands
#
# All functions work on calendar dates (datetime.date). "Today" is always
# passed in so the functions stay deterministic and testable; use today_in()
# to obtain it for the configured compliance timezone.
# =============================================================================

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from core.models.compliance import Frequency

if TYPE_CHECKING:
    from core.compliance.templates import ComplianceTemplate


# Quarterly estimated tax payments: (month, day, year offset)
QUARTERLY_ESTIMATED_DUE = [(4, 15, 0), (6, 15, 0), (9, 15, 0), (1, 15, 1)]

# BOIR reports are due this many days after formation
BOIR_DAYS_AFTER_FORMATION = 90


# =============================================================================
# Calendar Helpers
# =============================================================================

def today_in(tz_name: str) -> date:
    """Current calendar date in the given IANA timezone."""
    return datetime.now(ZoneInfo(tz_name)).date()


def local_date(moment: datetime, tz_name: str) -> date:
    """Calendar date of an instant in the given timezone (naive = UTC)."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=ZoneInfo("UTC"))
    return moment.astimezone(ZoneInfo(tz_name)).date()


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_months(d: date, months: int) -> date:
    """
    Add calendar months, clamping the day to the end of the target month.

    Example:
        add_months(date(2024, 1, 31), 1)  # date(2024, 2, 29)
    """
    index = d.month - 1 + months
    year = d.year + index // 12
    month = index % 12 + 1
    return date(year, month, min(d.day, last_day_of_month(year, month)))


def add_years(d: date, years: int) -> date:
    """Add calendar years; February 29 becomes February 28 in non-leap years."""
    return add_months(d, 12 * years)


def safe_date(year: int, month: int, day: int) -> date:
    """Build a date, clamping day to the month length (Feb 30 -> Feb 28/29)."""
    return date(year, month, min(day, last_day_of_month(year, month)))


# =============================================================================
# Recurrence
# =============================================================================

def next_occurrence(due: date, frequency: Frequency | str | None) -> date | None:
    """
    Due date of the next occurrence of a recurring filing.

    Returns None for one-time (or unknown) frequencies.
    """
    if frequency is None:
        return None
    try:
        frequency = Frequency(frequency)
    except ValueError:
        return None

    if frequency == Frequency.ANNUAL:
        return add_years(due, 1)
    if frequency == Frequency.BIENNIAL:
        return add_years(due, 2)
    if frequency == Frequency.QUARTERLY:
        return add_months(due, 3)
    if frequency == Frequency.MONTHLY:
        return add_months(due, 1)
    return None


def roll_forward(due: date, frequency: Frequency | str | None, today: date) -> date | None:
    """
    Advance a recurring due date until it lands strictly after today.

    Returns None when the filing does not recur.
    """
    candidate = next_occurrence(due, frequency)
    while candidate is not None and candidate <= today:
        candidate = next_occurrence(candidate, frequency)
    return candidate


# =============================================================================
# Template Rules
# =============================================================================

def due_dates_for(
    template: ComplianceTemplate,
    formation_date: date,
    today: date,
) -> list[date]:
    """
    Compute the upcoming due dates a template produces for one business.

    Rules:
    - fixed: template month/day this year, next year if already passed
    - anniversary_month_end: last day of the formation month
    - anniversary_month_start: first day of the formation month
      (biennial filings also get the occurrence two years later)
    - days_from_formation: formation date + N days
    - quarterly_estimated: Apr 15, Jun 15, Sep 15 and Jan 15 of next year
    - boir: formation date + 90 days
    - anniversary: one year after formation, rolled forward past today

    Only dates strictly after today are returned, in ascending order.
    """
    rule = template.rule
    year = today.year
    dates: list[date] = []

    if rule == "fixed":
        candidate = safe_date(year, template.month, template.day)
        if candidate <= today:
            candidate = safe_date(year + 1, template.month, template.day)
        dates.append(candidate)

    elif rule == "anniversary_month_end":
        month = formation_date.month
        candidate = date(year, month, last_day_of_month(year, month))
        if candidate <= today:
            candidate = date(year + 1, month, last_day_of_month(year + 1, month))
        dates.append(candidate)

    elif rule == "anniversary_month_start":
        month = formation_date.month
        candidate = date(year, month, 1)
        if candidate <= today:
            candidate = date(year + 1, month, 1)
        dates.append(candidate)
        if template.frequency == Frequency.BIENNIAL:
            dates.append(add_years(candidate, 2))

    elif rule == "days_from_formation":
        dates.append(formation_date + timedelta(days=template.days_from_formation or 0))

    elif rule == "quarterly_estimated":
        for month, day, offset in QUARTERLY_ESTIMATED_DUE:
            dates.append(date(year + offset, month, day))

    elif rule == "boir":
        dates.append(formation_date + timedelta(days=BOIR_DAYS_AFTER_FORMATION))

    elif rule == "anniversary":
        candidate = add_years(formation_date, 1)
        if candidate <= today:
            candidate = roll_forward(candidate, Frequency.ANNUAL, today)
        dates.append(candidate)

    else:
        raise ValueError(f"Unknown due date rule: {rule}")

    return sorted(d for d in dates if d > today)


# =============================================================================
# Countdown & Urgency
# =============================================================================

def days_until_due(due: date, today: date) -> int:
    """Calendar days from today to the due date (negative when overdue)."""
    return (due - today).days


def urgency_for(days: int) -> str:
    """
    Urgency label used in reminder email subjects.

    <= 7 days is urgent, <= 14 important, anything further upcoming.
    """
    if days <= 7:
        return "urgent"
    if days <= 14:
        return "important"
    return "upcoming"


def dashboard_urgency(days: int) -> str:
    """Urgency level used on the dashboard (same bands as urgency_for)."""
    return {"urgent": "high", "important": "medium", "upcoming": "low"}[urgency_for(days)]


def reminder_dates(due: date, reminder_days: list[int]) -> list[date]:
    """
    Dates on which reminders for a due date should go out.

    Example:
        reminder_dates(date(2025, 4, 15), [30, 7])
        # [date(2025, 3, 16), date(2025, 4, 8)]
    """
    return sorted({due - timedelta(days=d) for d in reminder_days})
