# =============================================================================
# tests/test_deadlines.py - Due Date Arithmetic Tests
# =============================================================================
# Tests for core.compliance.deadlines:
# - Month/year arithmetic and month-end clamping
# - Recurrence (next occurrence, rolling forward past today)
# - Due dates produced by each template rule
# - Countdown and urgency bands
# =============================================================================

from datetime import date, datetime, timezone

import pytest

from core.compliance.deadlines import (
    add_months,
    add_years,
    dashboard_urgency,
    days_until_due,
    due_dates_for,
    local_date,
    next_occurrence,
    reminder_dates,
    roll_forward,
    safe_date,
    today_in,
    urgency_for,
)
from core.compliance.templates import ComplianceTemplate
from core.models.compliance import EventCategory, Frequency, Priority


def make_template(rule: str, frequency: Frequency = Frequency.ANNUAL, **kwargs) -> ComplianceTemplate:
    return ComplianceTemplate(
        event_type="test_filing",
        title="Test Filing",
        description="A filing used in tests.",
        category=EventCategory.COMPLIANCE,
        priority=Priority.MEDIUM,
        frequency=frequency,
        rule=rule,
        **kwargs,
    )


# =============================================================================
# Calendar Helpers
# =============================================================================

class TestCalendarHelpers:
    """Month arithmetic clamps to the end of the month."""

    def test_add_months_clamps_to_leap_february(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)

    def test_add_months_clamps_to_february(self):
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)

    def test_add_months_crosses_year(self):
        assert add_months(date(2024, 11, 30), 3) == date(2025, 2, 28)

    def test_add_years_from_leap_day(self):
        assert add_years(date(2024, 2, 29), 1) == date(2025, 2, 28)

    def test_safe_date_clamps_day(self):
        assert safe_date(2025, 2, 30) == date(2025, 2, 28)
        assert safe_date(2025, 4, 15) == date(2025, 4, 15)

    def test_local_date_uses_timezone(self):
        """02:30 UTC on May 3 is still May 2 in New York."""
        moment = datetime(2025, 5, 3, 2, 30, tzinfo=timezone.utc)
        assert local_date(moment, "America/New_York") == date(2025, 5, 2)
        assert local_date(moment, "UTC") == date(2025, 5, 3)

    def test_local_date_treats_naive_as_utc(self):
        assert local_date(datetime(2025, 5, 3, 2, 30), "America/New_York") == date(2025, 5, 2)

    def test_today_in_returns_date(self):
        assert isinstance(today_in("America/New_York"), date)


# =============================================================================
# Recurrence
# =============================================================================

class TestRecurrence:
    """Next occurrence and roll forward."""

    @pytest.mark.parametrize("frequency, expected", [
        (Frequency.ANNUAL, date(2026, 4, 15)),
        (Frequency.BIENNIAL, date(2027, 4, 15)),
        (Frequency.QUARTERLY, date(2025, 7, 15)),
        (Frequency.MONTHLY, date(2025, 5, 15)),
        ("annual", date(2026, 4, 15)),
    ])
    def test_next_occurrence(self, frequency, expected):
        assert next_occurrence(date(2025, 4, 15), frequency) == expected

    def test_next_occurrence_monthly_clamps(self):
        assert next_occurrence(date(2025, 1, 31), Frequency.MONTHLY) == date(2025, 2, 28)

    @pytest.mark.parametrize("frequency", [Frequency.ONE_TIME, None, "bogus"])
    def test_non_recurring_has_no_next(self, frequency):
        assert next_occurrence(date(2025, 4, 15), frequency) is None

    def test_roll_forward_skips_past_years(self):
        """A filing completed years late lands on the first future date."""
        assert roll_forward(date(2022, 4, 15), Frequency.ANNUAL, date(2025, 5, 2)) == date(2026, 4, 15)

    def test_roll_forward_is_strictly_after_today(self):
        assert roll_forward(date(2024, 6, 1), Frequency.ANNUAL, date(2025, 6, 1)) == date(2026, 6, 1)

    def test_roll_forward_one_time(self):
        assert roll_forward(date(2024, 6, 1), Frequency.ONE_TIME, date(2025, 6, 1)) is None


# =============================================================================
# Template Rules
# =============================================================================

class TestDueDatesFor:
    """Due dates produced by each rule."""

    def test_fixed_later_this_year(self):
        template = make_template("fixed", month=4, day=15)
        assert due_dates_for(template, date(2020, 1, 1), date(2025, 1, 10)) == [date(2025, 4, 15)]

    def test_fixed_already_passed_moves_to_next_year(self):
        template = make_template("fixed", month=4, day=15)
        assert due_dates_for(template, date(2020, 1, 1), date(2025, 5, 2)) == [date(2026, 4, 15)]

    def test_fixed_due_today_moves_to_next_year(self):
        template = make_template("fixed", month=4, day=15)
        assert due_dates_for(template, date(2020, 1, 1), date(2025, 4, 15)) == [date(2026, 4, 15)]

    def test_anniversary_month_end(self):
        template = make_template("anniversary_month_end")
        assert due_dates_for(template, date(2021, 9, 3), date(2025, 5, 2)) == [date(2025, 9, 30)]

    def test_anniversary_month_end_passed(self):
        template = make_template("anniversary_month_end")
        assert due_dates_for(template, date(2024, 2, 10), date(2025, 5, 2)) == [date(2026, 2, 28)]

    def test_anniversary_month_start(self):
        template = make_template("anniversary_month_start")
        assert due_dates_for(template, date(2020, 3, 15), date(2025, 5, 2)) == [date(2026, 3, 1)]

    def test_anniversary_month_start_biennial_adds_second_occurrence(self):
        template = make_template("anniversary_month_start", frequency=Frequency.BIENNIAL)
        assert due_dates_for(template, date(2023, 8, 20), date(2025, 5, 2)) == [
            date(2025, 8, 1),
            date(2027, 8, 1),
        ]

    def test_days_from_formation(self):
        template = make_template("days_from_formation", frequency=Frequency.ONE_TIME, days_from_formation=30)
        assert due_dates_for(template, date(2025, 4, 20), date(2025, 5, 2)) == [date(2025, 5, 20)]

    def test_days_from_formation_in_the_past_is_dropped(self):
        template = make_template("days_from_formation", frequency=Frequency.ONE_TIME, days_from_formation=30)
        assert due_dates_for(template, date(2025, 1, 1), date(2025, 5, 2)) == []

    def test_quarterly_estimated_drops_passed_quarters(self):
        template = make_template("quarterly_estimated", frequency=Frequency.QUARTERLY)
        assert due_dates_for(template, date(2020, 1, 1), date(2025, 5, 2)) == [
            date(2025, 6, 15),
            date(2025, 9, 15),
            date(2026, 1, 15),
        ]

    def test_boir_is_ninety_days_after_formation(self):
        template = make_template("boir", frequency=Frequency.ONE_TIME)
        assert due_dates_for(template, date(2025, 3, 1), date(2025, 5, 2)) == [date(2025, 5, 30)]

    def test_boir_for_old_business_is_dropped(self):
        template = make_template("boir", frequency=Frequency.ONE_TIME)
        assert due_dates_for(template, date(2024, 1, 1), date(2025, 5, 2)) == []

    def test_anniversary_rolls_forward(self):
        template = make_template("anniversary")
        assert due_dates_for(template, date(2024, 3, 10), date(2025, 5, 2)) == [date(2026, 3, 10)]

    def test_anniversary_first_year(self):
        template = make_template("anniversary")
        assert due_dates_for(template, date(2024, 9, 1), date(2025, 5, 2)) == [date(2025, 9, 1)]


# =============================================================================
# Countdown & Urgency
# =============================================================================

class TestUrgency:
    """Days until due and urgency bands."""

    def test_days_until_due(self):
        assert days_until_due(date(2025, 5, 9), date(2025, 5, 2)) == 7
        assert days_until_due(date(2025, 4, 30), date(2025, 5, 2)) == -2

    @pytest.mark.parametrize("days, expected", [
        (-3, "urgent"),
        (0, "urgent"),
        (7, "urgent"),
        (8, "important"),
        (14, "important"),
        (15, "upcoming"),
        (30, "upcoming"),
    ])
    def test_urgency_bands(self, days, expected):
        assert urgency_for(days) == expected

    def test_dashboard_urgency(self):
        assert dashboard_urgency(3) == "high"
        assert dashboard_urgency(10) == "medium"
        assert dashboard_urgency(45) == "low"

    def test_reminder_dates(self):
        assert reminder_dates(date(2025, 4, 15), [30, 7]) == [date(2025, 3, 16), date(2025, 4, 8)]

    def test_reminder_dates_are_unique_and_sorted(self):
        assert reminder_dates(date(2025, 4, 15), [7, 1, 7]) == [date(2025, 4, 8), date(2025, 4, 14)]
