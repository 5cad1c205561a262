# =============================================================================
# tests/test_analytics.py - Compliance Analytics Tests
# =============================================================================
# Tests for the pandas aggregations behind the progress charts.
# =============================================================================

from datetime import date
from unittest.mock import patch

import pandas as pd
import pytest

from app.exceptions import BusinessNotFoundError
from core.models.business import BusinessEntity
from core.models.dashboard import TimeRange
from core.services.analytics_service import AnalyticsService, events_frame

DB = "lib.supabase_client.SupabaseClient"
TODAY = date(2025, 5, 2)


@pytest.fixture
def rows(make_event_row):
    return [
        # Completed before the due date, 5 days after creation
        make_event_row(id=1, category="tax", status="completed", due_date="2025-04-15",
                       completed_date="2025-04-10", created_at="2025-04-05T10:00:00+00:00"),
        # Completed late, 15 days after creation
        make_event_row(id=2, category="tax", status="completed", due_date="2025-04-20",
                       completed_date="2025-04-25", created_at="2025-04-10T10:00:00+00:00"),
        make_event_row(id=3, category="tax", status="pending", due_date="2025-07-01",
                       created_at="2025-04-20T10:00:00+00:00"),
        make_event_row(id=4, business_entity_id=43, category="state_filing", status="overdue",
                       due_date="2025-04-25", created_at="2025-04-12T10:00:00+00:00"),
        # Outside the 30 day window
        make_event_row(id=5, category=None, status="pending", due_date="2025-09-01",
                       created_at="2025-01-05T10:00:00+00:00"),
    ]


@pytest.fixture
def businesses(business_row):
    return {"42": BusinessEntity.from_db_row(business_row)}


class TestEventsFrame:

    def test_parses_dates(self, rows):
        df = events_frame(rows)

        assert pd.api.types.is_datetime64_any_dtype(df["due_date"])
        assert df.loc[0, "completed_date"].day == 10
        assert df["completed_date"].isna().sum() == 3
        assert list(df["business_entity_id"].unique()) == ["42", "43"]

    def test_missing_category_is_other(self, rows):
        assert events_frame(rows).loc[4, "category"] == "other"


class TestMetrics:

    def test_month_window(self, rows, businesses):
        metrics = AnalyticsService.compute_metrics(events_frame(rows), businesses, TimeRange.MONTH, TODAY)

        assert metrics.total == 4
        assert metrics.completed == 2
        assert metrics.pending == 1
        assert metrics.overdue == 1
        assert metrics.completion_rate == 50.0
        assert metrics.on_time_rate == 50.0
        assert metrics.average_days_to_complete == 10.0

    def test_per_business(self, rows, businesses):
        metrics = AnalyticsService.compute_metrics(events_frame(rows), businesses, TimeRange.MONTH, TODAY)
        by_id = {b.business_id: b for b in metrics.businesses}

        assert by_id["42"].business_name == "Acme Widgets LLC"
        assert by_id["42"].total == 3
        assert by_id["42"].completion_rate == 66.7
        # Businesses that are no longer listed fall back to their id
        assert by_id["43"].business_name == "43"
        assert by_id["43"].overdue == 1

    def test_year_window_includes_older_events(self, rows, businesses):
        metrics = AnalyticsService.compute_metrics(events_frame(rows), businesses, TimeRange.YEAR, TODAY)
        assert metrics.total == 5
        assert metrics.pending == 2

    def test_no_events(self, businesses):
        metrics = AnalyticsService.compute_metrics(events_frame([]), businesses, TimeRange.WEEK, TODAY)

        assert metrics.total == 0
        assert metrics.completion_rate == 0.0
        assert metrics.average_days_to_complete is None
        assert metrics.businesses == []


class TestTrends:

    def test_monthly_counts(self, rows):
        points = AnalyticsService.compute_trends(events_frame(rows), 3, TODAY)

        assert [p.month for p in points] == ["2025-03", "2025-04", "2025-05"]
        april = points[1]
        assert (april.created, april.completed, april.overdue) == (4, 2, 1)
        assert (points[0].created, points[2].created) == (0, 0)


class TestCategories:

    def test_breakdown(self, rows):
        breakdown = AnalyticsService.compute_categories(events_frame(rows))

        assert [c.category for c in breakdown] == ["tax", "other", "state_filing"]
        tax = breakdown[0]
        assert (tax.total, tax.completed, tax.open) == (3, 2, 1)
        assert tax.completion_rate == 66.7
        assert breakdown[2].open == 1


class TestUrgentEvents:

    def test_sorted_with_urgency(self, make_event_row, business_row, owner_id):
        event_rows = [
            make_event_row(id=1, due_date="2025-05-12"),
            make_event_row(id=2, due_date="2025-04-27", status="overdue"),
            make_event_row(id=3, due_date="2025-05-04"),
        ]

        with patch(f"{DB}.fetch_businesses", return_value=[business_row]), \
             patch(f"{DB}.fetch_events", return_value=event_rows) as fetch:
            urgent = AnalyticsService.urgent_events(owner_id, days=10, today=TODAY)

        assert [u.event_id for u in urgent] == [2, 3, 1]
        assert [u.days_until_due for u in urgent] == [-5, 2, 10]
        assert [u.urgency for u in urgent] == ["high", "high", "medium"]
        assert urgent[0].business_name == "Acme Widgets LLC"
        assert fetch.call_args.kwargs["due_to"] == date(2025, 5, 12)

    def test_metrics_for_foreign_business(self, business_row):
        with patch(f"{DB}.fetch_business", return_value=business_row):
            with pytest.raises(BusinessNotFoundError):
                AnalyticsService.metrics("someone-else", business_id=42, today=TODAY)
