# =============================================================================
# core/services/analytics_service.py - Compliance Progress Analytics
# =============================================================================
# Aggregations behind the compliance progress charts, computed with pandas
# over the caller's calendar rows:
# - metrics: status counts, completion / on-time rates, time to complete
# - trends: created / completed / overdue per month
# - categories: totals and completion rate per category
# - urgent_events: what needs attention this week
# =============================================================================

import logging
from datetime import date, timedelta
from typing import Any
from uuid import UUID

import pandas as pd

from lib.supabase_client import SupabaseClient
from core.compliance.deadlines import dashboard_urgency, days_until_due, today_in
from core.models.business import BusinessEntity
from core.models.compliance import ComplianceEvent, EventStatus
from core.models.dashboard import (
    BusinessMetrics,
    CategoryBreakdown,
    ComplianceMetrics,
    TimeRange,
    TrendPoint,
    UrgentEvent,
)
from core.services.business_service import BusinessService
from app.config import settings

logger = logging.getLogger(__name__)

EVENT_COLUMNS = [
    "id",
    "business_entity_id",
    "event_title",
    "category",
    "priority",
    "status",
    "due_date",
    "completed_date",
    "created_at",
]

OPEN_STATUSES = [EventStatus.PENDING.value, EventStatus.OVERDUE.value]


def _to_timestamps(series: pd.Series) -> pd.Series:
    """ISO strings (dates or timestamps) -> naive UTC timestamps."""
    parsed = pd.to_datetime(series, utc=True, errors="coerce", format="ISO8601")
    return parsed.dt.tz_localize(None)


def events_frame(rows: list[dict[str, Any]]) -> pd.DataFrame:
    """
    Calendar rows as a DataFrame with parsed date columns.

    Missing columns are added as empty so aggregations work on any input,
    including no rows at all.
    """
    df = pd.DataFrame(rows).reindex(columns=EVENT_COLUMNS)
    for column in ("due_date", "completed_date", "created_at"):
        df[column] = _to_timestamps(df[column])
    df["business_entity_id"] = df["business_entity_id"].astype(str)
    df["category"] = df["category"].fillna("other")
    return df


def _rate(part: int, whole: int) -> float:
    return round(part / whole * 100, 1) if whole else 0.0


class AnalyticsService:
    """
    Service for compliance progress visualisation data.
    """

    @staticmethod
    def _load(
        user_id: UUID | str,
        business_id: int | str | None = None,
    ) -> tuple[pd.DataFrame, dict[str, BusinessEntity]]:
        if business_id is not None:
            businesses = [BusinessService.get_business(business_id, user_id=user_id)]
        else:
            businesses = BusinessService.list_businesses(user_id)

        rows = SupabaseClient.fetch_events(business_ids=[b.id for b in businesses])
        return events_frame(rows), {str(b.id): b for b in businesses}

    @staticmethod
    def metrics(
        user_id: UUID | str,
        time_range: TimeRange = TimeRange.MONTH,
        business_id: int | str | None = None,
        today: date | None = None,
    ) -> ComplianceMetrics:
        """
        Progress metrics for events created within the time range.

        on_time_rate is the share of completed events whose completion date
        is on or before the due date.
        """
        today = today or today_in(settings.COMPLIANCE_TIMEZONE)
        df, businesses = AnalyticsService._load(user_id, business_id)
        return AnalyticsService.compute_metrics(df, businesses, time_range, today)

    @staticmethod
    def compute_metrics(
        df: pd.DataFrame,
        businesses: dict[str, BusinessEntity],
        time_range: TimeRange,
        today: date,
    ) -> ComplianceMetrics:
        start = pd.Timestamp(today - timedelta(days=time_range.days))
        window = df[df["created_at"] >= start]

        counts = window["status"].value_counts()
        total = len(window)
        completed = int(counts.get(EventStatus.COMPLETED.value, 0))

        done = window[window["status"] == EventStatus.COMPLETED.value].dropna(subset=["completed_date"])
        on_time = int((done["completed_date"] <= done["due_date"]).sum())
        elapsed = (done["completed_date"] - done["created_at"].dt.normalize()).dt.days.mean()
        average_days = None if pd.isna(elapsed) else round(float(elapsed), 1)

        per_business = []
        for business_id, group in window.groupby("business_entity_id"):
            business_counts = group["status"].value_counts()
            business = businesses.get(business_id)
            business_completed = int(business_counts.get(EventStatus.COMPLETED.value, 0))
            per_business.append(BusinessMetrics(
                business_id=business_id,
                business_name=business.legal_name if business else business_id,
                entity_type=business.entity_type if business else None,
                total=len(group),
                completed=business_completed,
                pending=int(business_counts.get(EventStatus.PENDING.value, 0)),
                overdue=int(business_counts.get(EventStatus.OVERDUE.value, 0)),
                completion_rate=_rate(business_completed, len(group)),
            ))

        return ComplianceMetrics(
            time_range=time_range,
            total=total,
            completed=completed,
            pending=int(counts.get(EventStatus.PENDING.value, 0)),
            overdue=int(counts.get(EventStatus.OVERDUE.value, 0)),
            dismissed=int(counts.get(EventStatus.DISMISSED.value, 0)),
            completion_rate=_rate(completed, total),
            on_time_rate=_rate(on_time, len(done)),
            average_days_to_complete=average_days,
            businesses=per_business,
        )

    @staticmethod
    def trends(
        user_id: UUID | str,
        months: int = 6,
        today: date | None = None,
    ) -> list[TrendPoint]:
        """Created / completed / overdue counts for each of the last N months."""
        today = today or today_in(settings.COMPLIANCE_TIMEZONE)
        df, _ = AnalyticsService._load(user_id)
        return AnalyticsService.compute_trends(df, months, today)

    @staticmethod
    def compute_trends(df: pd.DataFrame, months: int, today: date) -> list[TrendPoint]:
        periods = pd.period_range(end=pd.Period(today.strftime("%Y-%m"), freq="M"), periods=months, freq="M")

        created = df["created_at"].dropna().dt.to_period("M").value_counts()
        completed = (
            df.loc[df["status"] == EventStatus.COMPLETED.value, "completed_date"]
            .dropna().dt.to_period("M").value_counts()
        )
        overdue = (
            df.loc[df["status"] == EventStatus.OVERDUE.value, "due_date"]
            .dropna().dt.to_period("M").value_counts()
        )

        return [
            TrendPoint(
                month=str(period),
                created=int(created.get(period, 0)),
                completed=int(completed.get(period, 0)),
                overdue=int(overdue.get(period, 0)),
            )
            for period in periods
        ]

    @staticmethod
    def categories(user_id: UUID | str) -> list[CategoryBreakdown]:
        """Totals and completion rate per category, largest first."""
        df, _ = AnalyticsService._load(user_id)
        return AnalyticsService.compute_categories(df)

    @staticmethod
    def compute_categories(df: pd.DataFrame) -> list[CategoryBreakdown]:
        breakdown = []
        for category, group in df.groupby("category"):
            total = len(group)
            completed = int((group["status"] == EventStatus.COMPLETED.value).sum())
            breakdown.append(CategoryBreakdown(
                category=str(category),
                total=total,
                completed=completed,
                open=int(group["status"].isin(OPEN_STATUSES).sum()),
                completion_rate=_rate(completed, total),
            ))
        return sorted(breakdown, key=lambda c: (-c.total, c.category))

    @staticmethod
    def urgent_events(
        user_id: UUID | str,
        days: int = 7,
        today: date | None = None,
    ) -> list[UrgentEvent]:
        """
        Pending events due within N days plus everything overdue.

        Sorted by due date, oldest first.
        """
        today = today or today_in(settings.COMPLIANCE_TIMEZONE)
        businesses = {str(b.id): b for b in BusinessService.list_businesses(user_id)}
        rows = SupabaseClient.fetch_events(
            business_ids=list(businesses),
            status=OPEN_STATUSES,
            due_to=today + timedelta(days=days),
        )

        urgent = []
        for event in (ComplianceEvent.from_db_row(row) for row in rows):
            remaining = days_until_due(event.due_date, today)
            business = businesses.get(str(event.business_entity_id))
            urgent.append(UrgentEvent(
                event_id=event.id,
                business_id=event.business_entity_id,
                business_name=business.legal_name if business else str(event.business_entity_id),
                event_title=event.event_title,
                category=event.category,
                priority=event.priority.value,
                status=event.status.value,
                due_date=event.due_date,
                days_until_due=remaining,
                urgency=dashboard_urgency(remaining),
            ))

        return sorted(urgent, key=lambda u: u.due_date)
