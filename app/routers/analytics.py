# =============================================================================
# app/routers/analytics.py - Compliance Analytics Endpoints
# =============================================================================
# Data for the compliance progress charts. Everything is computed with
# pandas over the caller's calendar (see AnalyticsService).
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.auth import get_current_user, AuthUser
from core.models.dashboard import (
    CategoryBreakdown,
    ComplianceMetrics,
    TimeRange,
    TrendPoint,
    UrgentEvent,
)
from core.services.analytics_service import AnalyticsService

router = APIRouter()


@router.get("/metrics", response_model=ComplianceMetrics)
async def get_metrics(
    user: AuthUser = Depends(get_current_user),
    time_range: Annotated[
        TimeRange, Query(alias="timeRange", description="Look-back window: 7d, 30d, 90d or 1y")
    ] = TimeRange.MONTH,
    business_id: Annotated[str | None, Query(alias="businessId", description="Limit to one business")] = None,
):
    """
    Completion and on-time rates for events created in the time range,
    with a per-business breakdown.
    """
    return AnalyticsService.metrics(user.id, time_range=time_range, business_id=business_id)


@router.get("/trends", response_model=list[TrendPoint])
async def get_trends(
    user: AuthUser = Depends(get_current_user),
    months: Annotated[int, Query(ge=1, le=24, description="Number of months")] = 6,
):
    """Created / completed / overdue counts per month, oldest first."""
    return AnalyticsService.trends(user.id, months=months)


@router.get("/categories", response_model=list[CategoryBreakdown])
async def get_categories(
    user: AuthUser = Depends(get_current_user),
):
    return AnalyticsService.categories(user.id)


@router.get("/urgent-events", response_model=list[UrgentEvent])
async def get_urgent_events(
    user: AuthUser = Depends(get_current_user),
    days: Annotated[int, Query(ge=1, le=90, description="Look-ahead window in days")] = 7,
):
    """Pending events due within N days plus overdue events."""
    return AnalyticsService.urgent_events(user.id, days=days)
