# =============================================================================
# app/routers/notifications.py - Notification Endpoints
# =============================================================================
# In-app notifications (the bell) and the dashboard feed of scheduled
# compliance reminders for one business.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from app.auth import get_current_user, AuthUser
from core.models.notification import (
    ComplianceNotification,
    InAppNotification,
    InAppNotificationList,
)
from core.services.business_service import BusinessService
from core.services.notification_service import NotificationService

router = APIRouter()


@router.get("", response_model=InAppNotificationList)
async def list_notifications(
    user: AuthUser = Depends(get_current_user),
    unread_only: Annotated[bool, Query(description="Only unread notifications")] = False,
    limit: Annotated[int, Query(ge=1, le=200, description="Maximum notifications")] = 50,
):
    """The caller's in-app notifications, newest first."""
    return NotificationService.list_in_app(user.id, unread_only=unread_only, limit=limit)


@router.post("/{notification_id}/read", response_model=InAppNotification)
async def mark_notification_read(
    notification_id: Annotated[str, Path(description="Notification ID")],
    user: AuthUser = Depends(get_current_user),
):
    return NotificationService.mark_read(notification_id, user.id)


@router.get("/business/{business_id}", response_model=list[ComplianceNotification])
async def get_business_notifications(
    business_id: Annotated[str, Path(description="Business ID")],
    user: AuthUser = Depends(get_current_user),
    days: Annotated[int, Query(ge=1, le=365, description="Look-back window in days")] = 30,
):
    """
    Dashboard reminders of one business from the last N days.

    Newest first; scheduled reminders that are still in the future are not
    included.
    """
    business = BusinessService.get_business(business_id, user_id=user.id)
    return NotificationService.get_dashboard_notifications(business.id, days=days)
