# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - business.py: Business entity schemas
# - compliance.py: Compliance calendar event schemas and enums
# - notification.py: Scheduled and in-app notification schemas
# - dashboard.py: Dashboard, analytics and reminder-run views
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Business Models
# -----------------------------------------------------------------------------
from .business import (
    BusinessCreate,
    BusinessEntity,
    EntityType,
)

# -----------------------------------------------------------------------------
# Compliance Calendar Models
# -----------------------------------------------------------------------------
from .compliance import (
    STATUS_TRANSITIONS,
    CompleteEventRequest,
    ComplianceEvent,
    ComplianceEventCreate,
    ComplianceEventUpdate,
    EventCategory,
    EventStatus,
    Frequency,
    Priority,
    StatusUpdateRequest,
)

# -----------------------------------------------------------------------------
# Notification Models
# -----------------------------------------------------------------------------
from .notification import (
    ComplianceNotification,
    InAppNotification,
    InAppNotificationList,
    NotificationChannel,
    NotificationStatus,
)

# -----------------------------------------------------------------------------
# Dashboard / Analytics / Reminder Models
# -----------------------------------------------------------------------------
from .dashboard import (
    BusinessMetrics,
    BusinessSummary,
    CategoryBreakdown,
    ComplianceMetrics,
    DashboardEvent,
    DashboardSummary,
    ReminderRunResult,
    ReminderStatistics,
    ReminderStatus,
    TimeRange,
    TrendPoint,
    UrgentEvent,
)

__all__ = [
    # Business
    "BusinessCreate",
    "BusinessEntity",
    "EntityType",
    # Compliance
    "STATUS_TRANSITIONS",
    "CompleteEventRequest",
    "ComplianceEvent",
    "ComplianceEventCreate",
    "ComplianceEventUpdate",
    "EventCategory",
    "EventStatus",
    "Frequency",
    "Priority",
    "StatusUpdateRequest",
    # Notification
    "ComplianceNotification",
    "InAppNotification",
    "InAppNotificationList",
    "NotificationChannel",
    "NotificationStatus",
    # Dashboard
    "BusinessMetrics",
    "BusinessSummary",
    "CategoryBreakdown",
    "ComplianceMetrics",
    "DashboardEvent",
    "DashboardSummary",
    "ReminderRunResult",
    "ReminderStatistics",
    "ReminderStatus",
    "TimeRange",
    "TrendPoint",
    "UrgentEvent",
]
