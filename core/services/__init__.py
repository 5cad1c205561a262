# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .business_service import BusinessService
from .storage_service import StorageService
from .notification_service import NotificationService, Recipient
from .compliance_service import ComplianceService
from .reminder_service import ReminderService
from .analytics_service import AnalyticsService

__all__ = [
    "BusinessService",
    "StorageService",
    "NotificationService",
    "Recipient",
    "ComplianceService",
    "ReminderService",
    "AnalyticsService",
]
