# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - businesses.py: Business registration and per-business calendars
# - compliance.py: Dashboard, event CRUD, status changes, documents, guidance
# - notifications.py: In-app notifications and dashboard reminders
# - analytics.py: Compliance progress charts
# - admin.py: Manual controls for the reminder jobs (admin role)
# - tasks.py: Background task status endpoints
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import businesses
from . import compliance
from . import notifications
from . import analytics
from . import admin
from . import tasks

__all__ = [
    "health",
    "businesses",
    "compliance",
    "notifications",
    "analytics",
    "admin",
    "tasks",
]
