# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Background tasks for the compliance desk. Most run on the beat schedule
# (see celery_app.build_beat_schedule); the admin API can trigger any of
# them on demand.
#
# Tasks:
# - run_daily_reminders: Email reminders at 30/14/7/1 days before due
# - process_pending_notifications: Deliver the scheduled notification queue
# - update_overdue_events: Flag pending events past their due date
# - generate_recurring_events: Next occurrence of completed recurring events
# - generate_weekly_report: Admin summary in the notification bell
# - generate_events_for_new_businesses: Calendars for recent businesses
# - generate_events_for_business: Calendar for one business
# - send_urgent_alert: Immediate reminder for one event
#
# Every task returns a JSON-serializable dict with a "success" flag.
# =============================================================================

import logging
from datetime import datetime
from typing import Any

from celery import shared_task

from lib.utils import parse_datetime

logger = logging.getLogger(__name__)


def _now(now: str | None) -> datetime | None:
    # Task arguments travel as JSON, so instants arrive as ISO strings
    return parse_datetime(now) if now else None


# =============================================================================
# Reminder Tasks
# =============================================================================

@shared_task(bind=True, name="workers.tasks.run_daily_reminders")
def run_daily_reminders(self, now: str | None = None) -> dict[str, Any]:
    """
    Run the daily compliance reminder job.

    Args:
        now: Optional ISO timestamp to run "as of" (admin replays)

    Returns:
        Dict with success and the run counts (checked, sent, skipped, failed)
    """
    from core.services.reminder_service import ReminderService

    try:
        result = ReminderService.run_daily_reminders(now=_now(now))
        return {"success": True, **result.model_dump(mode="json")}

    except Exception as e:
        logger.exception(f"Daily reminder run failed: {e}")
        return {"success": False, "error": str(e)}


@shared_task(bind=True, name="workers.tasks.send_urgent_alert")
def send_urgent_alert(self, event_id: int | str) -> dict[str, Any]:
    """Send an immediate reminder for one event due within three days."""
    from core.services.reminder_service import ReminderService

    try:
        outcome = ReminderService.send_urgent_alert(event_id)
        return {"success": True, "event_id": event_id, **outcome}

    except Exception as e:
        logger.exception(f"Urgent alert for event {event_id} failed: {e}")
        return {"success": False, "event_id": event_id, "error": str(e)}


@shared_task(bind=True, name="workers.tasks.process_pending_notifications")
def process_pending_notifications(self) -> dict[str, Any]:
    """Deliver scheduled notifications whose date has arrived."""
    from core.services.notification_service import NotificationService

    try:
        stats = NotificationService.process_pending()
        return {"success": True, **stats}

    except Exception as e:
        logger.exception(f"Notification queue processing failed: {e}")
        return {"success": False, "error": str(e)}


@shared_task(bind=True, name="workers.tasks.generate_weekly_report")
def generate_weekly_report(self) -> dict[str, Any]:
    """Post the weekly compliance summary to admins."""
    from core.services.reminder_service import ReminderService

    try:
        stats = ReminderService.generate_weekly_report()
        return {"success": True, **stats}

    except Exception as e:
        logger.exception(f"Weekly report failed: {e}")
        return {"success": False, "error": str(e)}


# =============================================================================
# Calendar Maintenance Tasks
# =============================================================================

@shared_task(bind=True, name="workers.tasks.update_overdue_events")
def update_overdue_events(self) -> dict[str, Any]:
    """Flip pending events past their due date to overdue."""
    from core.services.compliance_service import ComplianceService

    try:
        updated = ComplianceService.update_overdue_events()
        return {"success": True, "updated": updated}

    except Exception as e:
        logger.exception(f"Overdue update failed: {e}")
        return {"success": False, "error": str(e)}


@shared_task(bind=True, name="workers.tasks.generate_recurring_events")
def generate_recurring_events(self) -> dict[str, Any]:
    """Create the next occurrence of completed recurring events."""
    from core.services.compliance_service import ComplianceService

    try:
        stats = ComplianceService.generate_recurring_events()
        return {"success": True, **stats}

    except Exception as e:
        logger.exception(f"Recurring event generation failed: {e}")
        return {"success": False, "error": str(e)}


@shared_task(bind=True, name="workers.tasks.generate_events_for_new_businesses")
def generate_events_for_new_businesses(self, days: int = 7) -> dict[str, Any]:
    """Generate calendars for businesses created in the last N days."""
    from core.services.compliance_service import ComplianceService

    try:
        stats = ComplianceService.generate_events_for_new_businesses(days=days)
        return {"success": True, **stats}

    except Exception as e:
        logger.exception(f"New business event generation failed: {e}")
        return {"success": False, "error": str(e)}


@shared_task(bind=True, name="workers.tasks.generate_events_for_business")
def generate_events_for_business(self, business_id: int | str) -> dict[str, Any]:
    """Generate (or top up) the compliance calendar of one business."""
    from core.services.compliance_service import ComplianceService

    try:
        events = ComplianceService.generate_events_for_business(business_id)
        return {
            "success": True,
            "business_id": business_id,
            "events_created": len(events),
            "event_ids": [e.id for e in events],
        }

    except Exception as e:
        logger.exception(f"Event generation for business {business_id} failed: {e}")
        return {"success": False, "business_id": business_id, "error": str(e)}
