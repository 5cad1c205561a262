# =============================================================================
# workers/celery_app.py - Celery Application Configuration
# =============================================================================
# This module creates and configures the Celery application instance,
# including the beat schedule that drives the compliance jobs.
#
# Usage:
#   # Start worker
#   celery -A workers.celery_app worker --loglevel=info
#
#   # Start the scheduler (daily reminders, queue processing, ...)
#   celery -A workers.celery_app beat --loglevel=info
#
#   # Check status
#   celery -A workers.celery_app status
# =============================================================================

import logging

from celery import Celery
from celery.schedules import crontab
from celery.signals import task_failure, task_postrun, task_prerun
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from app.config import settings  # noqa: E402

# Set up logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def build_beat_schedule() -> dict:
    """
    Periodic tasks, in COMPLIANCE_TIMEZONE.

    - Daily reminders at REMINDER_HOUR:00
    - Scheduled notification queue every 15 minutes
    - Overdue flagging every hour
    - Recurring event generation on the 1st of each month at 06:00
    - Weekly admin report on Mondays at 08:00
    - Event generation for new businesses on Sundays at 10:00
    """
    return {
        "daily-compliance-reminders": {
            "task": "workers.tasks.run_daily_reminders",
            "schedule": crontab(minute=0, hour=settings.REMINDER_HOUR),
        },
        "process-pending-notifications": {
            "task": "workers.tasks.process_pending_notifications",
            "schedule": crontab(minute="*/15"),
        },
        "update-overdue-events": {
            "task": "workers.tasks.update_overdue_events",
            "schedule": crontab(minute=0),
        },
        "generate-recurring-events": {
            "task": "workers.tasks.generate_recurring_events",
            "schedule": crontab(minute=0, hour=6, day_of_month=1),
        },
        "weekly-compliance-report": {
            "task": "workers.tasks.generate_weekly_report",
            "schedule": crontab(minute=0, hour=8, day_of_week=1),
        },
        "generate-events-for-new-businesses": {
            "task": "workers.tasks.generate_events_for_new_businesses",
            "schedule": crontab(minute=0, hour=10, day_of_week=0),
        },
    }


def create_celery_app() -> Celery:
    """
    Create and configure Celery application.

    Returns:
        Configured Celery app instance
    """
    redis_url = settings.REDIS_URL

    # Create Celery app
    app = Celery(
        "compliance_worker",
        broker=redis_url,
        backend=redis_url,
        include=["workers.tasks"],  # Auto-discover tasks
    )

    # Load configuration
    app.config_from_object("workers.config:CeleryConfig")
    app.conf.beat_schedule = build_beat_schedule()

    # Log startup
    logger.info(f"Celery app created with broker: {redis_url.split('@')[-1] if '@' in redis_url else redis_url}")

    return app


# Create the Celery app instance
celery_app = create_celery_app()


@celery_app.task(bind=True, name="workers.healthcheck")
def healthcheck(self):
    """
    Simple healthcheck task to verify worker is running.

    Usage:
        from workers.celery_app import healthcheck
        result = healthcheck.delay()
        print(result.get(timeout=5))  # Should return "OK"
    """
    return "OK"


# =============================================================================
# Celery Signals (Lifecycle Hooks)
# =============================================================================

@task_prerun.connect
def task_prerun_handler(sender=None, task_id=None, task=None, args=None, kwargs=None, **extra):
    """Log when a task starts."""
    logger.info(f"Task started: {task.name} [{task_id}]")


@task_postrun.connect
def task_postrun_handler(sender=None, task_id=None, task=None, args=None, kwargs=None, retval=None, state=None, **extra):
    """Log when a task completes."""
    logger.info(f"Task completed: {task.name} [{task_id}] - State: {state}")


@task_failure.connect
def task_failure_handler(sender=None, task_id=None, exception=None, traceback=None, **extra):
    """Log when a task fails."""
    logger.error(f"Task failed: {sender.name} [{task_id}] - Error: {exception}")


# =============================================================================
# CLI Entry Point
# =============================================================================

if __name__ == "__main__":
    celery_app.start()
