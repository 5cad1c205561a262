# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# This package contains the Celery configuration, the beat schedule and the
# task definitions for the compliance jobs.
#
# Components:
# - celery_app.py: Celery application and beat schedule
# - tasks.py: Task definitions (reminders, notification queue, maintenance)
# - config.py: Worker-specific settings
#
# Usage:
#   # Start worker and scheduler
#   celery -A workers.celery_app worker --loglevel=info
#   celery -A workers.celery_app beat --loglevel=info
#
#   # Submit task (from API)
#   from workers.tasks import run_daily_reminders
#   result = run_daily_reminders.delay()
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
