#!/usr/bin/env python3
# =============================================================================
# scripts/start_beat.py - Celery Beat Entry Point
# =============================================================================
# Starts the scheduler that enqueues the compliance jobs (daily reminders,
# notification queue, overdue flagging, recurring events, weekly report).
# Run exactly one beat process per deployment.
#
# Usage:
#   python scripts/start_beat.py
#
#   # Or use Celery CLI directly
#   celery -A workers.celery_app beat --loglevel=info
# =============================================================================

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.config import settings
from workers.celery_app import celery_app


def main():
    """Start the Celery beat scheduler."""
    print("=" * 60)
    print("ParaFort Compliance Scheduler")
    print("=" * 60)
    print()
    print(f"Timezone: {settings.COMPLIANCE_TIMEZONE}")
    for name, entry in sorted(celery_app.conf.beat_schedule.items()):
        print(f"  {name:<40} {entry['schedule']}")
    print()
    print("Press Ctrl+C to stop")
    print()

    celery_app.start(["beat", "--loglevel=info"])


if __name__ == "__main__":
    main()
