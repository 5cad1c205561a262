#!/usr/bin/env python3
# =============================================================================
# scripts/run_reminders.py - Run the Reminder Job Once
# =============================================================================
# Runs the daily reminder job in-process, without Redis or Celery. Useful
# for cron-only deployments and for checking a deployment by hand.
#
# Usage:
#   python scripts/run_reminders.py                 # send reminders now
#   python scripts/run_reminders.py --stats         # only print statistics
#   python scripts/run_reminders.py --overdue       # also flag overdue events
# =============================================================================

import argparse
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from app.config import settings  # noqa: E402
from core.services.compliance_service import ComplianceService  # noqa: E402
from core.services.reminder_service import ReminderService  # noqa: E402

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("run_reminders")


def main() -> int:
    parser = argparse.ArgumentParser(description="Run the compliance reminder job once")
    parser.add_argument("--stats", action="store_true", help="Print statistics without sending")
    parser.add_argument("--overdue", action="store_true", help="Flag overdue events before sending")
    args = parser.parse_args()

    if args.stats:
        stats = ReminderService.get_statistics()
        print(stats.model_dump_json(indent=2))
        return 0

    if args.overdue:
        updated = ComplianceService.update_overdue_events()
        logger.info(f"Flagged {updated} events overdue")

    result = ReminderService.run_daily_reminders()
    print(result.model_dump_json(indent=2))
    return 1 if result.failed else 0


if __name__ == "__main__":
    sys.exit(main())
