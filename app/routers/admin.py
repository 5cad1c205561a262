# =============================================================================
# app/routers/admin.py - Reminder Administration Endpoints
# =============================================================================
# Manual controls for the scheduled compliance jobs. Every endpoint requires
# the admin role.
#
# The jobs normally run on the Celery beat schedule; these endpoints run
# them on demand. POST /run accepts ?background=true to queue the run on
# the worker instead of waiting for it.
#
# The batch endpoints are plain def handlers: FastAPI runs them in its
# threadpool, so a long reminder run (SendGrid calls plus the pause between
# sends) never holds the event loop.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from pydantic import BaseModel

from app.auth import require_admin, AuthUser
from core.models.dashboard import ReminderRunResult, ReminderStatistics, ReminderStatus
from core.services.compliance_service import ComplianceService
from core.services.reminder_service import ReminderService

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class QueuedRunResponse(BaseModel):
    task_id: str
    status: str
    message: str


class OverdueUpdateResponse(BaseModel):
    updated: int


class RecurringGenerationResponse(BaseModel):
    checked: int
    created: int
    errors: int


class UrgentAlertResponse(BaseModel):
    event_id: str
    sent: bool
    reason: str
    days_until_due: int


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/run", response_model=ReminderRunResult | QueuedRunResponse)
def run_reminders(
    user: AuthUser = Depends(require_admin),
    background: Annotated[bool, Query(description="Queue the run on the Celery worker")] = False,
):
    """
    Run the daily reminder job now.

    Events already reminded for their current interval (or reminded in the
    last 24 hours) are skipped, so a manual run never double-sends.
    """
    logger.info(f"Manual reminder run requested by {user.id} (background={background})")

    if background:
        try:
            from workers.tasks import run_daily_reminders

            task = run_daily_reminders.delay()
        except Exception as e:
            logger.error(f"Failed to queue reminder run: {e}")
            raise HTTPException(
                status_code=503,
                detail=f"Failed to queue reminder run. Is Redis running? Error: {e}",
            )

        return QueuedRunResponse(
            task_id=task.id,
            status="PENDING",
            message="Reminder run queued. Use GET /api/v1/tasks/{task_id} to check status.",
        )

    return ReminderService.run_daily_reminders()


@router.get("/status", response_model=ReminderStatus)
async def get_reminder_status(
    user: AuthUser = Depends(require_admin),
):
    """Schedule, timezone, reminder intervals and the last run."""
    return ReminderService.get_status()


@router.get("/statistics", response_model=ReminderStatistics)
async def get_reminder_statistics(
    user: AuthUser = Depends(require_admin),
):
    """Event counts and how many events would get a reminder today."""
    return ReminderService.get_statistics()


@router.post("/update-overdue", response_model=OverdueUpdateResponse)
def update_overdue(
    user: AuthUser = Depends(require_admin),
):
    """Flip pending events past their due date to overdue."""
    return OverdueUpdateResponse(updated=ComplianceService.update_overdue_events())


@router.post("/generate-recurring", response_model=RecurringGenerationResponse)
def generate_recurring(
    user: AuthUser = Depends(require_admin),
):
    """Create the next occurrence of completed recurring events."""
    return RecurringGenerationResponse(**ComplianceService.generate_recurring_events())


@router.post("/events/{event_id}/urgent-alert", response_model=UrgentAlertResponse)
async def send_urgent_alert(
    event_id: Annotated[str, Path(description="Event ID")],
    user: AuthUser = Depends(require_admin),
):
    """
    Send an immediate reminder for an event due within 3 days.

    reason is one of: sent, sent_unrecorded, not_pending, not_urgent,
    sent_recently, no_recipient.
    """
    outcome = ReminderService.send_urgent_alert(event_id)
    return UrgentAlertResponse(event_id=event_id, **outcome)
