# =============================================================================
# app/routers/tasks.py - Background Job Status Endpoints
# =============================================================================
# The admin endpoints can queue compliance jobs on the Celery worker
# (POST /admin/reminders/run?background=true). The returned task_id is
# polled here.
#
# Every compliance task returns a dict with a "success" flag; a task that
# caught its own error finishes as SUCCESS in Celery but is reported here
# as FAILED with the task's error message.
# =============================================================================

import logging
from typing import Annotated, Any

from celery.result import AsyncResult
from fastapi import APIRouter, Depends, HTTPException, Path
from pydantic import BaseModel

from app.auth import require_admin, AuthUser

logger = logging.getLogger(__name__)

router = APIRouter()

STATE_MESSAGES = {
    "PENDING": "Waiting in queue...",
    "STARTED": "Running...",
    "RETRY": "Retrying...",
    "SUCCESS": "Complete",
    "FAILURE": "Failed",
    "REVOKED": "Cancelled",
}


# =============================================================================
# Response Models
# =============================================================================

class JobStatusResponse(BaseModel):
    """State of a queued compliance job."""
    task_id: str
    status: str
    message: str | None = None
    result: dict[str, Any] | None = None
    error: str | None = None


def _lookup(task_id: str) -> AsyncResult:
    from workers.celery_app import celery_app

    try:
        return celery_app.AsyncResult(task_id)
    except Exception as e:
        logger.error(f"Error looking up task {task_id}: {e}")
        raise HTTPException(status_code=503, detail=f"Task backend unavailable. Is Redis running? Error: {e}")


def job_status(task_id: str, state: str, payload: Any) -> JobStatusResponse:
    """
    Translate a Celery state and return value into a JobStatusResponse.

    Example:
        job_status("abc", "SUCCESS", {"success": False, "error": "db down"})
        # status="FAILED", error="db down"
    """
    response = JobStatusResponse(task_id=task_id, status=state, message=STATE_MESSAGES.get(state))

    if state == "SUCCESS":
        result = payload if isinstance(payload, dict) else {"value": payload}
        if result.get("success") is False:
            response.status = "FAILED"
            response.message = "Job reported an error"
            response.error = result.get("error")
        response.result = result

    elif state == "FAILURE":
        response.error = str(payload) if payload else "Unknown error"

    return response


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/{task_id}", response_model=JobStatusResponse)
async def get_task_status(
    task_id: Annotated[str, Path(description="Celery task ID")],
    user: AuthUser = Depends(require_admin),
):
    """
    Status of a queued job.

    - PENDING / STARTED / RETRY: not finished yet
    - SUCCESS: result holds the job's counts
    - FAILED: the job ran but reported an error
    - FAILURE: the worker raised
    """
    result = _lookup(task_id)
    return job_status(task_id, result.status, result.result)


@router.get("/{task_id}/result", response_model=JobStatusResponse)
async def get_task_result(
    task_id: Annotated[str, Path(description="Celery task ID")],
    user: AuthUser = Depends(require_admin),
):
    """
    Result of a finished job.

    Returns 409 while the job is still queued or running.
    """
    result = _lookup(task_id)
    if result.status not in ("SUCCESS", "FAILURE"):
        raise HTTPException(
            status_code=409,
            detail=f"Task {task_id} is not finished (status: {result.status})",
        )
    return job_status(task_id, result.status, result.result)
