# =============================================================================
# app/routers/compliance.py - Compliance Calendar Endpoints
# =============================================================================
# Dashboard, event CRUD, status changes, filing-proof uploads and AI filing
# guidance. All endpoints require authentication; events are only visible
# through businesses the caller owns.
# =============================================================================

import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, Path, Query, UploadFile
from pydantic import BaseModel, Field

from app.auth import get_current_user, AuthUser
from core.models.compliance import (
    CompleteEventRequest,
    ComplianceEvent,
    ComplianceEventCreate,
    ComplianceEventUpdate,
    EventCategory,
    EventStatus,
    StatusUpdateRequest,
)
from core.models.dashboard import DashboardSummary
from core.services.business_service import BusinessService
from core.services.compliance_service import ComplianceService

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class EventListResponse(BaseModel):
    events: list[ComplianceEvent]
    total: int


class EventDeleteResponse(BaseModel):
    event_id: int | str
    message: str = Field(default="Event deleted")


# =============================================================================
# Dashboard
# =============================================================================

@router.get("/dashboard", response_model=DashboardSummary)
async def get_dashboard(
    user: AuthUser = Depends(get_current_user),
):
    """
    Compliance dashboard for the caller.

    Totals per status, events due in the next 30 days, the five nearest
    pending deadlines and per-business event counts.
    """
    return ComplianceService.get_dashboard_data(user.id)


# =============================================================================
# Events
# =============================================================================

@router.get("/events", response_model=EventListResponse)
async def list_events(
    user: AuthUser = Depends(get_current_user),
    business_id: Annotated[str | None, Query(description="Only events of this business")] = None,
    status: Annotated[EventStatus | None, Query(description="Filter by status")] = None,
    category: Annotated[EventCategory | None, Query(description="Filter by category")] = None,
    due_from: Annotated[date | None, Query(description="Due on or after (YYYY-MM-DD)")] = None,
    due_to: Annotated[date | None, Query(description="Due on or before (YYYY-MM-DD)")] = None,
):
    """List the caller's events, ascending by due date."""
    events = ComplianceService.list_events(
        user_id=user.id,
        business_id=business_id,
        status=status,
        category=category.value if category else None,
        due_from=due_from,
        due_to=due_to,
    )
    return EventListResponse(events=events, total=len(events))


@router.post("/events", response_model=ComplianceEvent, status_code=201)
async def create_event(
    request: ComplianceEventCreate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Add a custom event to one of the caller's businesses.

    Reminder notifications are scheduled at the requested days before the
    due date (30/14/7/1 by default).
    """
    return ComplianceService.create_event(user.id, request)


@router.get("/events/{event_id}", response_model=ComplianceEvent)
async def get_event(
    event_id: Annotated[str, Path(description="Event ID")],
    user: AuthUser = Depends(get_current_user),
):
    return ComplianceService.get_event(event_id, user_id=user.id)


@router.patch("/events/{event_id}", response_model=ComplianceEvent)
async def update_event(
    event_id: Annotated[str, Path(description="Event ID")],
    request: ComplianceEventUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Edit an event. Omitted fields are left unchanged.

    Moving the due date recomputes the reminder dates.
    """
    return ComplianceService.update_event(event_id, request, user_id=user.id)


@router.delete("/events/{event_id}", response_model=EventDeleteResponse)
async def delete_event(
    event_id: Annotated[str, Path(description="Event ID")],
    user: AuthUser = Depends(get_current_user),
):
    """Delete an event and cancel its pending notifications."""
    ComplianceService.delete_event(event_id, user_id=user.id)
    return EventDeleteResponse(event_id=event_id)


# =============================================================================
# Status Changes
# =============================================================================

@router.patch("/events/{event_id}/status", response_model=ComplianceEvent)
async def update_event_status(
    event_id: Annotated[str, Path(description="Event ID")],
    request: StatusUpdateRequest,
    user: AuthUser = Depends(get_current_user),
):
    """
    Change an event's status.

    Allowed changes:
    - pending -> completed, dismissed, overdue
    - overdue -> completed, dismissed
    - completed -> pending (reopen)
    - dismissed is final
    """
    return ComplianceService.update_status(event_id, request.status, user_id=user.id)


@router.post("/events/{event_id}/complete", response_model=ComplianceEvent)
async def complete_event(
    event_id: Annotated[str, Path(description="Event ID")],
    user: AuthUser = Depends(get_current_user),
    request: CompleteEventRequest | None = None,
):
    """
    Mark an event as filed.

    The completion date defaults to today. Pending reminders for the event
    are cancelled.
    """
    request = request or CompleteEventRequest()
    return ComplianceService.mark_completed(
        event_id,
        completed_on=request.completed_date,
        notes=request.notes,
        user_id=user.id,
    )


# =============================================================================
# Documents
# =============================================================================

@router.post("/events/{event_id}/documents", response_model=ComplianceEvent)
async def upload_document(
    event_id: Annotated[str, Path(description="Event ID")],
    file: Annotated[UploadFile, File(description="Filing proof (PDF or image)")],
    user: AuthUser = Depends(get_current_user),
):
    """
    Upload a filing-proof document for an event.

    The stored path is recorded on the event (document_path).
    """
    content = await file.read()
    logger.info(f"Document upload for event {event_id}: {file.filename} ({len(content)} bytes)")

    return ComplianceService.attach_document(
        event_id,
        filename=file.filename or "document",
        content=content,
        user_id=user.id,
    )


# =============================================================================
# Filing Guidance
# =============================================================================

@router.get("/events/{event_id}/guidance")
async def get_filing_guidance(
    event_id: Annotated[str, Path(description="Event ID")],
    user: AuthUser = Depends(get_current_user),
):
    """
    Step-by-step guidance for completing an event, generated by the
    compliance advisor.
    """
    from agents.compliance_advisor import AdvisorError, ComplianceAdvisor

    event = ComplianceService.get_event(event_id, user_id=user.id)
    business = BusinessService.get_business(event.business_entity_id)

    try:
        guidance = ComplianceAdvisor().advise(event, business)
    except AdvisorError as e:
        logger.warning(f"Guidance for event {event.id} failed: [{e.code}] {e.message}")
        raise HTTPException(
            status_code=503 if e.code == "OPENAI_NOT_CONFIGURED" else 502,
            detail=e.message,
        )

    return {
        "event_id": event.id,
        "guidance": guidance.model_dump(),
    }
