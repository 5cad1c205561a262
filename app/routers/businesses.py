# =============================================================================
# app/routers/businesses.py - Business Entity Endpoints
# =============================================================================
# Registers businesses with the compliance desk and exposes their calendars.
# All endpoints require authentication and only see the caller's businesses.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query
from pydantic import BaseModel, Field

from app.auth import get_current_user, AuthUser
from core.models.business import BusinessCreate, BusinessEntity
from core.models.compliance import ComplianceEvent
from core.services.business_service import BusinessService
from core.services.compliance_service import ComplianceService

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class BusinessCreateResponse(BaseModel):
    """Response when registering a business."""
    business: BusinessEntity
    events_created: int = Field(..., example=7)
    message: str = Field(default="Business created and compliance calendar generated")


class BusinessListResponse(BaseModel):
    businesses: list[BusinessEntity]
    total: int


class GenerateEventsResponse(BaseModel):
    business_id: int | str
    events_created: int
    events: list[ComplianceEvent]


# =============================================================================
# Endpoints
# =============================================================================

@router.post("", response_model=BusinessCreateResponse, status_code=201)
async def create_business(
    request: BusinessCreate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Register a business.

    The compliance calendar (federal, state and maintenance filings that
    apply to the entity type and state) is generated immediately.
    """
    business = BusinessService.create_business(user_id=user.id, payload=request)
    events = ComplianceService.generate_events_for_business(business.id, business=business)

    return BusinessCreateResponse(business=business, events_created=len(events))


@router.get("", response_model=BusinessListResponse)
async def list_businesses(
    user: AuthUser = Depends(get_current_user),
):
    """List the caller's businesses, newest first."""
    businesses = BusinessService.list_businesses(user.id)
    return BusinessListResponse(businesses=businesses, total=len(businesses))


@router.get("/{business_id}", response_model=BusinessEntity)
async def get_business(
    business_id: Annotated[str, Path(description="Business ID")],
    user: AuthUser = Depends(get_current_user),
):
    """Get one of the caller's businesses."""
    return BusinessService.get_business(business_id, user_id=user.id)


@router.get("/{business_id}/events", response_model=list[ComplianceEvent])
async def get_upcoming_events(
    business_id: Annotated[str, Path(description="Business ID")],
    user: AuthUser = Depends(get_current_user),
    days: Annotated[int, Query(ge=1, le=730, description="Look-ahead window in days")] = 90,
):
    """
    Pending events of a business due in the next N days.

    Sorted by due date, soonest first.
    """
    return ComplianceService.get_upcoming_events(business_id, days=days, user_id=user.id)


@router.post("/{business_id}/generate-events", response_model=GenerateEventsResponse)
async def generate_events(
    business_id: Annotated[str, Path(description="Business ID")],
    user: AuthUser = Depends(get_current_user),
):
    """
    Generate (or top up) the compliance calendar of a business.

    Safe to repeat: occurrences that already exist are skipped.
    """
    business = BusinessService.get_business(business_id, user_id=user.id)
    events = ComplianceService.generate_events_for_business(business.id, business=business)

    return GenerateEventsResponse(
        business_id=business.id,
        events_created=len(events),
        events=events,
    )
