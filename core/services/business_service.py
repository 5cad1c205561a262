# =============================================================================
# core/services/business_service.py - Business Entity Logic
# =============================================================================
# Handles registering businesses with the compliance desk and looking them
# up with ownership checks. Separates HTTP concerns from database logic.
# =============================================================================

import logging
from datetime import date
from uuid import UUID

from lib.supabase_client import SupabaseClient
from core.models.business import BusinessCreate, BusinessEntity
from app.exceptions import BusinessNotFoundError

logger = logging.getLogger(__name__)


class BusinessService:
    """
    Service for business entity operations.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def create_business(
        user_id: UUID | str,
        payload: BusinessCreate,
        today: date | None = None,
    ) -> BusinessEntity:
        """
        Register a business for a user.

        The formation date defaults to today. Compliance events are not
        generated here; callers follow up with
        ComplianceService.generate_events_for_business.

        Returns:
            The created BusinessEntity
        """
        formation_date = payload.formation_date or today or date.today()

        data = {
            "user_id": str(user_id),
            "name": payload.legal_name,
            "entity_type": payload.entity_type.value,
            "state": payload.state,
            "status": "active",
            "filed_date": formation_date.isoformat(),
            "industry": payload.industry,
            "contact_email": payload.contact_email,
            "contact_phone": payload.contact_phone,
        }

        row = SupabaseClient.insert_business(data)
        logger.info(f"Created business: {row['id']} for user: {user_id}")
        return BusinessEntity.from_db_row(row)

    @staticmethod
    def get_business(
        business_id: str | int,
        user_id: UUID | str | None = None,
    ) -> BusinessEntity:
        """
        Get a business by ID.

        Args:
            business_id: The business ID
            user_id: If provided, verify the business belongs to this user

        Raises:
            BusinessNotFoundError: If it doesn't exist or user doesn't own it
        """
        row = SupabaseClient.fetch_business(business_id)

        if not row:
            raise BusinessNotFoundError(str(business_id))

        # Don't reveal that the business exists - return not found
        if user_id and str(row.get("user_id")) != str(user_id):
            raise BusinessNotFoundError(str(business_id))

        return BusinessEntity.from_db_row(row)

    @staticmethod
    def list_businesses(user_id: UUID | str) -> list[BusinessEntity]:
        """All businesses owned by a user, newest first."""
        rows = SupabaseClient.fetch_businesses(user_id=user_id)
        return [BusinessEntity.from_db_row(row) for row in rows]

    @staticmethod
    def business_ids_for_user(user_id: UUID | str) -> list[int | str]:
        return [b.id for b in BusinessService.list_businesses(user_id)]
