# =============================================================================
# core/models/business.py - Business Entity Schemas
# =============================================================================
# These models define the API contract for business entities:
# - EntityType: Legal structure of the business (drives which filings apply)
# - BusinessCreate: Input for registering a business with the compliance desk
# - BusinessEntity: A row of the business_entities table
#
# A business belongs to exactly one user. Its entity type, state and
# formation date decide which compliance events are generated for it.
# =============================================================================

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from lib.utils import parse_date


class EntityType(str, Enum):
    """
    Legal structure of a business.

    Values match the labels stored by the formation workflow.
    """
    LLC = "LLC"
    CORPORATION = "Corporation"
    S_CORP = "S-Corp"
    C_CORP = "C-Corp"
    PROFESSIONAL_CORPORATION = "Professional Corporation"
    SOLE_PROPRIETORSHIP = "Sole Proprietorship"

    @property
    def is_corporation(self) -> bool:
        """True for every structure taxed or filed as a corporation."""
        return self in (
            EntityType.CORPORATION,
            EntityType.S_CORP,
            EntityType.C_CORP,
            EntityType.PROFESSIONAL_CORPORATION,
        )


class BusinessCreate(BaseModel):
    """
    Schema for registering a business.

    Creating a business immediately generates its compliance calendar.

    Example:
        {
            "legal_name": "Acme Widgets LLC",
            "entity_type": "LLC",
            "state": "de",
            "formation_date": "2024-03-10",
            "contact_email": "owner@acme.test"
        }
    """

    legal_name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Registered legal name"
    )

    entity_type: EntityType = Field(
        ...,
        description="Legal structure (LLC, Corporation, S-Corp, ...)"
    )

    # Two-letter postal code of the state of formation
    state: str = Field(
        ...,
        min_length=2,
        max_length=2,
        description="State of incorporation (two-letter code)"
    )

    formation_date: date | None = Field(
        default=None,
        description="Date the entity was filed; defaults to today"
    )

    industry: str | None = Field(
        default=None,
        max_length=120,
        description="Industry description"
    )

    contact_email: str | None = Field(
        default=None,
        max_length=255,
        description="Where compliance reminders go if the owner has no email"
    )

    contact_phone: str | None = Field(
        default=None,
        max_length=20,
        description="E.164 phone number for SMS reminders"
    )

    @field_validator("state")
    @classmethod
    def _upper_state(cls, value: str) -> str:
        value = value.strip().upper()
        if not value.isalpha():
            raise ValueError("state must be a two-letter code")
        return value


class BusinessEntity(BaseModel):
    """
    A row of the business_entities table.

    Only the columns the compliance desk reads are modelled; the formation
    workflow stores many more.
    """

    id: int | str
    user_id: str | None = None
    name: str | None = None
    entity_type: str | None = None
    state: str | None = None
    status: str | None = None
    filed_date: date | None = None
    industry: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    created_at: datetime | None = None

    @field_validator("filed_date", mode="before")
    @classmethod
    def _parse_filed_date(cls, value: Any) -> date | None:
        return parse_date(value)

    @property
    def legal_name(self) -> str:
        return self.name or "your business"

    @property
    def entity_type_enum(self) -> EntityType | None:
        """Entity type as an enum, or None for labels outside the catalog."""
        try:
            return EntityType(self.entity_type)
        except ValueError:
            return None

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> "BusinessEntity":
        return cls.model_validate(row)
