# =============================================================================
# core/models/notification.py - Notification Schemas
# =============================================================================
# Two kinds of notification exist:
# - ComplianceNotification: a scheduled delivery (email / sms / dashboard)
#   tied to one compliance event, rows of compliance_notifications
# - InAppNotification: a message in the user's notification bell,
#   rows of the notifications table
#
# Scheduled delivery flow:
#   pending -> sent
#          \-> pending (retry, attempts + 1) -> failed (attempts exhausted)
#          \-> cancelled (event completed before delivery)
# =============================================================================

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from lib.utils import parse_date, parse_datetime


class NotificationChannel(str, Enum):
    EMAIL = "email"
    DASHBOARD = "dashboard"
    SMS = "sms"


class NotificationStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
    CANCELLED = "cancelled"


class ComplianceNotification(BaseModel):
    """A row of the compliance_notifications table."""

    id: int | str
    business_entity_id: int | str
    compliance_calendar_id: int | str | None = None
    notification_type: NotificationChannel
    title: str
    message: str
    scheduled_date: date
    sent_date: datetime | None = None
    status: NotificationStatus = NotificationStatus.PENDING
    delivery_attempts: int = 0
    recipient_email: str | None = None
    recipient_phone: str | None = None
    created_at: datetime | None = None

    @field_validator("scheduled_date", mode="before")
    @classmethod
    def _parse_scheduled(cls, value: Any) -> date | None:
        return parse_date(value)

    @field_validator("sent_date", "created_at", mode="before")
    @classmethod
    def _parse_timestamps(cls, value: Any) -> datetime | None:
        return parse_datetime(value)

    @field_validator("delivery_attempts", mode="before")
    @classmethod
    def _null_attempts(cls, value: Any) -> int:
        return value or 0

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> "ComplianceNotification":
        return cls.model_validate(row)


class InAppNotification(BaseModel):
    """
    A row of the notifications table (the client's notification bell).

    Example:
        {
            "id": 7,
            "user_id": "550e8400-...",
            "type": "compliance_reminder",
            "category": "compliance",
            "title": "Due in 7 days: Annual Report Filing",
            "message": "Acme Widgets LLC: File annual report with Secretary of State.",
            "priority": "high",
            "action_url": "/compliance-dashboard",
            "is_read": false
        }
    """

    id: int | str
    user_id: str
    type: str
    category: str = "compliance"
    title: str
    message: str
    priority: str = "medium"
    action_url: str | None = None
    is_read: bool = False
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None

    @field_validator("created_at", mode="before")
    @classmethod
    def _parse_created(cls, value: Any) -> datetime | None:
        return parse_datetime(value)

    @field_validator("metadata", mode="before")
    @classmethod
    def _null_metadata(cls, value: Any) -> dict[str, Any]:
        return value or {}


class InAppNotificationList(BaseModel):
    notifications: list[InAppNotification] = Field(default_factory=list)
    unread_count: int = Field(default=0, ge=0)
