# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides specialized methods for the compliance tables:
# - business_entities / users: who owes what, and who gets reminded
# - compliance_calendar: the events themselves
# - compliance_notifications: scheduled deliveries per event
# - notifications: in-app notification bell
# - reminder_runs: history of the daily reminder job
#
# Every method returns plain dicts (rows as PostgREST returns them); the
# service layer turns them into pydantic models.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   events = SupabaseClient.fetch_events_due_on(date(2025, 4, 15))
# =============================================================================

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings
from lib.utils import ApplicationError, normalize_id

# Set up logging for this module
logger = logging.getLogger(__name__)

BUSINESS_TABLE = "business_entities"
USERS_TABLE = "users"
CALENDAR_TABLE = "compliance_calendar"
SCHEDULED_NOTIFICATIONS_TABLE = "compliance_notifications"
IN_APP_NOTIFICATIONS_TABLE = "notifications"
REMINDER_RUNS_TABLE = "reminder_runs"


class SupabaseClientError(ApplicationError):
    """
    Error during Supabase operations.

    Provides actionable error messages:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, suggestion=suggestion, details=details)


def _is_not_found(error: Exception) -> bool:
    # PostgREST code for .single() with no rows
    return "PGRST116" in str(error)


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        business = SupabaseClient.fetch_business(12)
        events = SupabaseClient.fetch_events(business_ids=[12], status="pending")
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        Ownership checks therefore happen in the service layer.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def _id(cls, value: str | int | UUID) -> str:
        return normalize_id(value)

    @classmethod
    def _fetch_one(
        cls,
        table: str,
        row_id: str | int | UUID,
        code: str,
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """Fetch one row by id; None when it does not exist."""
        client = cls.get_client()
        row_id_str = cls._id(row_id)

        try:
            response = (
                client.table(table)
                .select(columns)
                .eq("id", row_id_str)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if _is_not_found(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch {table} row: {e}",
                code=code,
                suggestion=f"Check that the id exists and the {table} table is accessible",
                details={"table": table, "id": row_id_str}
            )

    @classmethod
    def _insert(cls, table: str, data: dict[str, Any] | list[dict[str, Any]], code: str) -> list[dict[str, Any]]:
        client = cls.get_client()

        try:
            response = client.table(table).insert(data).execute()
            if response.data:
                return response.data
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA",
                details={"table": table}
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert into {table}: {e}",
                code=code,
                details={"table": table}
            )

    @classmethod
    def _update(
        cls,
        table: str,
        row_id: str | int | UUID,
        data: dict[str, Any],
        code: str,
    ) -> dict[str, Any] | None:
        client = cls.get_client()
        row_id_str = cls._id(row_id)

        try:
            response = (
                client.table(table)
                .update(data)
                .eq("id", row_id_str)
                .execute()
            )
            return response.data[0] if response.data else None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update {table} row: {e}",
                code=code,
                details={"table": table, "id": row_id_str, "fields": sorted(data)}
            )

    # -------------------------------------------------------------------------
    # Businesses & Users
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_business(cls, business_id: str | int) -> dict[str, Any] | None:
        """Fetch a business entity by ID, or None if not found."""
        return cls._fetch_one(BUSINESS_TABLE, business_id, "FETCH_BUSINESS_FAILED")

    @classmethod
    def fetch_businesses(
        cls,
        user_id: str | UUID | None = None,
        created_since: datetime | None = None,
    ) -> list[dict[str, Any]]:
        """
        Fetch business entities.

        Args:
            user_id: Only businesses owned by this user (all when None)
            created_since: Only businesses created at or after this instant

        Returns:
            List of business dicts, newest first
        """
        client = cls.get_client()

        try:
            query = client.table(BUSINESS_TABLE).select("*")
            if user_id is not None:
                query = query.eq("user_id", cls._id(user_id))
            if created_since is not None:
                query = query.gte("created_at", created_since.isoformat())
            response = query.order("created_at", desc=True).execute()

            businesses = response.data or []
            logger.debug(f"Fetched {len(businesses)} businesses")
            return businesses

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch businesses: {e}",
                code="FETCH_BUSINESSES_FAILED",
                details={"user_id": str(user_id) if user_id else None}
            )

    @classmethod
    def insert_business(cls, data: dict[str, Any]) -> dict[str, Any]:
        return cls._insert(BUSINESS_TABLE, data, "INSERT_BUSINESS_FAILED")[0]

    @classmethod
    def fetch_user(cls, user_id: str | UUID) -> dict[str, Any] | None:
        """Fetch a user profile (email, first_name, last_name, role)."""
        return cls._fetch_one(
            USERS_TABLE,
            user_id,
            "FETCH_USER_FAILED",
            columns="id, email, first_name, last_name, phone, role",
        )

    @classmethod
    def fetch_admin_users(cls) -> list[dict[str, Any]]:
        """Users with the admin or super_admin role."""
        client = cls.get_client()

        try:
            response = (
                client.table(USERS_TABLE)
                .select("id, email, first_name, role")
                .in_("role", ["admin", "super_admin"])
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch admin users: {e}",
                code="FETCH_ADMINS_FAILED"
            )

    # -------------------------------------------------------------------------
    # Compliance Calendar
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_event(cls, event_id: str | int) -> dict[str, Any] | None:
        """Fetch a compliance calendar event by ID, or None if not found."""
        return cls._fetch_one(CALENDAR_TABLE, event_id, "FETCH_EVENT_FAILED")

    @classmethod
    def fetch_events(
        cls,
        business_ids: list[str | int] | None = None,
        status: str | list[str] | None = None,
        category: str | None = None,
        due_from: date | None = None,
        due_to: date | None = None,
        due_before: date | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        Fetch calendar events, ordered by due date ascending.

        Args:
            business_ids: Restrict to these businesses (all when None)
            status: One status or a list of statuses
            category: Event category
            due_from / due_to: Inclusive due date window
            due_before: Due date strictly before this date
            limit: Maximum rows

        Returns:
            List of event dicts
        """
        if business_ids is not None and not business_ids:
            return []

        client = cls.get_client()

        try:
            query = client.table(CALENDAR_TABLE).select("*")
            if business_ids is not None:
                query = query.in_("business_entity_id", [cls._id(b) for b in business_ids])
            if isinstance(status, list):
                query = query.in_("status", status)
            elif status is not None:
                query = query.eq("status", status)
            if category is not None:
                query = query.eq("category", category)
            if due_from is not None:
                query = query.gte("due_date", due_from.isoformat())
            if due_to is not None:
                query = query.lte("due_date", due_to.isoformat())
            if due_before is not None:
                query = query.lt("due_date", due_before.isoformat())
            query = query.order("due_date")
            if limit is not None:
                query = query.limit(limit)

            response = query.execute()
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch compliance events: {e}",
                code="FETCH_EVENTS_FAILED",
                suggestion="Check the filter values and that compliance_calendar is accessible",
                details={"status": status, "category": category}
            )

    @classmethod
    def fetch_events_due_on(cls, due: date, status: str = "pending") -> list[dict[str, Any]]:
        """Events with the given status due exactly on a date."""
        return cls.fetch_events(status=status, due_from=due, due_to=due)

    @classmethod
    def insert_events(cls, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if not rows:
            return []
        return cls._insert(CALENDAR_TABLE, rows, "INSERT_EVENTS_FAILED")

    @classmethod
    def update_event(cls, event_id: str | int, data: dict[str, Any]) -> dict[str, Any] | None:
        return cls._update(CALENDAR_TABLE, event_id, data, "UPDATE_EVENT_FAILED")

    @classmethod
    def delete_event(cls, event_id: str | int) -> bool:
        client = cls.get_client()
        event_id_str = cls._id(event_id)

        try:
            response = client.table(CALENDAR_TABLE).delete().eq("id", event_id_str).execute()
            return bool(response.data)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete compliance event: {e}",
                code="DELETE_EVENT_FAILED",
                details={"event_id": event_id_str}
            )

    @classmethod
    def mark_overdue(cls, before: date) -> list[dict[str, Any]]:
        """Flip every pending event due before the given date to overdue."""
        client = cls.get_client()

        try:
            response = (
                client.table(CALENDAR_TABLE)
                .update({"status": "overdue"})
                .eq("status", "pending")
                .lt("due_date", before.isoformat())
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update overdue events: {e}",
                code="UPDATE_OVERDUE_FAILED",
                details={"before": before.isoformat()}
            )

    # -------------------------------------------------------------------------
    # Scheduled Notifications
    # -------------------------------------------------------------------------

    @classmethod
    def insert_scheduled_notifications(cls, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if not rows:
            return []
        return cls._insert(SCHEDULED_NOTIFICATIONS_TABLE, rows, "INSERT_NOTIFICATIONS_FAILED")

    @classmethod
    def fetch_due_notifications(cls, today: date) -> list[dict[str, Any]]:
        """Pending scheduled notifications whose date has arrived."""
        client = cls.get_client()

        try:
            response = (
                client.table(SCHEDULED_NOTIFICATIONS_TABLE)
                .select("*")
                .eq("status", "pending")
                .lte("scheduled_date", today.isoformat())
                .order("scheduled_date")
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch pending notifications: {e}",
                code="FETCH_PENDING_NOTIFICATIONS_FAILED",
                details={"today": today.isoformat()}
            )

    @classmethod
    def update_scheduled_notification(cls, notification_id: str | int, data: dict[str, Any]) -> dict[str, Any] | None:
        return cls._update(SCHEDULED_NOTIFICATIONS_TABLE, notification_id, data, "UPDATE_NOTIFICATION_FAILED")

    @classmethod
    def cancel_scheduled_notifications(cls, event_id: str | int) -> int:
        """Cancel an event's pending notifications; returns how many."""
        client = cls.get_client()
        event_id_str = cls._id(event_id)

        try:
            response = (
                client.table(SCHEDULED_NOTIFICATIONS_TABLE)
                .update({"status": "cancelled"})
                .eq("compliance_calendar_id", event_id_str)
                .eq("status", "pending")
                .execute()
            )
            return len(response.data or [])

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to cancel notifications: {e}",
                code="CANCEL_NOTIFICATIONS_FAILED",
                details={"event_id": event_id_str}
            )

    @classmethod
    def fetch_scheduled_notifications(
        cls,
        business_id: str | int,
        channel: str,
        since: date,
    ) -> list[dict[str, Any]]:
        """One business's notifications on a channel scheduled since a date, newest first."""
        client = cls.get_client()

        try:
            response = (
                client.table(SCHEDULED_NOTIFICATIONS_TABLE)
                .select("*")
                .eq("business_entity_id", cls._id(business_id))
                .eq("notification_type", channel)
                .gte("scheduled_date", since.isoformat())
                .order("scheduled_date", desc=True)
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch business notifications: {e}",
                code="FETCH_NOTIFICATIONS_FAILED",
                details={"business_id": str(business_id), "channel": channel}
            )

    # -------------------------------------------------------------------------
    # In-App Notifications
    # -------------------------------------------------------------------------

    @classmethod
    def insert_in_app_notification(cls, data: dict[str, Any]) -> dict[str, Any]:
        return cls._insert(IN_APP_NOTIFICATIONS_TABLE, data, "INSERT_IN_APP_NOTIFICATION_FAILED")[0]

    @classmethod
    def fetch_in_app_notification(cls, notification_id: str | int) -> dict[str, Any] | None:
        return cls._fetch_one(IN_APP_NOTIFICATIONS_TABLE, notification_id, "FETCH_IN_APP_NOTIFICATION_FAILED")

    @classmethod
    def fetch_in_app_notifications(
        cls,
        user_id: str | UUID,
        unread_only: bool = False,
        limit: int = 50,
    ) -> list[dict[str, Any]]:
        """A user's in-app notifications, newest first."""
        client = cls.get_client()

        try:
            query = (
                client.table(IN_APP_NOTIFICATIONS_TABLE)
                .select("*")
                .eq("user_id", cls._id(user_id))
            )
            if unread_only:
                query = query.eq("is_read", False)
            response = query.order("created_at", desc=True).limit(limit).execute()
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch notifications: {e}",
                code="FETCH_IN_APP_NOTIFICATIONS_FAILED",
                details={"user_id": str(user_id)}
            )

    @classmethod
    def mark_in_app_notification_read(cls, notification_id: str | int) -> dict[str, Any] | None:
        return cls._update(
            IN_APP_NOTIFICATIONS_TABLE,
            notification_id,
            {"is_read": True},
            "MARK_READ_FAILED",
        )

    # -------------------------------------------------------------------------
    # Reminder Runs
    # -------------------------------------------------------------------------

    @classmethod
    def insert_reminder_run(cls, data: dict[str, Any]) -> dict[str, Any]:
        return cls._insert(REMINDER_RUNS_TABLE, data, "INSERT_REMINDER_RUN_FAILED")[0]

    @classmethod
    def fetch_last_reminder_run(cls) -> dict[str, Any] | None:
        """Most recent reminder run, or None if the job never ran."""
        client = cls.get_client()

        try:
            response = (
                client.table(REMINDER_RUNS_TABLE)
                .select("*")
                .order("started_at", desc=True)
                .limit(1)
                .execute()
            )
            rows = response.data or []
            return rows[0] if rows else None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch last reminder run: {e}",
                code="FETCH_REMINDER_RUN_FAILED"
            )
