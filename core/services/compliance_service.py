# =============================================================================
# core/services/compliance_service.py - Compliance Calendar Logic
# =============================================================================
# Handles the compliance calendar of each business:
# - Generating events from the template catalog (with dedupe)
# - CRUD for custom events, with ownership checks
# - Status changes (completion cancels pending notifications)
# - Periodic maintenance: overdue flagging and recurring regeneration
# - Dashboard aggregation and filing-proof documents
# =============================================================================

import json
import logging
from collections import Counter
from datetime import date, datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from core.compliance.deadlines import due_dates_for, reminder_dates, roll_forward, today_in
from core.compliance.templates import ComplianceTemplate, templates_for
from core.models.business import BusinessEntity
from core.models.compliance import (
    STATUS_TRANSITIONS,
    ComplianceEvent,
    ComplianceEventCreate,
    ComplianceEventUpdate,
    EventStatus,
    Frequency,
)
from core.models.dashboard import BusinessSummary, DashboardSummary
from core.services.business_service import BusinessService
from core.services.notification_service import NotificationService
from core.services.storage_service import StorageService
from app.config import settings
from app.exceptions import (
    EventAlreadyCompletedError,
    EventNotFoundError,
    InvalidStatusTransitionError,
)

logger = logging.getLogger(__name__)

# Events shown in the "nearest deadlines" list of the dashboard
NEAREST_EVENTS_LIMIT = 5


def _today() -> date:
    return today_in(settings.COMPLIANCE_TIMEZONE)


def dedupe_key(event_type: str, due: date, frequency: Frequency | str | None) -> tuple:
    """
    Key under which two occurrences count as the same filing.

    Monthly and quarterly filings repeat within a year, so their exact due
    date is part of the key; everything else is one filing per year.
    """
    if frequency in (Frequency.MONTHLY, Frequency.QUARTERLY, "monthly", "quarterly"):
        return (event_type, due)
    return (event_type, due.year)


def _event_key(event: ComplianceEvent) -> tuple:
    return dedupe_key(event.event_type, event.due_date, event.recurring_interval)


class ComplianceService:
    """
    Service for compliance calendar operations.

    Provides a clean interface between API routes / Celery tasks and the
    database.
    """

    # -------------------------------------------------------------------------
    # Event Generation
    # -------------------------------------------------------------------------

    @staticmethod
    def formation_date_of(business: BusinessEntity, today: date) -> date:
        if business.filed_date:
            return business.filed_date
        if business.created_at:
            return business.created_at.date()
        return today

    @staticmethod
    def event_row(
        business_id: int | str,
        template: ComplianceTemplate,
        due: date,
    ) -> dict[str, Any]:
        """Insert payload for one occurrence of a template."""
        return {
            "business_entity_id": business_id,
            "event_type": template.event_type,
            "event_title": template.title,
            "event_description": template.description,
            "due_date": due.isoformat(),
            "reminder_dates": json.dumps(
                [d.isoformat() for d in reminder_dates(due, list(template.reminder_days))]
            ),
            "is_recurring": template.is_recurring,
            "recurring_interval": template.frequency.value,
            "status": EventStatus.PENDING.value,
            "priority": template.priority.value,
            "category": template.category.value,
            "estimated_cost": template.estimated_cost,
            "filing_link": template.filing_link,
            "reminders_sent": 0,
        }

    @staticmethod
    def plan_events(
        business: BusinessEntity,
        existing: list[ComplianceEvent],
        today: date,
    ) -> list[tuple[ComplianceTemplate, dict[str, Any]]]:
        """
        Work out which template occurrences are missing from a calendar.

        Returns:
            (template, insert payload) pairs, in catalog order
        """
        entity_type = business.entity_type_enum
        if entity_type is None:
            logger.warning(
                f"Business {business.id} has unknown entity type {business.entity_type!r}; "
                "no compliance events generated"
            )
            return []

        formation_date = ComplianceService.formation_date_of(business, today)
        seen = {_event_key(e) for e in existing}
        planned = []

        for template in templates_for(entity_type, business.state or ""):
            for due in due_dates_for(template, formation_date, today):
                key = dedupe_key(template.event_type, due, template.frequency)
                if key in seen:
                    continue
                seen.add(key)
                planned.append((template, ComplianceService.event_row(business.id, template, due)))

        return planned

    @staticmethod
    def generate_events_for_business(
        business_id: int | str,
        today: date | None = None,
        business: BusinessEntity | None = None,
    ) -> list[ComplianceEvent]:
        """
        Generate the compliance calendar of one business.

        Occurrences that already exist (same business, event type and due
        year, or same exact date for monthly/quarterly filings) are skipped,
        so the operation is safe to repeat.

        Returns:
            Newly created events

        Raises:
            BusinessNotFoundError: If the business doesn't exist
        """
        today = today or _today()
        business = business or BusinessService.get_business(business_id)

        existing = [
            ComplianceEvent.from_db_row(row)
            for row in SupabaseClient.fetch_events(business_ids=[business.id])
        ]
        planned = ComplianceService.plan_events(business, existing, today)
        if not planned:
            logger.info(f"No new compliance events for business {business.id}")
            return []

        inserted = SupabaseClient.insert_events([row for _, row in planned])
        events = [ComplianceEvent.from_db_row(row) for row in inserted]

        recipient = NotificationService.resolve_recipient(business)
        for (template, _), event in zip(planned, events):
            NotificationService.schedule_for_event(
                event,
                business,
                channels=list(template.channels),
                reminder_days=list(template.reminder_days),
                today=today,
                recipient=recipient,
            )

        logger.info(f"Generated {len(events)} compliance events for business {business.id}")
        return events

    @staticmethod
    def generate_events_for_new_businesses(
        days: int = 7,
        now: datetime | None = None,
    ) -> dict[str, int]:
        """
        Generate calendars for businesses created recently that have none.

        A failure for one business is logged and counted; the others still
        get their events.
        """
        now = now or datetime.now(timezone.utc)
        today = _today()
        stats = {"businesses_checked": 0, "businesses_processed": 0, "events_created": 0, "errors": 0}

        for row in SupabaseClient.fetch_businesses(created_since=now - timedelta(days=days)):
            business = BusinessEntity.from_db_row(row)
            stats["businesses_checked"] += 1

            if SupabaseClient.fetch_events(business_ids=[business.id], limit=1):
                continue

            try:
                events = ComplianceService.generate_events_for_business(
                    business.id, today=today, business=business
                )
            except Exception as e:
                stats["errors"] += 1
                logger.exception(f"Event generation failed for business {business.id}: {e}")
                continue

            stats["businesses_processed"] += 1
            stats["events_created"] += len(events)

        logger.info(f"New business event generation: {stats}")
        return stats

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    @staticmethod
    def get_event(
        event_id: int | str,
        user_id: UUID | str | None = None,
    ) -> ComplianceEvent:
        """
        Get an event by ID.

        Args:
            event_id: The event ID
            user_id: If provided, verify the event's business belongs to this user

        Raises:
            EventNotFoundError: If it doesn't exist or user doesn't own it
        """
        row = SupabaseClient.fetch_event(event_id)
        if not row:
            raise EventNotFoundError(str(event_id))

        event = ComplianceEvent.from_db_row(row)

        if user_id:
            business = SupabaseClient.fetch_business(event.business_entity_id)
            # Don't reveal that the event exists - return not found
            if not business or str(business.get("user_id")) != str(user_id):
                raise EventNotFoundError(str(event_id))

        return event

    @staticmethod
    def list_events(
        user_id: UUID | str,
        business_id: int | str | None = None,
        status: EventStatus | None = None,
        category: str | None = None,
        due_from: date | None = None,
        due_to: date | None = None,
    ) -> list[ComplianceEvent]:
        """The caller's events, ascending by due date."""
        if business_id is not None:
            business_ids = [BusinessService.get_business(business_id, user_id=user_id).id]
        else:
            business_ids = BusinessService.business_ids_for_user(user_id)

        rows = SupabaseClient.fetch_events(
            business_ids=business_ids,
            status=status.value if status else None,
            category=category,
            due_from=due_from,
            due_to=due_to,
        )
        return [ComplianceEvent.from_db_row(row) for row in rows]

    @staticmethod
    def create_event(
        user_id: UUID | str,
        payload: ComplianceEventCreate,
        today: date | None = None,
    ) -> ComplianceEvent:
        """
        Add a custom event to one of the caller's businesses.

        Notifications are scheduled on the default channels.

        Raises:
            BusinessNotFoundError: If the business isn't the caller's
        """
        business = BusinessService.get_business(payload.business_id, user_id=user_id)
        reminder_days = payload.reminder_days
        if reminder_days is None:
            reminder_days = settings.reminder_intervals_list

        row = SupabaseClient.insert_events([{
            "business_entity_id": business.id,
            "event_type": payload.event_type,
            "event_title": payload.event_title,
            "event_description": payload.event_description,
            "due_date": payload.due_date.isoformat(),
            "reminder_dates": json.dumps(
                [d.isoformat() for d in reminder_dates(payload.due_date, reminder_days)]
            ),
            "is_recurring": payload.recurring_interval != Frequency.ONE_TIME,
            "recurring_interval": payload.recurring_interval.value,
            "status": EventStatus.PENDING.value,
            "priority": payload.priority.value,
            "category": payload.category.value,
            "estimated_cost": payload.estimated_cost,
            "filing_link": payload.filing_link,
            "reminders_sent": 0,
        }])[0]

        event = ComplianceEvent.from_db_row(row)
        NotificationService.schedule_for_event(
            event, business, reminder_days=reminder_days, today=today
        )
        logger.info(f"Created custom event {event.id} for business {business.id}")
        return event

    @staticmethod
    def update_event(
        event_id: int | str,
        payload: ComplianceEventUpdate,
        user_id: UUID | str | None = None,
    ) -> ComplianceEvent:
        """
        Edit an event. Omitted fields are left alone.

        Moving the due date recomputes reminder dates and clears the
        recorded reminder interval so the new windows fire.
        """
        event = ComplianceService.get_event(event_id, user_id=user_id)
        update_data = payload.model_dump(exclude_unset=True, mode="json")

        if not update_data:
            return event  # Nothing to update

        if "recurring_interval" in update_data:
            update_data["is_recurring"] = update_data["recurring_interval"] not in (
                None, Frequency.ONE_TIME.value
            )

        if payload.due_date is not None and payload.due_date != event.due_date:
            update_data["reminder_dates"] = json.dumps([
                d.isoformat()
                for d in reminder_dates(payload.due_date, settings.reminder_intervals_list)
            ])
            update_data["last_reminder_interval"] = None

        row = SupabaseClient.update_event(event.id, update_data)
        logger.info(f"Updated event {event.id}: {sorted(update_data)}")
        return ComplianceEvent.from_db_row(row) if row else event

    @staticmethod
    def delete_event(event_id: int | str, user_id: UUID | str | None = None) -> None:
        """Delete an event and cancel its pending notifications."""
        event = ComplianceService.get_event(event_id, user_id=user_id)
        NotificationService.cancel_for_event(event.id)
        SupabaseClient.delete_event(event.id)
        logger.info(f"Deleted event {event.id}")

    # -------------------------------------------------------------------------
    # Status Changes
    # -------------------------------------------------------------------------

    @staticmethod
    def mark_completed(
        event_id: int | str,
        completed_on: date | None = None,
        notes: str | None = None,
        user_id: UUID | str | None = None,
    ) -> ComplianceEvent:
        """
        Mark an event as filed and cancel its pending notifications.

        Raises:
            EventAlreadyCompletedError: If it is already completed
            InvalidStatusTransitionError: If it was dismissed
        """
        event = ComplianceService.get_event(event_id, user_id=user_id)

        if event.status == EventStatus.COMPLETED:
            raise EventAlreadyCompletedError(str(event.id))
        ComplianceService._check_transition(event, EventStatus.COMPLETED)

        update_data: dict[str, Any] = {
            "status": EventStatus.COMPLETED.value,
            "completed_date": (completed_on or _today()).isoformat(),
        }
        if notes is not None:
            update_data["notes"] = notes

        row = SupabaseClient.update_event(event.id, update_data)
        NotificationService.cancel_for_event(event.id)

        logger.info(f"Event {event.id} marked completed")
        return ComplianceEvent.from_db_row(row) if row else event.model_copy(update={
            "status": EventStatus.COMPLETED,
            "completed_date": completed_on or _today(),
        })

    @staticmethod
    def _check_transition(event: ComplianceEvent, requested: EventStatus) -> None:
        allowed = STATUS_TRANSITIONS.get(event.status, set())
        if requested not in allowed:
            raise InvalidStatusTransitionError(
                str(event.id),
                event.status.value,
                requested.value,
                sorted(s.value for s in allowed),
            )

    @staticmethod
    def update_status(
        event_id: int | str,
        status: EventStatus,
        user_id: UUID | str | None = None,
    ) -> ComplianceEvent:
        """
        Change an event's status along an allowed transition.

        Completing delegates to mark_completed; reopening clears the
        completion date.

        Raises:
            InvalidStatusTransitionError: If the transition isn't allowed
        """
        event = ComplianceService.get_event(event_id, user_id=user_id)
        ComplianceService._check_transition(event, status)

        if status == EventStatus.COMPLETED:
            return ComplianceService.mark_completed(event.id)

        update_data: dict[str, Any] = {"status": status.value}
        if event.status == EventStatus.COMPLETED:
            update_data["completed_date"] = None
        if status == EventStatus.DISMISSED:
            NotificationService.cancel_for_event(event.id)

        row = SupabaseClient.update_event(event.id, update_data)
        logger.info(f"Event {event.id} status {event.status.value} -> {status.value}")
        return ComplianceEvent.from_db_row(row) if row else event.model_copy(update={"status": status})

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @staticmethod
    def get_upcoming_events(
        business_id: int | str,
        days: int | None = None,
        today: date | None = None,
        user_id: UUID | str | None = None,
    ) -> list[ComplianceEvent]:
        """Pending events of one business due in the next N days, soonest first."""
        today = today or _today()
        days = settings.UPCOMING_WINDOW_DAYS if days is None else days
        business = BusinessService.get_business(business_id, user_id=user_id)

        rows = SupabaseClient.fetch_events(
            business_ids=[business.id],
            status=EventStatus.PENDING.value,
            due_from=today,
            due_to=today + timedelta(days=days),
        )
        return [ComplianceEvent.from_db_row(row) for row in rows]

    @staticmethod
    def get_dashboard_data(user_id: UUID | str, today: date | None = None) -> DashboardSummary:
        """Totals, nearest deadlines and per-business counts for one user."""
        today = today or _today()
        businesses = BusinessService.list_businesses(user_id)
        events = [
            ComplianceEvent.from_db_row(row)
            for row in SupabaseClient.fetch_events(business_ids=[b.id for b in businesses])
        ]

        by_status = Counter(e.status for e in events)
        per_business = Counter(str(e.business_entity_id) for e in events)
        horizon = today + timedelta(days=30)
        pending = [e for e in events if e.status == EventStatus.PENDING and e.due_date >= today]

        return DashboardSummary(
            total_businesses=len(businesses),
            total_events=len(events),
            pending_events=by_status[EventStatus.PENDING],
            overdue_events=by_status[EventStatus.OVERDUE],
            completed_events=by_status[EventStatus.COMPLETED],
            dismissed_events=by_status[EventStatus.DISMISSED],
            events_next_30_days=sum(1 for e in pending if e.due_date <= horizon),
            nearest_events=sorted(pending, key=lambda e: e.due_date)[:NEAREST_EVENTS_LIMIT],
            businesses=[
                BusinessSummary(
                    business_id=b.id,
                    legal_name=b.legal_name,
                    entity_type=b.entity_type,
                    state=b.state,
                    events_count=per_business[str(b.id)],
                )
                for b in businesses
            ],
        )

    # -------------------------------------------------------------------------
    # Maintenance (Celery beat)
    # -------------------------------------------------------------------------

    @staticmethod
    def update_overdue_events(today: date | None = None) -> int:
        """Flip pending events due before today to overdue; returns how many."""
        today = today or _today()
        updated = SupabaseClient.mark_overdue(before=today)
        if updated:
            logger.info(f"Marked {len(updated)} events overdue")
        return len(updated)

    @staticmethod
    def generate_recurring_events(today: date | None = None) -> dict[str, int]:
        """
        Create the next occurrence of every completed recurring event.

        The next due date is rolled forward until it is after today, and
        nothing is created when the business already has that occurrence.
        """
        today = today or _today()
        completed = [
            ComplianceEvent.from_db_row(row)
            for row in SupabaseClient.fetch_events(status=EventStatus.COMPLETED.value)
        ]
        recurring = [
            e for e in completed
            if e.recurring_interval not in (None, Frequency.ONE_TIME)
        ]
        stats = {"checked": len(recurring), "created": 0, "errors": 0}
        if not recurring:
            return stats

        business_ids = sorted({str(e.business_entity_id) for e in recurring})
        known = {
            (str(e.business_entity_id),) + _event_key(e)
            for e in (
                ComplianceEvent.from_db_row(row)
                for row in SupabaseClient.fetch_events(business_ids=business_ids)
            )
        }

        for event in recurring:
            next_due = roll_forward(event.due_date, event.recurring_interval, today)
            if next_due is None:
                continue
            key = (str(event.business_entity_id),) + dedupe_key(
                event.event_type, next_due, event.recurring_interval
            )
            if key in known:
                continue

            try:
                ComplianceService._create_next_occurrence(event, next_due, today)
            except Exception as e:
                stats["errors"] += 1
                logger.exception(f"Recurring generation failed for event {event.id}: {e}")
                continue

            known.add(key)
            stats["created"] += 1

        logger.info(f"Recurring event generation: {stats}")
        return stats

    @staticmethod
    def _create_next_occurrence(event: ComplianceEvent, next_due: date, today: date) -> ComplianceEvent:
        reminder_days = settings.reminder_intervals_list
        row = SupabaseClient.insert_events([{
            "business_entity_id": event.business_entity_id,
            "event_type": event.event_type,
            "event_title": event.event_title,
            "event_description": event.event_description,
            "due_date": next_due.isoformat(),
            "reminder_dates": json.dumps(
                [d.isoformat() for d in reminder_dates(next_due, reminder_days)]
            ),
            "is_recurring": True,
            "recurring_interval": event.recurring_interval.value,
            "status": EventStatus.PENDING.value,
            "priority": event.priority.value,
            "category": event.category,
            "estimated_cost": event.estimated_cost,
            "filing_link": event.filing_link,
            "reminders_sent": 0,
        }])[0]
        created = ComplianceEvent.from_db_row(row)

        business_row = SupabaseClient.fetch_business(event.business_entity_id)
        if business_row:
            NotificationService.schedule_for_event(
                created,
                BusinessEntity.from_db_row(business_row),
                reminder_days=reminder_days,
                today=today,
            )
        return created

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    @staticmethod
    def attach_document(
        event_id: int | str,
        filename: str,
        content: bytes,
        user_id: UUID | str | None = None,
    ) -> ComplianceEvent:
        """
        Store a filing-proof document and record its path on the event.

        Raises:
            InvalidFileTypeError / FileTooLargeError / StorageUploadError
        """
        event = ComplianceService.get_event(event_id, user_id=user_id)
        path = StorageService.upload_document(event.business_entity_id, event.id, filename, content)
        row = SupabaseClient.update_event(event.id, {"document_path": path})
        return ComplianceEvent.from_db_row(row) if row else event.model_copy(update={"document_path": path})
