# =============================================================================
# core/services/reminder_service.py - Daily Compliance Reminder Job
# =============================================================================
# The daily job (Celery beat, REMINDER_HOUR in COMPLIANCE_TIMEZONE):
#
#   for each interval in 30, 14, 7, 1:
#       events = pending events due exactly today + interval
#       for each event passing the reminder policy:
#           resolve owner -> render email -> send -> in-app notification
#           record reminders_sent / last_reminder_sent / last_reminder_interval
#
# One failed email never aborts the run: the failure is logged and counted.
# Each run is persisted to reminder_runs for the admin status endpoint.
# =============================================================================

import logging
import time
from collections.abc import Callable
from datetime import date, datetime, timedelta, timezone

from lib.mailer import Mailer
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import ApplicationError, mask_email
from core.compliance.deadlines import days_until_due, local_date, today_in
from core.compliance.emails import render_reminder_email
from core.compliance.reminders import (
    notification_title,
    render_notification_message,
    sent_recently,
    should_send,
)
from core.models.business import BusinessEntity
from core.models.compliance import ComplianceEvent, EventStatus
from core.models.dashboard import ReminderRunResult, ReminderStatistics, ReminderStatus
from core.services.notification_service import NotificationService
from app.config import settings
from app.exceptions import BusinessNotFoundError, EventNotFoundError

logger = logging.getLogger(__name__)

# Urgent alerts go out for events due within this many days
URGENT_ALERT_DAYS = 3

# Look-ahead of the weekly admin report
WEEKLY_REPORT_DAYS = 30


class ReminderNotRecordedError(ApplicationError):
    """The reminder email went out but the event row could not be updated."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("code", "REMINDER_NOT_RECORDED")
        kwargs.setdefault(
            "suggestion",
            "Check the Supabase connection; the next run may re-send this reminder",
        )
        super().__init__(message, **kwargs)


def reminder_schedule() -> str:
    """Cron expression of the daily reminder job."""
    return f"0 {settings.REMINDER_HOUR} * * *"


class ReminderService:
    """
    Service behind the daily reminder job and its admin endpoints.
    """

    @staticmethod
    def send_reminder(
        event: ComplianceEvent,
        interval: int,
        today: date,
        now: datetime,
    ) -> bool:
        """
        Email one reminder and record it on the event.

        Returns:
            False when nobody can be emailed (skipped), True when sent

        Raises:
            BusinessNotFoundError: The event's business is gone
            DeliveryError: SendGrid rejected the email
            ReminderNotRecordedError: Sent, but the event row update failed twice
        """
        business_row = SupabaseClient.fetch_business(event.business_entity_id)
        if not business_row:
            raise BusinessNotFoundError(str(event.business_entity_id))
        business = BusinessEntity.from_db_row(business_row)

        recipient = NotificationService.resolve_recipient(business)
        if not recipient.email:
            logger.warning(f"No recipient for event {event.id} (business {business.id}); skipping")
            return False

        days = days_until_due(event.due_date, today)
        email = render_reminder_email(
            event,
            business,
            days,
            first_name=recipient.first_name,
            frontend_url=settings.FRONTEND_URL,
        )
        Mailer().send(recipient.email, email.subject, email.html, email.text)

        record_error = ReminderService._record_reminder(event, interval, now)

        if business.user_id:
            try:
                NotificationService.create_in_app(
                    business.user_id,
                    type="compliance_reminder",
                    title=notification_title(event.event_title, days),
                    message=render_notification_message(
                        business.legal_name, event.event_title, event.due_date, days
                    ),
                    priority="high" if days <= 7 else "medium",
                    metadata={"event_id": event.id, "business_id": business.id, "days": days},
                )
            except Exception as e:
                # Email already sent
                logger.warning(f"In-app notification for event {event.id} failed: {e}")

        logger.info(
            f"Reminder sent for event {event.id} ({days} days) to {mask_email(recipient.email)}"
        )
        if record_error:
            raise ReminderNotRecordedError(
                f"Reminder emailed but not recorded: {record_error.message}",
                details={"event_id": event.id, "interval": interval},
            )
        return True

    @staticmethod
    def _record_reminder(
        event: ComplianceEvent,
        interval: int,
        now: datetime,
    ) -> SupabaseClientError | None:
        """
        Store the reminder on the event, retrying once.

        Returns:
            None when stored, else the last SupabaseClientError
        """
        data = {
            "reminders_sent": event.reminders_sent + 1,
            "last_reminder_sent": now.isoformat(),
            "last_reminder_interval": interval,
        }
        error = None
        for attempt in (1, 2):
            try:
                SupabaseClient.update_event(event.id, data)
                return None
            except SupabaseClientError as e:
                error = e
                logger.warning(f"Recording reminder for event {event.id} failed (attempt {attempt}/2): {e}")
        return error

    @staticmethod
    def run_daily_reminders(
        now: datetime | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> ReminderRunResult:
        """
        Run the daily reminder job once.

        Args:
            now: Current instant (defaults to the wall clock)
            sleep: Pause function between sends (replaced in tests)

        Returns:
            ReminderRunResult with checked / sent / skipped / failed counts
        """
        now = now or datetime.now(timezone.utc)
        today = local_date(now, settings.COMPLIANCE_TIMEZONE)
        intervals = settings.reminder_intervals_list
        delay = settings.REMINDER_SEND_DELAY_MS / 1000

        result = ReminderRunResult(started_at=now)
        logger.info(f"Daily reminder run started for {today} (intervals: {intervals})")

        for interval in intervals:
            due = today + timedelta(days=interval)
            for row in SupabaseClient.fetch_events_due_on(due, EventStatus.PENDING.value):
                event = ComplianceEvent.from_db_row(row)
                result.checked += 1

                decision = should_send(event, today, now, intervals)
                if not decision.send:
                    logger.debug(f"Skipping event {event.id}: {decision.reason}")
                    result.skipped += 1
                    continue

                try:
                    sent = ReminderService.send_reminder(event, decision.interval, today, now)
                except ReminderNotRecordedError as e:
                    result.sent += 1
                    result.unrecorded += 1
                    result.errors.append(f"event {event.id}: {e}")
                    logger.error(f"Reminder for event {event.id} sent but not recorded: {e}")
                    if delay:
                        sleep(delay)
                    continue
                except Exception as e:
                    result.failed += 1
                    result.errors.append(f"event {event.id}: {e}")
                    logger.exception(f"Reminder for event {event.id} failed: {e}")
                    continue

                if not sent:
                    result.skipped += 1
                    continue

                result.sent += 1
                if delay:
                    sleep(delay)

        result.finished_at = datetime.now(timezone.utc)
        logger.info(
            f"Daily reminder run finished: checked={result.checked} sent={result.sent} "
            f"skipped={result.skipped} failed={result.failed}"
        )

        try:
            SupabaseClient.insert_reminder_run(result.model_dump(mode="json"))
        except Exception as e:
            logger.error(f"Failed to record reminder run: {e}")

        return result

    @staticmethod
    def send_urgent_alert(event_id: int | str, now: datetime | None = None) -> dict:
        """
        Send an immediate reminder for an event due within three days.

        Bypasses the reminder window but still honours the 24 hour gap.

        Returns:
            {"sent": bool, "reason": str, "days_until_due": int}
        """
        now = now or datetime.now(timezone.utc)
        today = local_date(now, settings.COMPLIANCE_TIMEZONE)

        row = SupabaseClient.fetch_event(event_id)
        if not row:
            raise EventNotFoundError(str(event_id))
        event = ComplianceEvent.from_db_row(row)
        days = days_until_due(event.due_date, today)

        if event.status != EventStatus.PENDING:
            return {"sent": False, "reason": "not_pending", "days_until_due": days}
        if days < 0 or days > URGENT_ALERT_DAYS:
            return {"sent": False, "reason": "not_urgent", "days_until_due": days}
        if sent_recently(event, now):
            return {"sent": False, "reason": "sent_recently", "days_until_due": days}

        try:
            sent = ReminderService.send_reminder(event, days, today, now)
        except ReminderNotRecordedError as e:
            logger.error(f"Urgent alert for event {event.id} sent but not recorded: {e}")
            return {"sent": True, "reason": "sent_unrecorded", "days_until_due": days}
        return {
            "sent": sent,
            "reason": "sent" if sent else "no_recipient",
            "days_until_due": days,
        }

    @staticmethod
    def get_status(now: datetime | None = None) -> ReminderStatus:
        """Schedule, timezone and last run of the reminder job."""
        now = now or datetime.now(timezone.utc)
        last = SupabaseClient.fetch_last_reminder_run()
        return ReminderStatus(
            schedule=reminder_schedule(),
            timezone=settings.COMPLIANCE_TIMEZONE,
            reminder_intervals=settings.reminder_intervals_list,
            last_run=ReminderRunResult.model_validate(last) if last else None,
            current_time=now,
        )

    @staticmethod
    def get_statistics(now: datetime | None = None) -> ReminderStatistics:
        """Event counts plus how many events would get a reminder today."""
        now = now or datetime.now(timezone.utc)
        today = local_date(now, settings.COMPLIANCE_TIMEZONE)
        intervals = settings.reminder_intervals_list

        events = [ComplianceEvent.from_db_row(row) for row in SupabaseClient.fetch_events()]
        needing = sum(1 for e in events if should_send(e, today, now, intervals).send)

        return ReminderStatistics(
            total_events=len(events),
            pending_events=sum(1 for e in events if e.status == EventStatus.PENDING),
            overdue_events=sum(1 for e in events if e.status == EventStatus.OVERDUE),
            completed_events=sum(1 for e in events if e.status == EventStatus.COMPLETED),
            events_needing_reminders=needing,
            generated_at=now,
        )

    @staticmethod
    def generate_weekly_report(today: date | None = None) -> dict[str, int]:
        """
        Post a weekly summary of upcoming and overdue events to every admin.

        Returns:
            Counts: upcoming, overdue, admins_notified
        """
        today = today or today_in(settings.COMPLIANCE_TIMEZONE)
        upcoming = SupabaseClient.fetch_events(
            status=EventStatus.PENDING.value,
            due_from=today,
            due_to=today + timedelta(days=WEEKLY_REPORT_DAYS),
        )
        overdue = SupabaseClient.fetch_events(status=EventStatus.OVERDUE.value)

        title = f"Weekly compliance report ({today.isoformat()})"
        message = (
            f"{len(upcoming)} events are due in the next {WEEKLY_REPORT_DAYS} days "
            f"and {len(overdue)} events are overdue."
        )

        notified = 0
        for admin in SupabaseClient.fetch_admin_users():
            NotificationService.create_in_app(
                admin["id"],
                type="weekly_compliance_report",
                title=title,
                message=message,
                priority="high" if overdue else "medium",
                action_url="/admin/compliance",
                metadata={"upcoming": len(upcoming), "overdue": len(overdue)},
            )
            notified += 1

        logger.info(f"Weekly report: {len(upcoming)} upcoming, {len(overdue)} overdue, {notified} admins")
        return {"upcoming": len(upcoming), "overdue": len(overdue), "admins_notified": notified}
