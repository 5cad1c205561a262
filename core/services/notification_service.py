# =============================================================================
# core/services/notification_service.py - Notification Queue & Bell
# =============================================================================
# Two responsibilities:
# 1. Scheduled notifications (compliance_notifications): one row per
#    reminder date and channel, delivered by the periodic queue task
# 2. In-app notifications (notifications): the user's notification bell
#
# Delivery rules for the queue:
# - email: SendGrid via lib.mailer, only on days outside REMINDER_INTERVALS
#   (the daily reminder job emails those)
# - sms: Telnyx via lib.sms
# - dashboard: nothing to deliver, the row itself is shown on the dashboard
# - failures increment delivery_attempts; the row is marked failed once
#   NOTIFICATION_MAX_ATTEMPTS is reached, otherwise retried next run
# - a row whose outcome cannot be stored is logged and counted; the rest of
#   the batch still runs
# =============================================================================

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from lib.mailer import DeliveryError, Mailer
from lib.sms import SmsClient
from lib.supabase_client import SupabaseClient, SupabaseClientError
from core.compliance.deadlines import local_date, reminder_dates, today_in
from core.compliance.emails import render_notification_email
from core.compliance.reminders import notification_title, render_notification_message
from core.models.business import BusinessEntity
from core.models.compliance import ComplianceEvent
from core.models.notification import (
    ComplianceNotification,
    InAppNotification,
    InAppNotificationList,
    NotificationChannel,
    NotificationStatus,
)
from app.config import settings
from app.exceptions import NotificationNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_CHANNELS = [NotificationChannel.EMAIL, NotificationChannel.DASHBOARD]


@dataclass(frozen=True)
class Recipient:
    """Who receives reminders for a business."""
    email: str | None
    first_name: str | None = None
    phone: str | None = None


class NotificationService:
    """
    Service for scheduled and in-app notifications.
    """

    # -------------------------------------------------------------------------
    # Recipients
    # -------------------------------------------------------------------------

    @staticmethod
    def resolve_recipient(business: BusinessEntity) -> Recipient:
        """
        Owner's email and first name, falling back to the business contact.

        The owner's account email wins over the business contact_email.
        """
        user = SupabaseClient.fetch_user(business.user_id) if business.user_id else None
        user = user or {}
        return Recipient(
            email=user.get("email") or business.contact_email,
            first_name=user.get("first_name"),
            phone=business.contact_phone or user.get("phone"),
        )

    # -------------------------------------------------------------------------
    # Scheduling
    # -------------------------------------------------------------------------

    @staticmethod
    def build_schedule(
        event: ComplianceEvent,
        business: BusinessEntity,
        recipient: Recipient,
        channels: list[NotificationChannel] | None = None,
        reminder_days: list[int] | None = None,
        today: date | None = None,
    ) -> list[dict[str, Any]]:
        """
        Rows to insert for one event: reminder date x channel.

        Reminder dates already in the past are skipped, and SMS rows are
        only built when a phone number is known. Email on a daily reminder
        interval is left to the daily reminder job, so only extra template
        days (60 for example) get a queued email.
        """
        channels = channels or DEFAULT_CHANNELS
        daily_intervals = set(settings.reminder_intervals_list)
        if reminder_days is None:
            reminder_days = settings.reminder_intervals_list
        today = today or today_in(settings.COMPLIANCE_TIMEZONE)

        rows = []
        for scheduled in reminder_dates(event.due_date, reminder_days):
            if scheduled < today:
                continue
            days = (event.due_date - scheduled).days
            title = notification_title(event.event_title, days)
            message = render_notification_message(
                business.legal_name,
                event.event_title,
                event.due_date,
                days,
                event.event_description,
            )
            for channel in channels:
                channel = NotificationChannel(channel)
                if channel == NotificationChannel.SMS and not recipient.phone:
                    continue
                if channel == NotificationChannel.EMAIL and days in daily_intervals:
                    continue
                rows.append({
                    "business_entity_id": business.id,
                    "compliance_calendar_id": event.id,
                    "notification_type": channel.value,
                    "title": title,
                    "message": message,
                    "scheduled_date": scheduled.isoformat(),
                    "status": NotificationStatus.PENDING.value,
                    "delivery_attempts": 0,
                    "recipient_email": recipient.email,
                    "recipient_phone": recipient.phone if channel == NotificationChannel.SMS else None,
                })
        return rows

    @staticmethod
    def schedule_for_event(
        event: ComplianceEvent,
        business: BusinessEntity,
        channels: list[NotificationChannel] | None = None,
        reminder_days: list[int] | None = None,
        today: date | None = None,
        recipient: Recipient | None = None,
    ) -> list[ComplianceNotification]:
        """
        Schedule an event's notifications.

        Returns:
            The inserted notification rows
        """
        recipient = recipient or NotificationService.resolve_recipient(business)
        rows = NotificationService.build_schedule(
            event, business, recipient, channels, reminder_days, today
        )
        inserted = SupabaseClient.insert_scheduled_notifications(rows)
        logger.debug(f"Scheduled {len(inserted)} notifications for event {event.id}")
        return [ComplianceNotification.from_db_row(row) for row in inserted]

    @staticmethod
    def cancel_for_event(event_id: str | int) -> int:
        """Cancel an event's pending notifications; returns how many."""
        count = SupabaseClient.cancel_scheduled_notifications(event_id)
        if count:
            logger.info(f"Cancelled {count} notifications for event {event_id}")
        return count

    # -------------------------------------------------------------------------
    # Queue Processing
    # -------------------------------------------------------------------------

    @staticmethod
    def deliver(notification: ComplianceNotification) -> None:
        """
        Deliver one notification on its channel.

        Raises:
            DeliveryError: If the provider rejects it or a recipient is missing
        """
        if notification.notification_type == NotificationChannel.DASHBOARD:
            return

        if notification.notification_type == NotificationChannel.EMAIL:
            if not notification.recipient_email:
                raise DeliveryError("No recipient email", code="INVALID_RECIPIENT")
            email = render_notification_email(
                notification.title, notification.message, settings.FRONTEND_URL
            )
            Mailer().send(notification.recipient_email, email.subject, email.html, email.text)
            return

        if not notification.recipient_phone:
            raise DeliveryError("No recipient phone number", code="INVALID_RECIPIENT")
        SmsClient().send(
            notification.recipient_phone,
            f"{notification.title}\n{notification.message}",
        )

    @staticmethod
    def process_one(
        notification: ComplianceNotification,
        now: datetime,
        max_attempts: int,
    ) -> str:
        """
        Deliver one queued notification and store the outcome on its row.

        Returns:
            "sent", "failed" (gave up) or "retrying"

        Raises:
            SupabaseClientError: If the row update fails twice after a
                successful delivery
        """
        try:
            NotificationService.deliver(notification)
        except DeliveryError as e:
            attempts = notification.delivery_attempts + 1
            gave_up = attempts >= max_attempts
            SupabaseClient.update_scheduled_notification(notification.id, {
                "delivery_attempts": attempts,
                "status": (NotificationStatus.FAILED if gave_up else NotificationStatus.PENDING).value,
            })
            logger.warning(
                f"Notification {notification.id} ({notification.notification_type.value}) "
                f"attempt {attempts}/{max_attempts} failed: {e.message}"
            )
            return "failed" if gave_up else "retrying"

        sent = {
            "status": NotificationStatus.SENT.value,
            "sent_date": now.isoformat(),
            "delivery_attempts": notification.delivery_attempts + 1,
        }
        try:
            SupabaseClient.update_scheduled_notification(notification.id, sent)
        except SupabaseClientError as e:
            # Already delivered; a row left pending is delivered again next run
            logger.warning(f"Marking notification {notification.id} sent failed, retrying: {e}")
            SupabaseClient.update_scheduled_notification(notification.id, sent)
        return "sent"

    @staticmethod
    def process_pending(now: datetime | None = None) -> dict[str, int]:
        """
        Deliver every pending notification whose scheduled date has arrived.

        A row that raises anything else (usually a Supabase error while
        storing the outcome) is logged and counted under errors; the rest
        of the batch still runs.

        Returns:
            Counts: processed, sent, failed (gave up), retrying, errors
        """
        now = now or datetime.now(timezone.utc)
        today = local_date(now, settings.COMPLIANCE_TIMEZONE)
        max_attempts = settings.NOTIFICATION_MAX_ATTEMPTS

        stats = {"processed": 0, "sent": 0, "failed": 0, "retrying": 0, "errors": 0}

        for row in SupabaseClient.fetch_due_notifications(today):
            stats["processed"] += 1
            try:
                notification = ComplianceNotification.from_db_row(row)
                outcome = NotificationService.process_one(notification, now, max_attempts)
            except Exception as e:
                stats["errors"] += 1
                logger.exception(f"Notification {row.get('id')} could not be processed: {e}")
                continue
            stats[outcome] += 1

        logger.info(f"Processed notification queue: {stats}")
        return stats

    @staticmethod
    def get_dashboard_notifications(
        business_id: str | int,
        days: int = 30,
        today: date | None = None,
    ) -> list[ComplianceNotification]:
        """Dashboard notifications scheduled in the last N days, newest first."""
        today = today or today_in(settings.COMPLIANCE_TIMEZONE)
        rows = SupabaseClient.fetch_scheduled_notifications(
            business_id,
            NotificationChannel.DASHBOARD.value,
            since=today - timedelta(days=days),
        )
        return [
            n for n in (ComplianceNotification.from_db_row(row) for row in rows)
            if n.scheduled_date <= today
        ]

    # -------------------------------------------------------------------------
    # In-App Notifications
    # -------------------------------------------------------------------------

    @staticmethod
    def create_in_app(
        user_id: UUID | str,
        type: str,
        title: str,
        message: str,
        priority: str = "medium",
        action_url: str | None = "/compliance-dashboard",
        metadata: dict[str, Any] | None = None,
    ) -> InAppNotification:
        row = SupabaseClient.insert_in_app_notification({
            "user_id": str(user_id),
            "type": type,
            "category": "compliance",
            "title": title,
            "message": message,
            "priority": priority,
            "action_url": action_url,
            "is_read": False,
            "metadata": metadata or {},
        })
        return InAppNotification.model_validate(row)

    @staticmethod
    def list_in_app(
        user_id: UUID | str,
        unread_only: bool = False,
        limit: int = 50,
    ) -> InAppNotificationList:
        rows = SupabaseClient.fetch_in_app_notifications(user_id, unread_only=unread_only, limit=limit)
        notifications = [InAppNotification.model_validate(row) for row in rows]
        return InAppNotificationList(
            notifications=notifications,
            unread_count=sum(1 for n in notifications if not n.is_read),
        )

    @staticmethod
    def mark_read(notification_id: str | int, user_id: UUID | str) -> InAppNotification:
        """
        Mark one of the caller's notifications as read.

        Raises:
            NotificationNotFoundError: Missing or owned by someone else
        """
        row = SupabaseClient.fetch_in_app_notification(notification_id)
        if not row or str(row.get("user_id")) != str(user_id):
            raise NotificationNotFoundError(str(notification_id))

        updated = SupabaseClient.mark_in_app_notification_read(notification_id) or {**row, "is_read": True}
        return InAppNotification.model_validate(updated)

