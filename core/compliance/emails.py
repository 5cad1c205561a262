# =============================================================================
# core/compliance/emails.py - Reminder Email Rendering
# =============================================================================
# Builds the subject, HTML body and plain-text body of a compliance reminder.
# Every value that comes from the database is HTML-escaped before it is put
# into the HTML body.
# =============================================================================

from __future__ import annotations

import html
from dataclasses import dataclass

from core.compliance.deadlines import urgency_for
from core.compliance.reminders import email_subject, format_due_date, plural_days
from core.models.business import BusinessEntity
from core.models.compliance import ComplianceEvent


URGENCY_COLORS = {
    "urgent": "#dc2626",
    "important": "#d97706",
    "upcoming": "#2563eb",
}


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str
    text: str


def _label(value: str) -> str:
    return value.replace("_", " ").title()


def render_reminder_email(
    event: ComplianceEvent,
    business: BusinessEntity,
    days: int,
    first_name: str | None = None,
    frontend_url: str = "http://localhost:3000",
) -> RenderedEmail:
    """
    Render a reminder email for one event.

    Args:
        event: The event the reminder is about
        business: Business that owes the filing
        days: Days until the due date
        first_name: Owner's first name ("Business Owner" when unknown)
        frontend_url: Base URL of the client app, for the dashboard link

    Returns:
        RenderedEmail(subject, html, text)
    """
    name = first_name or "Business Owner"
    urgency = urgency_for(days)
    due_text = format_due_date(event.due_date)
    remaining = plural_days(days)
    category = _label(event.category)
    priority = _label(event.priority.value)
    dashboard_url = f"{frontend_url.rstrip('/')}/compliance-dashboard"

    e = html.escape
    rows = [
        ("Business", business.legal_name),
        ("Due date", due_text),
        ("Days remaining", remaining),
        ("Category", category),
        ("Priority", priority),
    ]
    if event.estimated_cost is not None:
        rows.append(("Estimated cost", f"${event.estimated_cost:,.2f}"))

    table = "".join(
        f"<tr><td style='padding:4px 12px 4px 0;color:#6b7280;'>{e(label)}</td>"
        f"<td style='padding:4px 0;'><strong>{e(value)}</strong></td></tr>"
        for label, value in rows
    )

    parts = [
        f"<p>Hello {e(name)},</p>",
        f"<h2 style='color:{URGENCY_COLORS[urgency]};'>{e(event.event_title)}</h2>",
        f"<p>This is a reminder that <strong>{e(event.event_title)}</strong> for "
        f"<strong>{e(business.legal_name)}</strong> is due in {e(remaining)}.</p>",
        f"<table>{table}</table>",
    ]
    if event.event_description:
        parts.append(f"<p>{e(event.event_description)}</p>")
    if event.filing_link:
        parts.append(
            f"<p><a href='{e(event.filing_link, quote=True)}'>File online</a></p>"
        )
    parts.append(
        f"<p><a href='{e(dashboard_url, quote=True)}'>View your compliance dashboard</a></p>"
    )
    parts.append("<p>ParaFort Compliance Team</p>")

    lines = [
        f"Hello {name},",
        "",
        f"This is a reminder that {event.event_title} for {business.legal_name} "
        f"is due in {remaining}.",
        "",
    ]
    lines += [f"{label}: {value}" for label, value in rows]
    if event.event_description:
        lines += ["", event.event_description]
    if event.filing_link:
        lines += ["", f"File online: {event.filing_link}"]
    lines += ["", f"View your compliance dashboard: {dashboard_url}", "", "ParaFort Compliance Team"]

    return RenderedEmail(
        subject=email_subject(event.event_title, days),
        html="\n".join(parts),
        text="\n".join(lines),
    )


def render_notification_email(
    title: str,
    message: str,
    frontend_url: str = "http://localhost:3000",
) -> RenderedEmail:
    """Short email for a scheduled notification (title + one paragraph)."""
    dashboard_url = f"{frontend_url.rstrip('/')}/compliance-dashboard"
    e = html.escape
    body = (
        f"<h2>{e(title)}</h2>\n"
        f"<p>{e(message)}</p>\n"
        f"<p><a href='{e(dashboard_url, quote=True)}'>View your compliance dashboard</a></p>\n"
        "<p>ParaFort Compliance Team</p>"
    )
    text = f"{title}\n\n{message}\n\nView your compliance dashboard: {dashboard_url}"
    return RenderedEmail(subject=title, html=body, text=text)
