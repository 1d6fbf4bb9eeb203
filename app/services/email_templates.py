"""
Fixed email templates for leave, holiday and admin notifications.
"""
import html
from datetime import date
from typing import Any, Callable, Dict, Mapping

from app.core.config import settings

LEAVE_APPROVED = "leave_approved"
LEAVE_REJECTED = "leave_rejected"
LEAVE_REMINDER = "leave_reminder"
HOLIDAY_REMINDER = "holiday_reminder"
ADMIN_FEEDBACK = "admin_feedback"


def _fmt(value: Any) -> str:
    if isinstance(value, date):
        return value.strftime("%d %b %Y")
    return "" if value is None else str(value)


def _wrap_html(title: str, paragraphs: list) -> str:
    body = "\n".join(f"<p>{p}</p>" for p in paragraphs)
    return f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; border: 1px solid #e0e0e0; border-radius: 8px;">
    <h2 style="color: #2563eb; margin-bottom: 20px;">{html.escape(title)}</h2>
    {body}
    <p>Regards,<br/>{html.escape(settings.email.company_name)} HR Team</p>
</div>
"""


def _duration_line(ctx: Mapping[str, Any]) -> str:
    duration = _fmt(ctx.get("leave_duration") or "Full Day")
    slot = ctx.get("half_day_slot")
    return f"{duration} ({_fmt(slot)})" if slot else duration


def _approved(ctx: Mapping[str, Any]) -> Dict[str, str]:
    name = _fmt(ctx.get("employee_name") or "Employee")
    payment = "paid" if ctx.get("is_paid") else "unpaid"
    lines = [
        f"Dear {name},",
        f"Your {_fmt(ctx.get('leave_type'))} request from {_fmt(ctx.get('start_date'))} "
        f"to {_fmt(ctx.get('end_date'))} has been approved as {payment} leave.",
    ]
    if ctx.get("admin_remarks"):
        lines.append(f"Remarks: {_fmt(ctx['admin_remarks'])}")
    return {
        "subject": "Request Approved",
        "text": "\n\n".join(lines) + f"\n\nRegards,\n{settings.email.company_name} HR Team",
        "html": _wrap_html("Leave Approved", [html.escape(line) for line in lines]),
    }


def _rejected(ctx: Mapping[str, Any]) -> Dict[str, str]:
    name = _fmt(ctx.get("employee_name") or "Employee")
    lines = [
        f"Dear {name},",
        f"Your {_fmt(ctx.get('leave_type'))} request from {_fmt(ctx.get('start_date'))} "
        f"to {_fmt(ctx.get('end_date'))} has been rejected.",
        f"Reason: {_fmt(ctx.get('rejection_reason'))}",
    ]
    attempts_left = ctx.get("attempts_left")
    if attempts_left:
        lines.append(f"You may correct and resubmit this request ({attempts_left} attempt(s) left).")
    return {
        "subject": "Request Rejected",
        "text": "\n\n".join(lines) + f"\n\nRegards,\n{settings.email.company_name} HR Team",
        "html": _wrap_html("Leave Rejected", [html.escape(line) for line in lines]),
    }


def _reminder(ctx: Mapping[str, Any]) -> Dict[str, str]:
    name = _fmt(ctx.get("employee_name") or "Employee")
    lines = [
        f"Dear {name},",
        "This is a friendly reminder that your leave starts tomorrow.",
        f"Date: {_fmt(ctx.get('start_date'))}",
        f"Type: {_fmt(ctx.get('leave_type'))}",
        f"Duration: {_duration_line(ctx)}",
        f"End Date: {_fmt(ctx.get('end_date'))}",
    ]
    if ctx.get("reason"):
        lines.append(f"Reason: {_fmt(ctx['reason'])}")
    lines.append("Please ensure all your pending work is completed before you go on leave.")
    return {
        "subject": "Reminder: Your Leave Starts Tomorrow",
        "text": "\n".join(lines) + f"\n\nRegards,\n{settings.email.company_name} HR Team",
        "html": _wrap_html("Leave Reminder", [html.escape(line) for line in lines]),
    }


def _holiday_reminder(ctx: Mapping[str, Any]) -> Dict[str, str]:
    name = _fmt(ctx.get("employee_name") or "Team Member")
    lines = [
        f"Hello {name},",
        f"The office will remain closed tomorrow in observance of {_fmt(ctx.get('holiday_names'))}.",
        f"Date: {_fmt(ctx.get('holiday_date'))}",
        f"Type: {_fmt(ctx.get('holiday_types'))}",
        "Please plan your work accordingly. Normal office operations resume on the next working day.",
        "We wish you a pleasant holiday.",
    ]
    return {
        "subject": "Holiday Notice: Office Closed Tomorrow",
        "text": "\n\n".join(lines) + f"\n\nRegards,\n{settings.email.company_name}",
        "html": _wrap_html("Holiday Notice", [html.escape(line) for line in lines]),
    }


def _admin_feedback(ctx: Mapping[str, Any]) -> Dict[str, str]:
    subject = _fmt(ctx.get("subject")).strip()
    message = _fmt(ctx.get("message")).strip()
    if not subject or not message:
        raise ValueError("Feedback needs both a subject and a message")
    footer = f"This message was sent by an admin via the {settings.email.company_name} Leave System."
    body = html.escape(message).replace("\n", "<br/>")
    return {
        "subject": subject,
        "text": f"{message}\n\n--\n{footer}",
        "html": (
            f"<p>{body}</p>\n<hr/>\n"
            f"<p style=\"font-size:12px;color:#6b7280\">{html.escape(footer)}</p>"
        ),
    }


TEMPLATES: Dict[str, Callable[[Mapping[str, Any]], Dict[str, str]]] = {
    LEAVE_APPROVED: _approved,
    LEAVE_REJECTED: _rejected,
    LEAVE_REMINDER: _reminder,
    HOLIDAY_REMINDER: _holiday_reminder,
    ADMIN_FEEDBACK: _admin_feedback,
}


def render(template_kind: str, context: Mapping[str, Any]) -> Dict[str, str]:
    """Return {subject, text, html} for a template kind."""
    try:
        builder = TEMPLATES[template_kind]
    except KeyError:
        raise ValueError(f"Unknown email template: {template_kind}")
    return builder(context)
