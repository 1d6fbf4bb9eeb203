import logging
from typing import Any, Mapping, Optional

from app.services import email_templates
from app.services.email import EmailError, EmailMessage, send_email

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Outbound leave notifications. notify() never raises: delivery failures are
    logged and reported as False so callers can treat them as soft warnings.
    """

    def __init__(self, sender=send_email):
        self._send = sender

    def notify(self, template_kind: str, recipient: Optional[str], context: Mapping[str, Any]) -> bool:
        if not recipient:
            logger.warning(f"Notification '{template_kind}' skipped: no recipient address")
            return False
        try:
            rendered = email_templates.render(template_kind, context)
            message = EmailMessage(
                subject=rendered["subject"],
                to=[recipient],
                body_text=rendered["text"],
                body_html=rendered["html"],
            )
            self._send(message)
        except (EmailError, ValueError) as e:
            logger.warning(f"Notification '{template_kind}' to {recipient} failed: {e}")
            return False
        return True


def get_notifier() -> NotificationService:
    """FastAPI dependency; overridden in tests."""
    return NotificationService()
