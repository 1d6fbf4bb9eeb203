"""
SMTP email delivery.

EmailMessage validates a message before it is handed to SMTP; send_email
opens a short-lived connection per message.
"""
import logging
import smtplib
from dataclasses import dataclass, field
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import List, Optional

from app.core.config import EmailSettings, settings

logger = logging.getLogger(__name__)


class EmailError(Exception):
    """Raised when a message is invalid or cannot be delivered."""
    pass


@dataclass
class EmailMessage:
    subject: str
    to: List[str]
    body_text: Optional[str] = None
    body_html: Optional[str] = None
    cc: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.subject.strip():
            raise EmailError("Subject cannot be empty")
        if not self.to or not all(addr and "@" in addr for addr in self.to):
            raise EmailError(f"Invalid recipient list: {self.to}")
        if not self.body_text and not self.body_html:
            raise EmailError("Either body_text or body_html must be provided")


def _build_mime(message: EmailMessage, config: EmailSettings) -> MIMEMultipart:
    mime = MIMEMultipart("alternative")
    mime["Subject"] = message.subject
    mime["From"] = formataddr((config.company_name, config.from_email or config.username))
    mime["To"] = ", ".join(message.to)
    if message.cc:
        mime["Cc"] = ", ".join(message.cc)
    if message.body_text:
        mime.attach(MIMEText(message.body_text, "plain", "utf-8"))
    if message.body_html:
        mime.attach(MIMEText(message.body_html, "html", "utf-8"))
    return mime


def send_email(message: EmailMessage, config: Optional[EmailSettings] = None) -> None:
    config = config or settings.email
    if not config.smtp_host:
        raise EmailError("Email is not configured. Set SMTP_HOST and EMAIL_FROM.")

    mime = _build_mime(message, config)
    recipients = message.to + message.cc
    try:
        with smtplib.SMTP(config.smtp_host, config.smtp_port, timeout=config.timeout_seconds) as server:
            if config.use_tls:
                server.starttls()
            if config.username:
                server.login(config.username, config.password)
            server.sendmail(mime["From"], recipients, mime.as_string())
    except (smtplib.SMTPException, OSError) as e:
        raise EmailError(f"Failed to send email to {recipients}: {e}") from e

    logger.info(f"Email sent: {message.subject}", extra={"recipients": recipients})
