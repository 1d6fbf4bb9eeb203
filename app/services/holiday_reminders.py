import logging
from datetime import date, timedelta
from typing import Dict, Optional

from sqlalchemy.orm import Session

from app.models.holiday import Holiday
from app.models.user import User
from app.services import email_templates
from app.services.notification import NotificationService

logger = logging.getLogger(__name__)


def send_holiday_reminders(
    db: Session,
    notifier: NotificationService,
    today: Optional[date] = None,
) -> Dict[str, int]:
    """
    Tell every active user that the office is closed tomorrow. One email per
    user lists all of tomorrow's active holidays. Delivery failures are
    counted, never raised.
    """
    tomorrow = (today or date.today()) + timedelta(days=1)
    holidays = (
        db.query(Holiday)
        .filter(Holiday.holiday_date == tomorrow, Holiday.is_active.is_(True))
        .order_by(Holiday.id)
        .all()
    )
    if not holidays:
        logger.info(f"No holidays on {tomorrow.isoformat()}")
        return {"found": 0, "recipients": 0, "sent": 0, "failed": 0}

    recipients = db.query(User).filter(User.is_active.is_(True)).order_by(User.id).all()
    logger.info(f"Found {len(holidays)} holiday(s) on {tomorrow.isoformat()}; notifying {len(recipients)} user(s)")

    context = {
        "holiday_names": ", ".join(h.name for h in holidays),
        "holiday_types": ", ".join(dict.fromkeys(h.holiday_type for h in holidays)),
        "holiday_date": tomorrow,
    }
    sent = failed = 0
    for user in recipients:
        ok = notifier.notify(email_templates.HOLIDAY_REMINDER, user.email, {
            **context,
            "employee_name": user.display_name,
        })
        if ok:
            sent += 1
        else:
            failed += 1

    return {"found": len(holidays), "recipients": len(recipients), "sent": sent, "failed": failed}
