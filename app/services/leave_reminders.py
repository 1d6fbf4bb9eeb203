import logging
from datetime import date, timedelta
from typing import Dict, Optional

from sqlalchemy.orm import Session, joinedload

from app.models.leave_request import LeaveRequest, LeaveStatus
from app.services import email_templates
from app.services.notification import NotificationService

logger = logging.getLogger(__name__)


def send_leave_reminders(
    db: Session,
    notifier: NotificationService,
    today: Optional[date] = None,
) -> Dict[str, int]:
    """
    Remind every employee whose approved leave starts tomorrow.
    Individual delivery failures are counted, never raised.
    """
    tomorrow = (today or date.today()) + timedelta(days=1)
    leaves = (
        db.query(LeaveRequest)
        .options(joinedload(LeaveRequest.employee))
        .filter(
            LeaveRequest.status == LeaveStatus.APPROVED.value,
            LeaveRequest.start_date == tomorrow,
        )
        .all()
    )
    logger.info(f"Found {len(leaves)} leaves starting {tomorrow.isoformat()}")

    sent = failed = 0
    for leave in leaves:
        employee = leave.employee
        if not employee or not employee.email:
            logger.warning(f"No email found for leave request {leave.id}")
            failed += 1
            continue

        ok = notifier.notify(email_templates.LEAVE_REMINDER, employee.email, {
            "employee_name": employee.display_name,
            "leave_type": leave.leave_type,
            "leave_duration": leave.leave_duration,
            "half_day_slot": leave.half_day_slot,
            "start_date": leave.start_date,
            "end_date": leave.end_date,
            "reason": leave.reason,
        })
        if ok:
            sent += 1
        else:
            failed += 1

    return {"found": len(leaves), "sent": sent, "failed": failed}
