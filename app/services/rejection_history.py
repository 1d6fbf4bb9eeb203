from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from app.models.leave_request import LeaveRequest
from app.models.rejection_history import RejectionHistoryEntry


def append_rejection(
    db: Session,
    leave_request: LeaveRequest,
    reviewer_id: int,
    reason: str,
    admin_remarks: Optional[str] = None,
) -> RejectionHistoryEntry:
    """
    Snapshot the request as it stands right now. Call before the request's
    status and review fields are changed.
    """
    entry = RejectionHistoryEntry(
        leave_request_id=leave_request.id,
        attempt_number=leave_request.submission_count,
        rejected_by=reviewer_id,
        rejection_reason=reason,
        admin_remarks=admin_remarks,
        rejected_at=datetime.now(timezone.utc),
        leave_type=leave_request.leave_type,
        leave_duration=leave_request.leave_duration,
        half_day_slot=leave_request.half_day_slot,
        start_date=leave_request.start_date,
        end_date=leave_request.end_date,
        reason=leave_request.reason,
    )
    db.add(entry)
    return entry


def list_rejection_history(db: Session, leave_request_id: int) -> List[RejectionHistoryEntry]:
    return (
        db.query(RejectionHistoryEntry)
        .filter(RejectionHistoryEntry.leave_request_id == leave_request_id)
        .order_by(RejectionHistoryEntry.attempt_number, RejectionHistoryEntry.id)
        .all()
    )
