"""
Leave request state machine.

    Pending --approve--> Approved            (terminal, ledger charged)
    Pending --reject/cancel--> Rejected
    Rejected --resubmit--> Pending           (same record, submission_count + 1)

Functions here validate input and guard transitions on a LeaveRequest; they
never touch the ledger or commit. Orchestration lives in leave_workflow.
"""
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Mapping, Optional

from app.core.config import settings
from app.core.exceptions import ForbiddenError, InvalidStateError, LimitExceededError, ValidationError
from app.models.leave_request import (
    CANCELLED_BY_EMPLOYEE_REMARK,
    HalfDaySlot,
    LeaveDuration,
    LeaveRequest,
    LeaveStatus,
    LeaveType,
)
from app.services.leave_ledger import DeductionOutcome


@dataclass
class LeaveDetails:
    leave_type: LeaveType
    leave_duration: LeaveDuration
    half_day_slot: Optional[HalfDaySlot]
    start_date: date
    end_date: date
    reason: str


def _coerce_enum(enum_cls, value: Any, field: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field} must be one of: {allowed}", details={"field": field, "value": value})


def _coerce_date(value: Any, field: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
    raise ValidationError(f"{field} must be a valid date (YYYY-MM-DD)", details={"field": field})


def validate_leave_details(
    leave_type: Any,
    leave_duration: Any,
    half_day_slot: Any,
    start_date: Any,
    end_date: Any,
    reason: Optional[str],
) -> LeaveDetails:
    """Normalize raw leave fields, raising ValidationError on anything malformed."""
    required = {
        "leave_type": leave_type,
        "leave_duration": leave_duration,
        "start_date": start_date,
        "end_date": end_date,
        "reason": reason,
    }
    missing = [name for name, value in required.items() if value is None or (isinstance(value, str) and not value.strip())]
    if missing:
        raise ValidationError("All fields are required", details={"missing": missing})

    leave_type = _coerce_enum(LeaveType, leave_type, "leave_type")
    leave_duration = _coerce_enum(LeaveDuration, leave_duration, "leave_duration")
    start = _coerce_date(start_date, "start_date")
    end = _coerce_date(end_date, "end_date")
    if end < start:
        raise ValidationError("Invalid date range: end_date is before start_date")

    slot = None
    if leave_duration == LeaveDuration.HALF_DAY:
        if half_day_slot is None or (isinstance(half_day_slot, str) and not half_day_slot.strip()):
            raise ValidationError("half_day_slot is required for Half Day leave", details={"missing": ["half_day_slot"]})
        slot = _coerce_enum(HalfDaySlot, half_day_slot, "half_day_slot")

    return LeaveDetails(
        leave_type=leave_type,
        leave_duration=leave_duration,
        half_day_slot=slot,
        start_date=start,
        end_date=end,
        reason=reason.strip(),
    )


def new_request(employee_id: int, details: LeaveDetails) -> LeaveRequest:
    return LeaveRequest(
        employee_id=employee_id,
        leave_type=details.leave_type.value,
        leave_duration=details.leave_duration.value,
        half_day_slot=details.half_day_slot.value if details.half_day_slot else None,
        start_date=details.start_date,
        end_date=details.end_date,
        reason=details.reason,
        status=LeaveStatus.PENDING.value,
        submission_count=1,
        balance_deducted=0.0,
    )


def _require_owner(leave_request: LeaveRequest, employee_id: int):
    if leave_request.employee_id != employee_id:
        raise ForbiddenError("You can only manage your own leave requests")


def _require_status(leave_request: LeaveRequest, expected: LeaveStatus, action: str):
    if leave_request.status != expected.value:
        raise InvalidStateError(
            f"Only {expected.value.lower()} requests can be {action}",
            details={"current_status": leave_request.status},
        )


def require_reviewable(leave_request: LeaveRequest, reviewer_id: int, action: str):
    """Guards shared by approve and reject: no self-review, Pending only."""
    if leave_request.employee_id == reviewer_id:
        raise ForbiddenError(f"You cannot {action} your own leave request")
    _require_status(leave_request, LeaveStatus.PENDING, f"{action}d")


def cancel(leave_request: LeaveRequest, employee_id: int) -> LeaveRequest:
    _require_owner(leave_request, employee_id)
    _require_status(leave_request, LeaveStatus.PENDING, "cancelled")
    leave_request.status = LeaveStatus.REJECTED.value
    leave_request.admin_remarks = CANCELLED_BY_EMPLOYEE_REMARK
    leave_request.reviewed_at = datetime.now(timezone.utc)
    return leave_request


def mark_approved(
    leave_request: LeaveRequest,
    reviewer_id: int,
    outcome: DeductionOutcome,
    admin_remarks: Optional[str] = None,
) -> LeaveRequest:
    leave_request.status = LeaveStatus.APPROVED.value
    leave_request.is_paid = outcome.is_paid
    leave_request.deducted_from = outcome.deducted_from.value
    leave_request.balance_deducted = outcome.balance_deducted
    leave_request.admin_remarks = admin_remarks or ""
    leave_request.reviewed_by = reviewer_id
    leave_request.reviewed_at = datetime.now(timezone.utc)
    return leave_request


def mark_rejected(
    leave_request: LeaveRequest,
    reviewer_id: int,
    reason: str,
    admin_remarks: Optional[str] = None,
) -> LeaveRequest:
    leave_request.status = LeaveStatus.REJECTED.value
    leave_request.rejection_reason = reason
    leave_request.admin_remarks = admin_remarks or ""
    leave_request.reviewed_by = reviewer_id
    leave_request.reviewed_at = datetime.now(timezone.utc)
    return leave_request


def resubmit(leave_request: LeaveRequest, employee_id: int, updated_fields: Mapping[str, Any]) -> LeaveRequest:
    """
    Re-file a rejected request in place. The submission cap is checked before
    anything on the record changes.
    """
    _require_owner(leave_request, employee_id)
    _require_status(leave_request, LeaveStatus.REJECTED, "resubmitted")

    max_submissions = settings.leave.max_submissions
    if leave_request.submission_count >= max_submissions:
        raise LimitExceededError(max_submissions)

    details = validate_leave_details(
        updated_fields.get("leave_type"),
        updated_fields.get("leave_duration", LeaveDuration.FULL_DAY),
        updated_fields.get("half_day_slot"),
        updated_fields.get("start_date"),
        updated_fields.get("end_date"),
        updated_fields.get("reason"),
    )

    leave_request.leave_type = details.leave_type.value
    leave_request.leave_duration = details.leave_duration.value
    leave_request.half_day_slot = details.half_day_slot.value if details.half_day_slot else None
    leave_request.start_date = details.start_date
    leave_request.end_date = details.end_date
    leave_request.reason = details.reason

    leave_request.submission_count += 1
    if leave_request.original_request_id is None:
        leave_request.original_request_id = leave_request.id

    leave_request.status = LeaveStatus.PENDING.value
    leave_request.reviewed_by = None
    leave_request.reviewed_at = None
    leave_request.admin_remarks = None
    leave_request.rejection_reason = None
    return leave_request


def attempts_left(leave_request: LeaveRequest) -> int:
    return max(0, settings.leave.max_submissions - leave_request.submission_count)
