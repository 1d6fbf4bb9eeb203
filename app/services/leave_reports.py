"""
Admin dashboard queries over approved leave.
"""
import calendar
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import ValidationError
from app.models.leave_request import LeaveRequest, LeaveStatus, LeaveType
from app.models.user import User

TYPE_CODES = {
    LeaveType.SICK.value: "SL",
    LeaveType.CASUAL.value: "CL",
    LeaveType.EMERGENCY.value: "EL",
}


def type_code(leave_type: str) -> str:
    return TYPE_CODES.get(leave_type, "OL")


def _approved_with_employee(db: Session):
    return (
        db.query(LeaveRequest, User)
        .join(User, LeaveRequest.employee_id == User.id)
        .filter(LeaveRequest.status == LeaveStatus.APPROVED.value)
    )


def _to_entry(leave: LeaveRequest, employee: User) -> Dict[str, Any]:
    return {
        "request_id": leave.id,
        "employee_id": employee.id,
        "employee_name": employee.display_name,
        "leave_type": leave.leave_type,
        "type": type_code(leave.leave_type),
        "leave_duration": leave.leave_duration,
        "start_date": leave.start_date,
        "end_date": leave.end_date,
    }


def summary_stats(db: Session) -> Dict[str, int]:
    counts = dict(
        db.query(LeaveRequest.status, func.count(LeaveRequest.id))
        .group_by(LeaveRequest.status)
        .all()
    )
    return {
        "pending": counts.get(LeaveStatus.PENDING.value, 0),
        "approved": counts.get(LeaveStatus.APPROVED.value, 0),
        "rejected": counts.get(LeaveStatus.REJECTED.value, 0),
    }


def employees_on_leave(db: Session, on_date: Optional[date] = None) -> List[Dict[str, Any]]:
    on_date = on_date or date.today()
    rows = (
        _approved_with_employee(db)
        .filter(LeaveRequest.start_date <= on_date, LeaveRequest.end_date >= on_date)
        .order_by(LeaveRequest.start_date)
        .all()
    )
    return [_to_entry(leave, employee) for leave, employee in rows]


def upcoming_leaves(
    db: Session,
    from_date: Optional[date] = None,
    window_days: Optional[int] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    from_date = from_date or date.today()
    window_days = settings.leave.upcoming_window_days if window_days is None else window_days
    limit = settings.leave.upcoming_limit if limit is None else limit
    rows = (
        _approved_with_employee(db)
        .filter(
            LeaveRequest.start_date >= from_date,
            LeaveRequest.start_date <= from_date + timedelta(days=window_days),
        )
        .order_by(LeaveRequest.start_date, LeaveRequest.id)
        .limit(limit)
        .all()
    )
    return [_to_entry(leave, employee) for leave, employee in rows]


def calendar_month(db: Session, year: int, month: int) -> List[Dict[str, Any]]:
    if not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12")
    first = date(year, month, 1)
    last = date(year, month, calendar.monthrange(year, month)[1])
    rows = (
        _approved_with_employee(db)
        .filter(LeaveRequest.start_date <= last, LeaveRequest.end_date >= first)
        .order_by(LeaveRequest.start_date, LeaveRequest.id)
        .all()
    )
    return [_to_entry(leave, employee) for leave, employee in rows]
